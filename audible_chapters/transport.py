"""
Shared HTTP plumbing for the Audible endpoints.

Every outbound call goes through an ``httpx.AsyncClient``. Callers may inject
a client (shared across many calls) or a transport (tests, custom stacks);
otherwise a short-lived client is opened for the call.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from .config import DEFAULT_TIMEOUT_SECONDS

# Fixed mobile client identity expected by the token and registration endpoints
USER_AGENT = "Audible/3.92.0 (iPhone; iOS 15.0; Scale/3.00)"


@asynccontextmanager
async def open_client(
    http_client: httpx.AsyncClient | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a new one closed on exit."""
    if http_client is not None:
        yield http_client
        return

    async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
        yield client
