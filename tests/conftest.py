"""Pytest configuration and shared fixtures."""

import copy
import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from audible_chapters.auth.device import escape_pem
from audible_chapters.logging import MODULE_LOGGER_NAME

ASIN = "B079LRSMNN"
ADP_TOKEN = "{enc:dGVzdA==}{key:a2V5}{iv:aXY=}{name:QURQVG9rZW5FbmNyeXB0aW9uS2V5}{serial:Mg==}"

SECRET_ENV_VARS = (
    "ADP_TOKEN",
    "PRIVATE_KEY",
    "AUDIBLE_REGION",
    "AUDIBLE_AUTH_BASE_URL",
    "AUDIBLE_TIMEOUT",
    "AUDIBLE_MAX_CONCURRENT_REQUESTS",
)

# Five chapters in vendor order; the second carries a bare numeric title
API_CHAPTERS: dict[str, Any] = {
    "content_metadata": {
        "chapter_info": {
            "brandIntroDurationMs": 2043,
            "brandOutroDurationMs": 5062,
            "chapters": [
                {"length_ms": 22664, "start_offset_ms": 0, "start_offset_sec": 0, "title": "Opening Credits"},
                {"length_ms": 945561, "start_offset_ms": 22664, "start_offset_sec": 23, "title": "1"},
                {"length_ms": 1191281, "start_offset_ms": 968225, "start_offset_sec": 968, "title": "Chapter_2"},
                {"length_ms": 1454626, "start_offset_ms": 2159506, "start_offset_sec": 2160, "title": "Chapter 3."},
                {"length_ms": 60933877, "start_offset_ms": 3614132, "start_offset_sec": 3614, "title": "End Credits"},
            ],
            "is_accurate": True,
            "runtime_length_ms": 64548009,
            "runtime_length_sec": 64548,
        }
    },
    "response_groups": ["always-returned", "chapter_info"],
}


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep secrets from the developer's environment / .env out of tests."""
    for name in SECRET_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def cleanup_package_logger():
    """Undo configure_logging() calls made by a test (CLI callbacks included)."""
    yield
    logger = logging.getLogger(MODULE_LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ============================================================================
# Keys and tokens
# ============================================================================


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    """One 2048-bit key per session; generation is slow."""
    return rsa.generate_private_key(public_exponent=0x10001, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key: rsa.RSAPrivateKey) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def escaped_private_key(private_key_pem: str) -> str:
    """PEM as stored in PRIVATE_KEY (literal backslash-n)."""
    return escape_pem(private_key_pem)


@pytest.fixture
def adp_token() -> str:
    return ADP_TOKEN


@pytest.fixture
def secrets_env(monkeypatch: pytest.MonkeyPatch, escaped_private_key: str) -> None:
    """ADP_TOKEN and PRIVATE_KEY set the way a .env file would set them."""
    monkeypatch.setenv("ADP_TOKEN", ADP_TOKEN)
    monkeypatch.setenv("PRIVATE_KEY", escaped_private_key)


# ============================================================================
# API payloads and transports
# ============================================================================


@pytest.fixture
def asin() -> str:
    return ASIN


@pytest.fixture
def api_chapters() -> dict[str, Any]:
    """Fresh copy of the chapter metadata response for B079LRSMNN."""
    return copy.deepcopy(API_CHAPTERS)


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """
    Build a MockTransport that records requests.

    Usage:
        transport = make_transport(lambda request: httpx.Response(200, json={...}))
        transport.requests  # list of httpx.Request seen
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        transport.requests = requests  # type: ignore[attr-defined]
        return transport

    return factory
