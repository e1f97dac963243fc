"""
Password-grant token exchange against the Audible auth endpoint.
"""

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..config import DEFAULT_AUTH_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from ..exceptions import AuthenticationError
from ..logging import EVENT_AUTHENTICATED, event_extra
from ..transport import USER_AGENT, open_client
from .models import Credentials, SessionTokens

logger = logging.getLogger(__name__)

CLIENT_ID = "YTJtUmZ5cGJvWWhkNHBrYmhuWVpZ"
GRANT_TYPE = "password"
SCOPE = "all:device"
TOKEN_PATH = "/auth/token"


class DeviceAuthenticator:
    """
    Exchanges email/password/region for a session access token.

    Single attempt per call; either a usable session comes back or an
    AuthenticationError is raised.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_AUTH_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            base_url: Auth API base URL (no trailing slash)
            timeout: Request timeout in seconds
            transport: Optional httpx transport for a client opened per call
            http_client: Optional shared client (takes precedence over transport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client = http_client

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    @staticmethod
    def build_form(credentials: Credentials) -> dict[str, str]:
        """Form body for the token request. Contains the plain password."""
        return {
            "auth_country": credentials.region,
            "client_id": CLIENT_ID,
            "grant_type": GRANT_TYPE,
            "username": credentials.email,
            "password": credentials.password.get_secret_value(),
            "scope": SCOPE,
        }

    async def authenticate(self, credentials: Credentials) -> SessionTokens:
        """
        Obtain session tokens for the given credentials.

        Args:
            credentials: Email, password and region

        Returns:
            SessionTokens with a usable access token

        Raises:
            AuthenticationError: Non-200 status, malformed body, or transport failure
        """
        logger.info("Authenticating with Audible for marketplace: %s", credentials.region)

        try:
            async with open_client(self._http_client, self._transport, self.timeout) as client:
                response = await client.post(
                    self.token_url,
                    data=self.build_form(credentials),
                    headers={"User-Agent": USER_AGENT},
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as e:
            raise AuthenticationError(f"Token request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request failed: {e.__class__.__name__}: {e}") from e

        if response.status_code != 200:
            logger.error("Authentication failed, response status: %d", response.status_code)
            raise AuthenticationError("Token request rejected by Audible", status_code=response.status_code)

        try:
            data = response.json()
            tokens = SessionTokens.model_validate(data)
        except (ValueError, PydanticValidationError) as e:
            # ValueError covers undecodable JSON bodies
            raise AuthenticationError(
                "Malformed token response from Audible",
                status_code=response.status_code,
            ) from e

        logger.info(
            "Authentication successful",
            extra=event_extra(EVENT_AUTHENTICATED, region=credentials.region, expires_in=tokens.expires_in),
        )
        return tokens
