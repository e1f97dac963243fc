"""
End-to-end device authentication: credentials in, ADP token + private key out.

Runs DeviceAuthenticator -> DeviceIdentity.generate -> DeviceRegistrar and
reports the outcome as an AuthResult instead of raising, so an HTTP route or
CLI can hand it straight to the user.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

import httpx

from ..config import AudibleSettings
from ..exceptions import AudibleError, AuthenticationError, CryptoError, RegistrationError
from ..utils.logging import log_success
from ..utils.security import secure_file_create
from .authenticator import DeviceAuthenticator
from .device import DeviceIdentity, escape_pem
from .models import AuthResult, Credentials
from .registrar import DeviceRegistrar

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "audnexus-audible-auth.env"


class AudibleAuthFlow:
    """
    Authentication + device registration facade.

    Example:
        flow = AudibleAuthFlow()
        result = await flow.authenticate(Credentials(email=..., password=..., region="us"))
        if result.success:
            print(generate_config_string(result.adp_token, result.private_key))
    """

    def __init__(
        self,
        settings: AudibleSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        authenticator: DeviceAuthenticator | None = None,
        registrar: DeviceRegistrar | None = None,
    ):
        settings = settings or AudibleSettings()
        self.authenticator = authenticator or DeviceAuthenticator(
            base_url=settings.auth_base_url,
            timeout=settings.timeout,
            transport=transport,
        )
        self.registrar = registrar or DeviceRegistrar(
            base_url=settings.auth_base_url,
            timeout=settings.timeout,
            transport=transport,
        )

    async def authenticate(self, credentials: Credentials) -> AuthResult:
        """
        Log in, generate a device identity and register it.

        Returns:
            AuthResult with the ADP token and the newline-escaped private key
            on success, or success=False and a message on any failure
        """
        logger.info("Starting authentication process with Audible...")

        try:
            tokens = await self.authenticator.authenticate(credentials)
        except AuthenticationError as e:
            logger.error("Failed to get tokens from Audible: %s", e)
            return AuthResult(success=False, message=f"Failed to authenticate with Audible: {e}")
        except AudibleError as e:
            logger.error("Authentication error: %s", e)
            return AuthResult(success=False, message=f"Authentication failed: {e}")

        try:
            identity = DeviceIdentity.generate()
            registration = await self.registrar.register(tokens.access_token, identity, credentials.region)
        except (RegistrationError, CryptoError) as e:
            logger.error("Failed to register device with Audible: %s", e)
            return AuthResult(success=False, message=f"Failed to register device with Audible: {e}")
        except AudibleError as e:
            logger.error("Authentication error: %s", e)
            return AuthResult(success=False, message=f"Authentication failed: {e}")

        log_success("Successfully registered device %s with Audible", registration.serial_number, logger=logger)
        return AuthResult(
            success=True,
            adp_token=registration.adp_token,
            private_key=escape_pem(identity.private_key_pem),
        )


def generate_config_string(adp_token: str, private_key: str, generated_at: datetime | None = None) -> str:
    """
    Render the .env block holding the device secrets.

    Args:
        adp_token: ADP token
        private_key: PEM text; newlines are escaped if present
        generated_at: Timestamp for the header comment (default: now, UTC)
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    return (
        "# Audible Authentication Configuration\n"
        f"# Generated by audnexus on {generated_at.isoformat()}\n"
        "# Add these to your environment variables or .env file\n"
        "\n"
        f"ADP_TOKEN={adp_token}\n"
        f"PRIVATE_KEY={escape_pem(private_key)}\n"
    )


def save_config_to_file(adp_token: str, private_key: str, file_path: str | Path) -> bool:
    """
    Write the configuration block to ``file_path`` with owner-only permissions.

    Returns:
        True if the file was written
    """
    path = Path(file_path)
    saved = secure_file_create(path, generate_config_string(adp_token, private_key))
    if saved:
        logger.info("Configuration saved to file: %s", path)
    else:
        logger.error("Error saving config to file: %s", path)
    return saved
