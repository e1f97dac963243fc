"""
Audible chapter metadata client.

Provides:
- Device authentication and registration (ADP token + RSA private key)
- Signed requests against the Audible content API
- Chapter fetching, validation and region-aware title cleanup
- Batch processing over a shared async HTTP client
- Configuration via environment, .env and config.yaml
- Rich logging and a Typer CLI
"""

from .auth import (
    AudibleAuthFlow,
    AuthResult,
    Credentials,
    DeviceAuthenticator,
    DeviceIdentity,
    DeviceRegistrar,
    RequestMetadata,
    RequestSigner,
    generate_config_string,
    save_config_to_file,
    sign_request,
)
from .chapters import ChapterClient, ChapterRecord, ChapterSet, process_many
from .config import AudibleSettings, CredentialSettings, Settings, get_settings, reload_settings
from .exceptions import (
    AudibleError,
    AuthenticationError,
    ConfigurationError,
    CryptoError,
    FetchError,
    RegistrationError,
    ValidationError,
)
from .logging import configure_logging, get_logger
from .regions import REGIONS, Region, get_region, list_regions

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Auth
    "AudibleAuthFlow",
    "AuthResult",
    "Credentials",
    "DeviceAuthenticator",
    "DeviceIdentity",
    "DeviceRegistrar",
    "RequestMetadata",
    "RequestSigner",
    "generate_config_string",
    "save_config_to_file",
    "sign_request",
    # Chapters
    "ChapterClient",
    "ChapterRecord",
    "ChapterSet",
    "process_many",
    # Config
    "AudibleSettings",
    "CredentialSettings",
    "Settings",
    "get_settings",
    "reload_settings",
    # Errors
    "AudibleError",
    "AuthenticationError",
    "ConfigurationError",
    "CryptoError",
    "FetchError",
    "RegistrationError",
    "ValidationError",
    # Logging
    "configure_logging",
    "get_logger",
    # Regions
    "REGIONS",
    "Region",
    "get_region",
    "list_regions",
]
