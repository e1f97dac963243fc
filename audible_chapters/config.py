"""
Configuration management using pydantic-settings.
Loads from config.yaml, .env, and environment variables.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .regions import get_region

# Load .env file at module import
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_AUTH_BASE_URL = "https://api.audible.com"
DEFAULT_TIMEOUT_SECONDS = 30.0


class CredentialSettings(BaseSettings):
    """
    Device secrets produced by device registration.

    Read from ADP_TOKEN and PRIVATE_KEY. The private key is stored as PEM text
    with its newlines escaped as a literal backslash-n sequence.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
    )

    adp_token: str | None = Field(default=None, description="ADP token issued at device registration")
    private_key: str | None = Field(default=None, description="Device RSA private key (PEM, escaped newlines)")

    @field_validator("adp_token", "private_key", mode="before")
    @classmethod
    def _blank_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("private_key")
    @classmethod
    def _unescape_private_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().strip('"').replace("\\n", "\n")

    @property
    def missing(self) -> list[str]:
        """Names of the required values that are not set."""
        names = []
        if not self.adp_token:
            names.append("ADP_TOKEN")
        if not self.private_key:
            names.append("PRIVATE_KEY")
        return names

    def require(self) -> tuple[str, str]:
        """
        Return (adp_token, private_key), failing fast if either is absent.

        Raises:
            ConfigurationError: Naming every missing value
        """
        missing = self.missing
        if missing:
            raise ConfigurationError(
                f"Missing required configuration value(s): {' and '.join(missing)}",
                missing=missing,
            )
        return self.adp_token, self.private_key  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"CredentialSettings(adp_token={'set' if self.adp_token else None}, private_key={'set' if self.private_key else None})"

    __str__ = __repr__


class AudibleSettings(BaseSettings):
    """Audible API settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIBLE_",
        extra="ignore",
    )

    region: str = Field(default="us", description="Audible marketplace region (us, uk, de, etc.)")
    auth_base_url: str = Field(
        default=DEFAULT_AUTH_BASE_URL,
        description="Base URL for the token exchange and device registration endpoints",
    )
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, description="Per-request timeout in seconds")
    max_concurrent_requests: int = Field(default=5, description="Concurrent chapter fetches in batch mode")

    @field_validator("region")
    @classmethod
    def _known_region(cls, value: str) -> str:
        try:
            return get_region(value).code
        except ConfigurationError as e:
            raise ValueError(e.message) from e

    @field_validator("auth_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    audible: AudibleSettings = Field(default_factory=AudibleSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)

    verbose: bool = Field(default=True)
    debug: bool = Field(default=False)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from config.yaml and environment."""
        config_data: dict[str, Any] = {}

        if config_path is None:
            config_path = Path("config.yaml")

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_content: Any = yaml.safe_load(f)
                yaml_config: dict[str, Any] = yaml_content or {}

            if "audible" in yaml_config:
                config_data["audible"] = AudibleSettings(**yaml_config["audible"])  # type: ignore
            # Secrets are env-only: strip from YAML and warn
            if "credentials" in yaml_config:
                logger.warning(
                    "credentials found in config.yaml - ADP_TOKEN and PRIVATE_KEY are env-var only. "
                    "Use environment variables or a .env file instead. Ignoring YAML value."
                )
            if "verbose" in yaml_config:
                config_data["verbose"] = yaml_config["verbose"]
            if "debug" in yaml_config:
                config_data["debug"] = yaml_config["debug"]

        if "audible" not in config_data:
            config_data["audible"] = AudibleSettings()

        config_data["credentials"] = CredentialSettings()

        return cls(**config_data)  # type: ignore


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """Reload settings from config."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
