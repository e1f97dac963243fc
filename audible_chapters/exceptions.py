"""
Exception hierarchy for the Audible chapters client.

Fatal errors (configuration, authentication, registration, validation,
crypto) are raised to the caller. Chapter fetch failures are raised
internally as FetchError and absorbed by ChapterClient.fetch_chapters().
"""


class AudibleError(Exception):
    """Base exception for Audible API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status: {self.status_code})"
        return self.message


class ConfigurationError(AudibleError):
    """Required configuration value missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class AuthenticationError(AudibleError):
    """Token exchange rejected or failed at the transport layer."""


class RegistrationError(AudibleError):
    """Device registration rejected or malformed."""


class ValidationError(AudibleError):
    """Upstream payload is missing a required structural key."""

    def __init__(self, message: str, key: str, asin: str) -> None:
        super().__init__(message)
        self.key = key
        self.asin = asin


class FetchError(AudibleError):
    """Chapter metadata could not be fetched."""

    def __init__(self, message: str, asin: str, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code)
        self.asin = asin


class CryptoError(AudibleError):
    """Key generation, key loading or signing failed."""
