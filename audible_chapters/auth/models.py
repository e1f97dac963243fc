"""
Pydantic models and records for the authentication / registration flow.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..regions import get_region


class Credentials(BaseModel):
    """One-time login input. Never persisted."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: SecretStr
    region: str = "us"

    @field_validator("email")
    @classmethod
    def _email_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("email is required")
        return value

    @field_validator("region")
    @classmethod
    def _known_region(cls, value: str) -> str:
        # ConfigurationError propagates unwrapped: unknown regions are a config error
        return get_region(value).code


class SessionTokens(BaseModel):
    """Short-lived session returned by the token exchange."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str = Field(min_length=1, repr=False)
    refresh_token: str | None = Field(default=None, repr=False)
    expires_in: int | None = None


@dataclass(frozen=True)
class DeviceRegistration:
    """Durable authorization for one registered device."""

    adp_token: str = field(repr=False)
    serial_number: str


class AuthResult(BaseModel):
    """
    Outcome of the authentication + registration flow.

    Serialized with camelCase aliases (adpToken, privateKey) for callers such
    as an HTTP route or the CLI.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    adp_token: str | None = Field(default=None, alias="adpToken", repr=False)
    private_key: str | None = Field(default=None, alias="privateKey", repr=False)
    message: str | None = None

    def to_response(self) -> dict:
        """Dict form with aliases, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
