"""
Request signing for the Audible signed-content API.

A signed request carries the device's ADP token and an RSA signature over a
canonical description of the request (method, path, timestamp, body, token).
The canonicalization and header layout are the vendor's, reproduced as the
ADP scheme below; they sit behind ``SigningStrategy`` so a different layout can
be swapped in and tested on its own.

Usage:
    signer = RequestSigner(adp_token, private_key_pem)
    headers = signer.sign(RequestMetadata("GET", "/1.0/content/B079LRSMNN/metadata?..."))

    # or as an httpx auth hook
    await client.get(url, auth=AdpAuth(signer))
"""

import base64
from abc import ABC, abstractmethod
from collections.abc import Generator
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import ConfigurationError, CryptoError
from .device import load_private_key

SignatureHeaders = dict[str, str]


@dataclass(frozen=True)
class RequestMetadata:
    """The parts of a request that a signature binds to."""

    method: str
    path: str  # path including query string, e.g. "/1.0/content/X/metadata?a=b"
    body: str = ""

    def __post_init__(self):
        # Newline is the field separator of the canonical string
        if "\n" in self.method or "\n" in self.path:
            raise ValueError("method and path must not contain newlines")
        object.__setattr__(self, "method", self.method.upper())

    @classmethod
    def from_request(cls, request: httpx.Request) -> "RequestMetadata":
        """Build metadata from an outgoing httpx request."""
        return cls(
            method=request.method,
            path=request.url.raw_path.decode("ascii"),
            body=request.content.decode("utf-8") if request.content else "",
        )


def format_timestamp(timestamp: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp.microsecond // 1000:03d}Z"


class SigningStrategy(ABC):
    """Canonicalization and header layout for one signing scheme."""

    algorithm: str

    @abstractmethod
    def canonical_bytes(self, metadata: RequestMetadata, adp_token: str, timestamp: str) -> bytes:
        """Bytes fed to the RSA signature."""

    @abstractmethod
    def build_headers(self, adp_token: str, signature: str, timestamp: str) -> SignatureHeaders:
        """Headers carrying the token and base64 signature."""

    def sign(self, key: rsa.RSAPrivateKey, data: bytes) -> bytes:
        return key.sign(data, padding.PKCS1v15(), hashes.SHA256())


class AdpSignatureStrategy(SigningStrategy):
    """The ADP scheme used by the Audible mobile apps: SHA256withRSA over newline-joined fields."""

    algorithm = "SHA256withRSA:1.0"

    def canonical_bytes(self, metadata: RequestMetadata, adp_token: str, timestamp: str) -> bytes:
        return f"{metadata.method}\n{metadata.path}\n{timestamp}\n{metadata.body}\n{adp_token}".encode("utf-8")

    def build_headers(self, adp_token: str, signature: str, timestamp: str) -> SignatureHeaders:
        return {
            "x-adp-token": adp_token,
            "x-adp-alg": self.algorithm,
            "x-adp-signature": f"{signature}:{timestamp}",
        }


class RequestSigner:
    """
    Produces signed-request headers with a device's ADP token and private key.

    Same (token, key, metadata, timestamp) always yields the same headers.
    """

    def __init__(
        self,
        adp_token: str,
        private_key: str | rsa.RSAPrivateKey,
        strategy: SigningStrategy | None = None,
    ):
        """
        Args:
            adp_token: ADP token from device registration
            private_key: Device RSA key, as PEM text (escaped newlines accepted) or a key object
            strategy: Signing scheme (defaults to the ADP scheme)

        Raises:
            ConfigurationError: Token missing or contains a newline
            CryptoError: Private key cannot be loaded
        """
        if not adp_token:
            raise ConfigurationError("ADP token is required for request signing", missing=["ADP_TOKEN"])
        if "\n" in adp_token:
            raise ConfigurationError("ADP token must be a single line")
        self._adp_token = adp_token
        self._key = private_key if isinstance(private_key, rsa.RSAPrivateKey) else load_private_key(private_key)
        self.strategy = strategy or AdpSignatureStrategy()

    @property
    def adp_token(self) -> str:
        return self._adp_token

    def sign(self, metadata: RequestMetadata, timestamp: datetime | None = None) -> SignatureHeaders:
        """
        Sign a request.

        Args:
            metadata: Method, path (with query) and body of the request
            timestamp: Signing time; defaults to now (UTC)

        Returns:
            Headers to attach to the request

        Raises:
            CryptoError: If the signature cannot be computed
        """
        stamp = format_timestamp(timestamp or datetime.now(timezone.utc))
        data = self.strategy.canonical_bytes(metadata, self._adp_token, stamp)
        try:
            raw = self.strategy.sign(self._key, data)
        except (ValueError, TypeError) as e:
            raise CryptoError(f"Request signing failed: {e}") from e
        signature = base64.b64encode(raw).decode("ascii")
        return self.strategy.build_headers(self._adp_token, signature, stamp)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(strategy={type(self.strategy).__name__})"


def sign_request(
    adp_token: str,
    private_key: str | rsa.RSAPrivateKey,
    metadata: RequestMetadata,
    timestamp: datetime | None = None,
) -> SignatureHeaders:
    """One-shot form of ``RequestSigner(adp_token, private_key).sign(metadata, timestamp)``."""
    return RequestSigner(adp_token, private_key).sign(metadata, timestamp)


class AdpAuth(httpx.Auth):
    """httpx auth hook that signs every outgoing request."""

    requires_request_body = True

    def __init__(self, signer: RequestSigner):
        self.signer = signer

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers.update(self.signer.sign(RequestMetadata.from_request(request)))
        yield request
