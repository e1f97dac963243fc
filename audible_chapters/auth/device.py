"""
Device identity: RSA keypair and serial number for a simulated iPhone client.

Pure computation, no network.
"""

import logging
import secrets
from dataclasses import dataclass, field

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..exceptions import CryptoError

logger = logging.getLogger(__name__)

DEVICE_TYPE = "A2CZJZGLK2JJVM"
KEY_SIZE = 2048
PUBLIC_EXPONENT = 0x10001
SERIAL_RANDOM_BYTES = 10


def generate_serial_number() -> str:
    """Device type prefix, a dash, and 20 uppercase hex characters."""
    return f"{DEVICE_TYPE}-{secrets.token_bytes(SERIAL_RANDOM_BYTES).hex().upper()}"


def generate_private_key() -> rsa.RSAPrivateKey:
    """
    Generate a fresh 2048-bit RSA key.

    Raises:
        CryptoError: If the backend cannot generate the key
    """
    try:
        return rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"RSA key generation failed: {e}") from e


def private_key_to_pem(key: rsa.RSAPrivateKey) -> str:
    """Unencrypted PKCS#1 ("BEGIN RSA PRIVATE KEY") PEM text."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def public_key_to_pem(key: rsa.RSAPrivateKey) -> str:
    """SubjectPublicKeyInfo PEM of the key's public half."""
    return (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


def load_private_key(pem: str | bytes) -> rsa.RSAPrivateKey:
    """
    Parse an RSA private key from PEM (PKCS#1 or PKCS#8, unencrypted).

    Escaped newlines (as stored in PRIVATE_KEY) are accepted.

    Raises:
        CryptoError: If the text is not an RSA private key
    """
    if isinstance(pem, str):
        pem = unescape_pem(pem).encode("ascii", errors="replace")
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CryptoError("Could not load device private key: not a valid unencrypted PEM key") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise CryptoError(f"Device private key must be RSA, got {type(key).__name__}")
    return key


def escape_pem(pem: str) -> str:
    """Escape newlines so the PEM fits on one configuration line."""
    return pem.replace("\n", "\\n")


def unescape_pem(text: str) -> str:
    return text.replace("\\n", "\n")


@dataclass(frozen=True)
class DeviceIdentity:
    """An RSA keypair plus serial number representing one client device."""

    serial_number: str
    private_key_pem: str = field(repr=False)
    public_key_pem: str = field(repr=False)

    @classmethod
    def generate(cls) -> "DeviceIdentity":
        """
        Create a new identity with a fresh key and random serial.

        Raises:
            CryptoError: If key generation fails (not retryable)
        """
        key = generate_private_key()
        identity = cls(
            serial_number=generate_serial_number(),
            private_key_pem=private_key_to_pem(key),
            public_key_pem=public_key_to_pem(key),
        )
        logger.debug("Generated device identity %s", identity.serial_number)
        return identity

    @classmethod
    def from_private_key(cls, pem: str, serial_number: str | None = None) -> "DeviceIdentity":
        """Rebuild an identity around an existing private key."""
        key = load_private_key(pem)
        return cls(
            serial_number=serial_number or generate_serial_number(),
            private_key_pem=private_key_to_pem(key),
            public_key_pem=public_key_to_pem(key),
        )

    @property
    def device_type(self) -> str:
        return self.serial_number.split("-", 1)[0]
