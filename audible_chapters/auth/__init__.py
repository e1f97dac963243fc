"""
Audible device authentication.

- DeviceAuthenticator: password-grant token exchange
- DeviceIdentity: RSA keypair + device serial
- DeviceRegistrar: device registration -> ADP token
- RequestSigner: signed-request headers for the content API
- AudibleAuthFlow: the whole chain as a single call
"""

from .authenticator import CLIENT_ID, DeviceAuthenticator
from .device import (
    DEVICE_TYPE,
    DeviceIdentity,
    escape_pem,
    generate_serial_number,
    load_private_key,
    unescape_pem,
)
from .flow import AudibleAuthFlow, generate_config_string, save_config_to_file
from .models import AuthResult, Credentials, DeviceRegistration, SessionTokens
from .registrar import DeviceRegistrar, build_registration_payload
from .signing import (
    AdpAuth,
    AdpSignatureStrategy,
    RequestMetadata,
    RequestSigner,
    SignatureHeaders,
    SigningStrategy,
    format_timestamp,
    sign_request,
)

__all__ = [
    "CLIENT_ID",
    "DEVICE_TYPE",
    "AdpAuth",
    "AdpSignatureStrategy",
    "AudibleAuthFlow",
    "AuthResult",
    "Credentials",
    "DeviceAuthenticator",
    "DeviceIdentity",
    "DeviceRegistrar",
    "DeviceRegistration",
    "RequestMetadata",
    "RequestSigner",
    "SessionTokens",
    "SignatureHeaders",
    "SigningStrategy",
    "build_registration_payload",
    "escape_pem",
    "format_timestamp",
    "generate_config_string",
    "generate_serial_number",
    "load_private_key",
    "save_config_to_file",
    "sign_request",
    "unescape_pem",
]
