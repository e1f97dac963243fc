"""
Device registration: trades a session access token and a device identity for
a durable ADP token.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Any

import httpx

from ..config import DEFAULT_AUTH_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from ..exceptions import RegistrationError
from ..logging import EVENT_DEVICE_REGISTERED, event_extra
from ..regions import Region, get_region
from ..transport import USER_AGENT, open_client
from .device import DEVICE_TYPE, DeviceIdentity
from .models import DeviceRegistration

logger = logging.getLogger(__name__)

REGISTER_PATH = "/device/registerDevice"

APP_NAME = "Audible"
APP_VERSION = "3.92.0"
SOFTWARE_VERSION = "3.92.0"
DEVICE_MODEL = "iPhone"
OS_NAME = "iOS"
OS_VERSION = "15.0"


def build_device_name(today: date | None = None) -> str:
    """Display name shown in the account's device list, e.g. ``iPhone (audnexus-2024-05-01)``."""
    today = today or datetime.now(timezone.utc).date()
    return f"{DEVICE_MODEL} (audnexus-{today.isoformat()})"


def build_registration_payload(identity: DeviceIdentity, today: date | None = None) -> dict[str, Any]:
    """JSON body for the registerDevice endpoint."""
    return {
        "app_name": APP_NAME,
        "app_version": APP_VERSION,
        "device_model": DEVICE_MODEL,
        "device_serial": identity.serial_number,
        "os_name": OS_NAME,
        "os_version": OS_VERSION,
        "device_name": build_device_name(today),
        "software_version": SOFTWARE_VERSION,
        "device_type": DEVICE_TYPE,
        "public_key": identity.public_key_pem,
    }


class DeviceRegistrar:
    """
    Registers device identities and records every successful registration.

    The registry (serial -> ADP token) is scoped to this instance, only ever
    grows, and exists for introspection; nothing else depends on it.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_AUTH_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client = http_client
        self._registry: dict[str, str] = {}
        self._pending: set[str] = set()

    @property
    def register_url(self) -> str:
        return f"{self.base_url}{REGISTER_PATH}"

    @property
    def registered_devices(self) -> Mapping[str, str]:
        """Read-only view of serial -> ADP token for devices registered here."""
        return MappingProxyType(self._registry)

    def is_registered(self, serial_number: str) -> bool:
        return serial_number in self._registry

    async def register(
        self,
        access_token: str,
        identity: DeviceIdentity,
        region: Region | str = "us",
    ) -> DeviceRegistration:
        """
        Register a device and obtain its ADP token.

        Args:
            access_token: Session access token from DeviceAuthenticator
            identity: Freshly generated device identity
            region: Marketplace the account belongs to

        Returns:
            DeviceRegistration with the ADP token

        Raises:
            RegistrationError: Identity already registered, non-200 status,
                missing adp_token, or transport failure
            ConfigurationError: Unknown region code
        """
        region = get_region(region) if isinstance(region, str) else region
        serial = identity.serial_number

        if self.is_registered(serial) or serial in self._pending:
            raise RegistrationError(f"Device {serial} is already registered; generate a new identity")

        self._pending.add(serial)
        try:
            return await self._register(access_token, identity, region)
        finally:
            self._pending.discard(serial)

    async def _register(self, access_token: str, identity: DeviceIdentity, region: Region) -> DeviceRegistration:
        serial = identity.serial_number
        logger.info("Registering device %s with Audible (marketplace: %s)", serial, region.code)

        try:
            async with open_client(self._http_client, self._transport, self.timeout) as client:
                response = await client.post(
                    self.register_url,
                    json=build_registration_payload(identity),
                    headers={
                        "User-Agent": USER_AGENT,
                        "Authorization": f"Bearer {access_token}",
                    },
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as e:
            raise RegistrationError(f"Device registration timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RegistrationError(f"Device registration failed: {e.__class__.__name__}: {e}") from e

        logger.debug("Device registration response status: %d", response.status_code)

        if response.status_code != 200:
            raise RegistrationError("Device registration rejected by Audible", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise RegistrationError("Malformed device registration response", status_code=200) from e

        adp_token = data.get("adp_token") if isinstance(data, dict) else None
        if not isinstance(adp_token, str) or not adp_token:
            raise RegistrationError("Device registration response did not include an adp_token", status_code=200)

        self._registry[serial] = adp_token

        logger.info(
            "Registered device %s",
            serial,
            extra=event_extra(EVENT_DEVICE_REGISTERED, serial_number=serial, region=region.code),
        )
        return DeviceRegistration(adp_token=adp_token, serial_number=serial)
