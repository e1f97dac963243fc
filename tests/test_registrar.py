"""Tests for device registration."""

import asyncio
import json
from datetime import date

import httpx
import pytest

from audible_chapters.auth.device import DEVICE_TYPE, DeviceIdentity
from audible_chapters.auth.registrar import DeviceRegistrar, build_device_name, build_registration_payload
from audible_chapters.exceptions import ConfigurationError, RegistrationError
from audible_chapters.transport import USER_AGENT


@pytest.fixture
def identity(private_key_pem: str) -> DeviceIdentity:
    """Identity around the session key with a fresh serial."""
    return DeviceIdentity.from_private_key(private_key_pem)


def ok(adp_token: str = "{enc:abc}"):
    return lambda request: httpx.Response(200, json={"adp_token": adp_token})


class TestRegistrationPayload:
    """Tests for the registerDevice body."""

    def test_device_name_embeds_date(self):
        assert build_device_name(date(2024, 5, 1)) == "iPhone (audnexus-2024-05-01)"

    def test_payload_fields(self, identity: DeviceIdentity):
        payload = build_registration_payload(identity, date(2024, 5, 1))
        assert payload == {
            "app_name": "Audible",
            "app_version": "3.92.0",
            "device_model": "iPhone",
            "device_serial": identity.serial_number,
            "os_name": "iOS",
            "os_version": "15.0",
            "device_name": "iPhone (audnexus-2024-05-01)",
            "software_version": "3.92.0",
            "device_type": DEVICE_TYPE,
            "public_key": identity.public_key_pem,
        }


class TestDeviceRegistrar:
    """Tests for DeviceRegistrar.register."""

    @pytest.mark.asyncio
    async def test_success(self, identity: DeviceIdentity, make_transport):
        transport = make_transport(ok("{enc:token}"))
        registrar = DeviceRegistrar(transport=transport)

        registration = await registrar.register("Atna|access", identity, "us")

        assert registration.adp_token == "{enc:token}"
        assert registration.serial_number == identity.serial_number
        request = transport.requests[0]
        assert str(request.url) == "https://api.audible.com/device/registerDevice"
        assert request.headers["Authorization"] == "Bearer Atna|access"
        assert request.headers["User-Agent"] == USER_AGENT
        body = json.loads(request.content)
        assert body["device_serial"] == identity.serial_number
        assert body["public_key"] == identity.public_key_pem

    @pytest.mark.asyncio
    async def test_registry_records_success(self, identity: DeviceIdentity, make_transport):
        registrar = DeviceRegistrar(transport=make_transport(ok("{enc:token}")))
        assert dict(registrar.registered_devices) == {}

        await registrar.register("access", identity)

        assert registrar.is_registered(identity.serial_number)
        assert dict(registrar.registered_devices) == {identity.serial_number: "{enc:token}"}

    @pytest.mark.asyncio
    async def test_registry_is_read_only(self, identity: DeviceIdentity, make_transport):
        registrar = DeviceRegistrar(transport=make_transport(ok()))
        await registrar.register("access", identity)

        with pytest.raises(TypeError):
            registrar.registered_devices["other"] = "x"  # type: ignore[index]

    @pytest.mark.asyncio
    async def test_registry_is_per_instance(self, identity: DeviceIdentity, make_transport):
        first = DeviceRegistrar(transport=make_transport(ok()))
        second = DeviceRegistrar(transport=make_transport(ok()))
        await first.register("access", identity)
        assert not second.is_registered(identity.serial_number)

    @pytest.mark.asyncio
    async def test_reregistration_rejected_without_request(self, identity: DeviceIdentity, make_transport):
        transport = make_transport(ok())
        registrar = DeviceRegistrar(transport=transport)
        await registrar.register("access", identity)

        with pytest.raises(RegistrationError, match="already registered"):
            await registrar.register("access", identity)

        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_rejected(self, identity: DeviceIdentity, make_transport):
        registrar = DeviceRegistrar(transport=make_transport(ok()))

        results = await asyncio.gather(
            registrar.register("access", identity),
            registrar.register("access", identity),
            return_exceptions=True,
        )

        assert sum(isinstance(r, RegistrationError) for r in results) == 1
        assert len(registrar.registered_devices) == 1

    @pytest.mark.asyncio
    async def test_failure_not_recorded_and_retry_allowed(self, identity: DeviceIdentity, make_transport):
        responses = iter([httpx.Response(500), httpx.Response(200, json={"adp_token": "t"})])
        registrar = DeviceRegistrar(transport=make_transport(lambda request: next(responses)))

        with pytest.raises(RegistrationError):
            await registrar.register("access", identity)
        assert not registrar.is_registered(identity.serial_number)

        await registrar.register("access", identity)
        assert registrar.is_registered(identity.serial_number)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 503])
    async def test_non_200(self, identity: DeviceIdentity, make_transport, status: int):
        registrar = DeviceRegistrar(transport=make_transport(lambda request: httpx.Response(status)))

        with pytest.raises(RegistrationError, match="rejected") as exc_info:
            await registrar.register("access", identity)

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"adp_token": ""}, {"adp_token": None}, ["adp_token"]])
    async def test_missing_adp_token(self, identity: DeviceIdentity, make_transport, body):
        registrar = DeviceRegistrar(transport=make_transport(lambda request: httpx.Response(200, json=body)))

        with pytest.raises(RegistrationError, match="did not include an adp_token"):
            await registrar.register("access", identity)

    @pytest.mark.asyncio
    async def test_invalid_json(self, identity: DeviceIdentity, make_transport):
        registrar = DeviceRegistrar(transport=make_transport(lambda request: httpx.Response(200, content=b"nope")))

        with pytest.raises(RegistrationError, match="Malformed"):
            await registrar.register("access", identity)

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self, identity: DeviceIdentity, make_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timeout", request=request)

        registrar = DeviceRegistrar(transport=make_transport(handler), timeout=2)
        with pytest.raises(RegistrationError, match="timed out after 2s"):
            await registrar.register("access", identity)

    @pytest.mark.asyncio
    async def test_unknown_region(self, identity: DeviceIdentity, make_transport):
        registrar = DeviceRegistrar(transport=make_transport(ok()))
        with pytest.raises(ConfigurationError):
            await registrar.register("access", identity, "zz")
