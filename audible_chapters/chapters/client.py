"""
Chapter metadata client.

Fetches chapter info for one ASIN from the signed content API, validates the
payload shape and produces a region-localized ChapterSet.

Usage:
    import asyncio
    from audible_chapters.chapters import ChapterClient

    async def main():
        # ADP_TOKEN / PRIVATE_KEY come from the environment unless passed in
        async with ChapterClient("B079LRSMNN", region="us") as client:
            chapters = await client.process()

    asyncio.run(main())

Fetch failures (non-200, transport errors, empty bodies) are logged and
resolve to None; a payload whose structure no longer matches raises
ValidationError.
"""

import asyncio
import logging
import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import httpx

from ..auth.signing import AdpAuth, RequestMetadata, RequestSigner, SignatureHeaders
from ..config import DEFAULT_TIMEOUT_SECONDS, CredentialSettings
from ..exceptions import ConfigurationError, FetchError, ValidationError
from ..logging import EVENT_CHAPTER_FETCH_FAILED, EVENT_CHAPTER_FETCHED, event_extra
from ..regions import Region, get_region
from .models import ChapterRecord, ChapterSet, RawChapterPayload

logger = logging.getLogger(__name__)

CHAPTER_RESPONSE_GROUPS = "chapter_info"
CHAPTER_QUALITY = "High"

# ASCII digits only; \d would also accept full-width and other Unicode digits
_NUMERIC_TITLE = re.compile(r"[0-9]+")


def resolve_secrets(
    adp_token: str | None = None,
    private_key: str | None = None,
    settings: CredentialSettings | None = None,
) -> tuple[str, str]:
    """
    Pick explicit secrets first, then configured ones.

    Raises:
        ConfigurationError: Naming ADP_TOKEN and/or PRIVATE_KEY when missing
    """
    if not adp_token or not private_key:
        configured = settings if settings is not None else CredentialSettings()
        adp_token = adp_token or configured.adp_token
        private_key = private_key or configured.private_key
    return CredentialSettings(adp_token=adp_token, private_key=private_key).require()


def clean_chapter_title(title: str, chapter_noun: str) -> str:
    """
    Normalize a raw chapter title.

    A purely numeric title becomes "<noun> <digits>". Anything else has
    underscores replaced by spaces and one trailing period removed.
    """
    if _NUMERIC_TITLE.fullmatch(title):
        return f"{chapter_noun} {title}"
    title = title.replace("_", " ")
    if title.endswith("."):
        title = title[:-1]
    return title


class ChapterClient:
    """
    Fetch and normalize chapter metadata for one item.

    Holds the item ID, region and a RequestSigner built from the device's
    ADP token and private key. Instances share nothing mutable, so many can
    run concurrently.
    """

    def __init__(
        self,
        asin: str,
        region: Region | str = "us",
        adp_token: str | None = None,
        private_key: str | None = None,
        settings: CredentialSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        *,
        signer: RequestSigner | None = None,
    ):
        """
        Args:
            asin: Item ID
            region: Region code or Region
            adp_token: ADP token (default: ADP_TOKEN from configuration)
            private_key: Device private key PEM (default: PRIVATE_KEY from configuration)
            settings: Settings to read missing secrets from (default: environment)
            transport: httpx transport for a client owned by this instance
            http_client: Shared client; not closed by this instance
            timeout: Request timeout in seconds (default: 30)
            signer: Prebuilt signer; replaces adp_token/private_key/settings

        Raises:
            ConfigurationError: Missing ASIN, unknown region, or missing secrets
            CryptoError: Private key cannot be loaded
        """
        if not isinstance(asin, str) or not asin.strip():
            raise ConfigurationError("ASIN is required")

        self.asin = asin.strip()
        self.region = get_region(region) if isinstance(region, str) else region
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS

        if signer is None:
            adp_token, private_key = resolve_secrets(adp_token, private_key, settings)
            signer = RequestSigner(adp_token, private_key)
        self._signer = signer
        self._auth = AdpAuth(signer)

        self._transport = transport
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def adp_token(self) -> str:
        return self._signer.adp_token

    @property
    def request_url(self) -> str:
        return f"{self.region.api_base}{self.build_path()}"

    def build_path(self) -> str:
        """Path and query of the chapter metadata request."""
        return (
            f"/1.0/content/{self.asin}/metadata"
            f"?response_groups={CHAPTER_RESPONSE_GROUPS}&quality={CHAPTER_QUALITY}"
        )

    def sign_request(self, timestamp: datetime | None = None) -> SignatureHeaders:
        """Signed headers for the chapter metadata GET."""
        return self._signer.sign(RequestMetadata("GET", self.build_path()), timestamp)

    def clean_title(self, title: str) -> str:
        """Normalize a title using this client's regional chapter noun."""
        return clean_chapter_title(title, self.region.chapter_noun)

    # -------------------------------------------------------------------------
    # HTTP lifecycle
    # -------------------------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure async client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport, timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance opened it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ChapterClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Fetch / parse / process
    # -------------------------------------------------------------------------

    async def _request_metadata(self) -> RawChapterPayload:
        """
        Issue the signed GET and return the decoded JSON object.

        Raises:
            FetchError: Transport failure, non-200 status, or unusable body
        """
        client = await self._ensure_client()

        try:
            response = await client.get(self.request_url, auth=self._auth, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise FetchError(f"Request timed out after {self.timeout}s", asin=self.asin) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Request failed: {e.__class__.__name__}", asin=self.asin) from e

        if response.status_code != 200:
            raise FetchError("Unexpected response status", asin=self.asin, status_code=response.status_code)

        if not response.content:
            raise FetchError("Empty response body", asin=self.asin, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError("Response body is not JSON", asin=self.asin, status_code=response.status_code) from e

        if not isinstance(data, dict):
            raise FetchError("Response body is not a JSON object", asin=self.asin, status_code=response.status_code)

        return data

    async def fetch_chapters(self) -> RawChapterPayload | None:
        """
        Fetch the raw chapter payload.

        Returns:
            The payload, or None if the item has no retrievable chapter data.
            Failures are logged with the status code and ASIN, never raised.
        """
        try:
            payload = await self._request_metadata()
        except FetchError as e:
            logger.warning(
                "An error occurred while fetching data from chapters. Response: %s, ASIN: %s (%s)",
                e.status_code,
                self.asin,
                e.message,
                extra=event_extra(
                    EVENT_CHAPTER_FETCH_FAILED,
                    asin=self.asin,
                    status_code=e.status_code,
                    region=self.region.code,
                ),
            )
            return None

        logger.debug(
            "Fetched chapter metadata for ASIN %s",
            self.asin,
            extra=event_extra(EVENT_CHAPTER_FETCHED, asin=self.asin, status_code=200, region=self.region.code),
        )
        return payload

    def _missing(self, key: str, context: str) -> ValidationError:
        return ValidationError(
            f"Required key '{key}' does not exist for {context} in Audible API response for ASIN {self.asin}",
            key=key,
            asin=self.asin,
        )

    def _invalid(self, key: str) -> ValidationError:
        return ValidationError(
            f"Required key '{key}' does not have a valid value in Audible API response for ASIN {self.asin}",
            key=key,
            asin=self.asin,
        )

    def _require(self, mapping: Any, key: str, context: str) -> Any:
        if not isinstance(mapping, dict) or key not in mapping:
            raise self._missing(key, context)
        return mapping[key]

    def _non_negative(self, mapping: dict[str, Any], key: str, required: bool, context: str = "chapter") -> int | None:
        if key not in mapping or mapping[key] is None:
            if required:
                raise self._missing(key, context)
            return None
        value = mapping[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise self._invalid(key)
        return value

    def _parse_chapter(self, raw: Any) -> ChapterRecord:
        if not isinstance(raw, dict):
            raise self._invalid("chapters")

        title = self._require(raw, "title", "chapter")
        if not isinstance(title, str):
            raise self._invalid("title")

        return ChapterRecord(
            title=self.clean_title(title),
            start_offset_ms=self._non_negative(raw, "start_offset_ms", required=True),
            start_offset_sec=self._non_negative(raw, "start_offset_sec", required=False),
            length_ms=self._non_negative(raw, "length_ms", required=True),
        )

    async def parse_chapters(self, payload: RawChapterPayload | None) -> ChapterSet | None:
        """
        Validate a raw payload and normalize it.

        Args:
            payload: Output of fetch_chapters(); None passes through

        Returns:
            ChapterSet, or None for None input

        Raises:
            ValidationError: A required key is missing or holds an invalid value
        """
        if payload is None:
            return None

        content_metadata = self._require(payload, "content_metadata", "content metadata")
        chapter_info = self._require(content_metadata, "chapter_info", "content metadata")
        raw_chapters = self._require(chapter_info, "chapters", "chapter")
        if not isinstance(raw_chapters, list):
            raise self._invalid("chapters")

        is_accurate = chapter_info.get("is_accurate")
        if is_accurate is not None and not isinstance(is_accurate, bool):
            raise self._invalid("is_accurate")

        return ChapterSet(
            asin=self.asin,
            region=self.region.code,
            runtime_length_ms=self._non_negative(chapter_info, "runtime_length_ms", required=False),
            runtime_length_sec=self._non_negative(chapter_info, "runtime_length_sec", required=False),
            is_accurate=is_accurate,
            brand_intro_duration_ms=self._non_negative(chapter_info, "brandIntroDurationMs", required=False),
            brand_outro_duration_ms=self._non_negative(chapter_info, "brandOutroDurationMs", required=False),
            chapters=[self._parse_chapter(raw) for raw in raw_chapters],
        )

    async def process(self) -> ChapterSet | None:
        """
        Fetch and parse in one call.

        Returns:
            ChapterSet, or None when the fetch yields nothing

        A client opened here (no ``async with``, no shared client) is closed
        before returning.

        Raises:
            ValidationError: Payload fetched but structurally invalid
        """
        opened_here = self._client is None
        try:
            payload = await self.fetch_chapters()
            if payload is None:
                return None
            return await self.parse_chapters(payload)
        finally:
            if opened_here:
                await self.close()


async def process_many(
    asins: Iterable[str],
    region: Region | str = "us",
    adp_token: str | None = None,
    private_key: str | None = None,
    *,
    settings: CredentialSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_concurrent: int = 5,
) -> dict[str, ChapterSet | None]:
    """
    Process many ASINs concurrently over one shared HTTP client.

    Items without chapter data map to None. A ValidationError for any item
    cancels the items still in flight and propagates before the shared
    client closes.

    Args:
        asins: Item IDs (duplicates are processed once)
        region: Region code or Region for every item
        adp_token: ADP token (default: configuration)
        private_key: Device private key (default: configuration)
        settings: Settings to read missing secrets from
        transport: httpx transport for the shared client
        timeout: Per-request timeout in seconds
        max_concurrent: Maximum in-flight requests

    Returns:
        Mapping of ASIN to ChapterSet or None, in input order
    """
    if max_concurrent < 1:
        raise ConfigurationError("max_concurrent must be at least 1")

    unique = list(dict.fromkeys(asins))
    region = get_region(region) if isinstance(region, str) else region
    adp_token, private_key = resolve_secrets(adp_token, private_key, settings)
    signer = RequestSigner(adp_token, private_key)
    semaphore = asyncio.Semaphore(max_concurrent)

    async with httpx.AsyncClient(transport=transport, timeout=timeout) as http_client:

        async def process_one(asin: str) -> ChapterSet | None:
            async with semaphore:
                client = ChapterClient(asin, region, signer=signer, http_client=http_client, timeout=timeout)
                return await client.process()

        try:
            async with asyncio.TaskGroup() as group:
                tasks = {asin: group.create_task(process_one(asin)) for asin in unique}
        except ExceptionGroup as eg:
            # Siblings are cancelled by now; surface the first item's error as-is
            raise eg.exceptions[0] from None

    return {asin: task.result() for asin, task in tasks.items()}
