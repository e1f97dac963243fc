"""
Marketplace/region catalog.

Maps an Audible region code to its storefront details and the localized
vocabulary used when normalizing chapter titles.
"""

from dataclasses import dataclass

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class Region:
    """Information about an Audible marketplace."""

    code: str
    name: str
    tld: str
    language: str
    chapter_noun: str

    @property
    def domain(self) -> str:
        return f"audible.{self.tld}"

    @property
    def api_base(self) -> str:
        """Base URL of the content API for this marketplace."""
        return f"https://api.audible.{self.tld}"


# Known Audible marketplaces
REGIONS: dict[str, Region] = {
    "us": Region(code="us", name="United States", tld="com", language="en_US", chapter_noun="Chapter"),
    "uk": Region(code="uk", name="United Kingdom", tld="co.uk", language="en_GB", chapter_noun="Chapter"),
    "ca": Region(code="ca", name="Canada", tld="ca", language="en_CA", chapter_noun="Chapter"),
    "au": Region(code="au", name="Australia", tld="com.au", language="en_AU", chapter_noun="Chapter"),
    "fr": Region(code="fr", name="France", tld="fr", language="fr_FR", chapter_noun="Chapitre"),
    "de": Region(code="de", name="Germany", tld="de", language="de_DE", chapter_noun="Kapitel"),
    "jp": Region(code="jp", name="Japan", tld="co.jp", language="ja_JP", chapter_noun="チャプター"),
    "it": Region(code="it", name="Italy", tld="it", language="it_IT", chapter_noun="Capitolo"),
    "in": Region(code="in", name="India", tld="in", language="en_IN", chapter_noun="Chapter"),
    "es": Region(code="es", name="Spain", tld="es", language="es_ES", chapter_noun="Capítulo"),
}

REGION_CODES: tuple[str, ...] = tuple(REGIONS)


def get_region(code: str) -> Region:
    """
    Look up a region by code.

    Args:
        code: Region code (us, uk, de, etc.), case-insensitive

    Returns:
        Region for the code

    Raises:
        ConfigurationError: If the code is not one of the known marketplaces
    """
    region = REGIONS.get(code.strip().lower()) if isinstance(code, str) else None
    if region is None:
        raise ConfigurationError(f"Unknown Audible region '{code}'. Expected one of: {', '.join(REGION_CODES)}")
    return region


def is_known_region(code: str) -> bool:
    return isinstance(code, str) and code.strip().lower() in REGIONS


def list_regions() -> list[Region]:
    """Get list of all known marketplaces."""
    return list(REGIONS.values())
