"""
Normalized chapter models.

Field names are snake_case in Python; JSON output (``to_api()``) uses the
camelCase keys of the audnexus chapter API (startOffsetMs, runtimeLengthMs, ...).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic.alias_generators import to_camel

# Raw /1.0/content/{asin}/metadata response body, unvalidated
RawChapterPayload = dict[str, Any]


class ChapterRecord(BaseModel):
    """One normalized chapter."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    start_offset_ms: NonNegativeInt
    start_offset_sec: NonNegativeInt | None = None
    length_ms: NonNegativeInt

    @property
    def end_offset_ms(self) -> int:
        return self.start_offset_ms + self.length_ms


class ChapterSet(BaseModel):
    """Normalized chapter listing for one item, in vendor order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    asin: str
    region: str
    runtime_length_ms: NonNegativeInt | None = None
    runtime_length_sec: NonNegativeInt | None = None
    is_accurate: bool | None = None
    brand_intro_duration_ms: NonNegativeInt | None = None
    brand_outro_duration_ms: NonNegativeInt | None = None
    chapters: list[ChapterRecord] = Field(default_factory=list)

    @property
    def chapter_count(self) -> int:
        """Number of chapters."""
        return len(self.chapters)

    @property
    def runtime_hours(self) -> float | None:
        """Runtime in hours."""
        if self.runtime_length_sec:
            return round(self.runtime_length_sec / 3600, 2)
        if self.runtime_length_ms:
            return round(self.runtime_length_ms / (1000 * 3600), 2)
        return None

    def to_api(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
