"""
Chapter metadata: signed fetch, validation and title normalization.
"""

from .client import ChapterClient, clean_chapter_title, process_many, resolve_secrets
from .models import ChapterRecord, ChapterSet, RawChapterPayload

__all__ = [
    "ChapterClient",
    "ChapterRecord",
    "ChapterSet",
    "RawChapterPayload",
    "clean_chapter_title",
    "process_many",
    "resolve_secrets",
]
