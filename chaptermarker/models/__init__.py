"""Shared typed data models for chaptermarker.

This package contains the value types and the chapter collection used across
pipeline modules to avoid cross-module coupling and circular imports.
"""

from .collection import ChapterCollection
from .datatypes import Chapter, ChapterHint, ChaptersRunResult, Silence, TimeUnit

__all__ = [
    "Chapter",
    "ChapterCollection",
    "ChapterHint",
    "ChaptersRunResult",
    "Silence",
    "TimeUnit",
]
