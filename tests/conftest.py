"""Shared pytest fixtures for the chaptermarker test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
import contextlib

import pytest
from loguru import logger

from chaptermarker.models import Chapter, ChapterCollection, Silence, TimeUnit


@pytest.fixture
def build_chapters() -> Callable[..., ChapterCollection]:
    """Build a collection from `(start_ms, name)` pairs; each runs to the next start."""

    def _build(
        entries: Sequence[tuple[int, str]], duration_ms: int | None = None
    ) -> ChapterCollection:
        ordered = sorted(entries)
        chapters: list[Chapter] = []
        for position, (start_ms, name) in enumerate(ordered):
            if position + 1 < len(ordered):
                end_ms = ordered[position + 1][0]
            else:
                end_ms = duration_ms if duration_ms is not None else start_ms + 60_000
            chapters.append(
                Chapter(start=TimeUnit(start_ms), length=TimeUnit(end_ms - start_ms), name=name)
            )
        return ChapterCollection(chapters)

    return _build


@pytest.fixture
def build_silence() -> Callable[..., Silence]:
    """Build one silence from millisecond values."""

    def _build(start_ms: int, length_ms: int, is_chapter_start: bool = False) -> Silence:
        return Silence(
            start=TimeUnit(start_ms),
            length=TimeUnit(length_ms),
            is_chapter_start=is_chapter_start,
        )

    return _build


@pytest.fixture
def loguru_messages() -> Iterator[list[str]]:
    """Capture formatted loguru messages emitted during one test."""

    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(str(message)), format="{level} {message}"
    )
    yield messages
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)
