"""Ordered chapter collection keyed by start position.

Responsibilities:
- Store chapters under their rounded start milliseconds.
- Keep iteration order sorted by key after bulk mutation.
- Report key collisions, which drop the previously stored chapter.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from loguru import logger

from .datatypes import Chapter


class ChapterCollection:
    """Mapping of start milliseconds to `Chapter`, iterated in key order.

    Writing a chapter whose start equals an existing key replaces the stored
    chapter (last write wins). Each replacement is logged as a warning.
    """

    def __init__(self, chapters: Iterable[Chapter] = ()) -> None:
        self._items: dict[int, Chapter] = {}
        for chapter in chapters:
            self.put(chapter)
        self.sort()

    def put(self, chapter: Chapter) -> Chapter | None:
        """Store a chapter and return the chapter it displaced, if any."""

        displaced = self._items.get(chapter.key)
        if displaced is not None and displaced != chapter:
            logger.warning(
                "chapter at {} replaced: `{}` -> `{}`",
                chapter.start.format(),
                displaced.name,
                chapter.name,
            )
        self._items[chapter.key] = chapter
        return displaced

    def sort(self) -> ChapterCollection:
        """Re-order stored chapters by key and return the collection."""

        self._items = dict(sorted(self._items.items()))
        return self

    def chapters(self) -> list[Chapter]:
        """Return chapters as a list in current iteration order."""

        return list(self._items.values())

    def keys(self) -> list[int]:
        return list(self._items.keys())

    def get(self, key: int) -> Chapter | None:
        return self._items.get(key)

    def copy(self) -> ChapterCollection:
        clone = ChapterCollection()
        clone._items = dict(self._items)
        return clone

    def __iter__(self) -> Iterator[Chapter]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, position: int) -> Chapter:
        """Return the chapter at a 0-based position in iteration order."""

        return self.chapters()[position]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChapterCollection):
            return NotImplemented
        return list(self._items.items()) == list(other._items.items())

    def __repr__(self) -> str:
        return f"ChapterCollection({self.chapters()!r})"
