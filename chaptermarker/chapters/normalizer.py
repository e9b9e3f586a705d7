"""Chapter name and boundary normalization.

Responsibilities:
- Clean chapter names with a remove-character set and a rename pattern.
- Shift first/last chapter boundaries by configured offsets.
- Merge consecutive chapters with equal names and append sequence numbers.

Key types:
- `NormalizeOptions`: immutable option record with explicit defaults.
- `ChapterNormalizer`: applies the options to a provisional collection.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from ..errors import ConfigurationError
from ..models import Chapter, ChapterCollection

DEFAULT_CHAPTER_PATTERN = r"^[^:]+[1-9][0-9]*:\s*(.*),.*[1-9][0-9]*\s*$"
DEFAULT_CHAPTER_REPLACEMENT = "$1"
DEFAULT_CHAPTER_REMOVE_CHARS = "„“”"

_DOLLAR_GROUP_REFERENCE = re.compile(r"\$(\d+)|\$\{(\d+)\}")


@dataclass(frozen=True, slots=True)
class NormalizeOptions:
    """Options for one normalization pass.

    Attributes:
        first_chapter_offset_ms: Signed shift applied to the first chapter start.
        last_chapter_offset_ms: Signed shift applied to the last chapter start.
        merge_similar: Merge chapters whose cleaned name equals the predecessor's.
        no_chapter_numbering: Skip the ` (n)` sequence suffix.
        chapter_pattern: Regular expression matched against each name, or `None`/empty
            to disable renaming.
        chapter_replacement: Replacement applied when the pattern matches; `$1` and `\\1`
            group references are both accepted.
        chapter_remove_chars: Characters removed from every name before renaming.
    """

    first_chapter_offset_ms: int = 0
    last_chapter_offset_ms: int = 0
    merge_similar: bool = False
    no_chapter_numbering: bool = False
    chapter_pattern: str | None = DEFAULT_CHAPTER_PATTERN
    chapter_replacement: str = DEFAULT_CHAPTER_REPLACEMENT
    chapter_remove_chars: str = DEFAULT_CHAPTER_REMOVE_CHARS


def compile_chapter_pattern(pattern: str | None) -> re.Pattern[str] | None:
    """Compile a case-insensitive rename pattern.

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression.
    """

    if not pattern:
        return None
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ConfigurationError(
            stage="normalize",
            detail=f"Invalid chapter pattern `{pattern}`: {exc}",
            hint="Pass a valid regular expression via `--chapter-pattern`.",
        ) from exc


def to_python_replacement(replacement: str) -> str:
    """Translate `$1`/`${1}` group references into `re.sub` syntax."""

    return _DOLLAR_GROUP_REFERENCE.sub(
        lambda match: f"\\g<{match.group(1) or match.group(2)}>", replacement
    )


class ChapterNormalizer:
    """Apply configured name and boundary transformations to chapters."""

    def normalize(
        self, chapters: ChapterCollection, options: NormalizeOptions
    ) -> ChapterCollection:
        """Return a new normalized collection; the input collection is not modified.

        Raises:
            ConfigurationError: If `options.chapter_pattern` is invalid.
        """

        pattern = compile_chapter_pattern(options.chapter_pattern)
        replacement = to_python_replacement(options.chapter_replacement)

        ordered = [
            chapter.with_name(
                self._clean_name(chapter.name, options.chapter_remove_chars, pattern, replacement)
            )
            for chapter in chapters.copy().sort()
        ]
        ordered = self._apply_offsets(ordered, options)
        if options.merge_similar:
            ordered = self._merge_similar(ordered)
        result = ChapterCollection(ordered)

        if options.no_chapter_numbering:
            return result
        return ChapterCollection(
            chapter.with_name(f"{chapter.name} ({number})")
            for number, chapter in enumerate(result, start=1)
        )

    def _clean_name(
        self,
        name: str,
        remove_chars: str,
        pattern: re.Pattern[str] | None,
        replacement: str,
    ) -> str:
        """Strip configured characters, then apply the rename pattern."""

        if remove_chars:
            name = name.translate({ord(character): None for character in remove_chars})
        if pattern is not None:
            name = pattern.sub(replacement, name)
        return name.strip()

    def _apply_offsets(
        self, ordered: list[Chapter], options: NormalizeOptions
    ) -> list[Chapter]:
        """Shift the first and last chapter starts by their configured offsets."""

        if not ordered:
            return ordered
        shifted = list(ordered)
        if options.first_chapter_offset_ms:
            shifted[0] = shifted[0].with_start(
                shifted[0].start.add(options.first_chapter_offset_ms)
            )
        if options.last_chapter_offset_ms:
            shifted[-1] = shifted[-1].with_start(
                shifted[-1].start.add(options.last_chapter_offset_ms)
            )
        return sorted(shifted, key=lambda chapter: chapter.key)

    def _merge_similar(self, ordered: list[Chapter]) -> list[Chapter]:
        """Fold chapters into their predecessor while names are equal."""

        merged: list[Chapter] = []
        for chapter in ordered:
            if merged and merged[-1].name == chapter.name:
                previous = merged[-1]
                merged[-1] = previous.with_length(
                    chapter.end.add(-previous.start.milliseconds)
                )
                continue
            merged.append(chapter)
        return merged
