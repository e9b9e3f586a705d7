"""Unit tests for chapter name cleanup, offsets, merging, and numbering."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from chaptermarker.chapters.normalizer import (
    ChapterNormalizer,
    NormalizeOptions,
    to_python_replacement,
)
from chaptermarker.errors import ConfigurationError
from chaptermarker.models import ChapterCollection, TimeUnit

BuildChapters = Callable[..., ChapterCollection]


def test_normalizer_applies_first_and_last_offsets(build_chapters: BuildChapters) -> None:
    """Offsets should shift only the first and last chapter starts."""

    chapters = build_chapters([(0, "A"), (60_000, "B"), (120_000, "C")])
    options = NormalizeOptions(
        first_chapter_offset_ms=500,
        last_chapter_offset_ms=-500,
        no_chapter_numbering=True,
    )

    result = ChapterNormalizer().normalize(chapters, options)

    assert result.keys() == [500, 60_000, 119_500]
    assert [chapter.name for chapter in result] == ["A", "B", "C"]


def test_normalizer_merges_consecutive_equal_names(build_chapters: BuildChapters) -> None:
    """Merging should extend the predecessor over the absorbed chapter."""

    chapters = build_chapters(
        [(0, "Intro"), (30_000, "Intro"), (90_000, "Chapter 2")], duration_ms=150_000
    )
    options = NormalizeOptions(merge_similar=True, no_chapter_numbering=True)

    result = ChapterNormalizer().normalize(chapters, options)

    assert len(result) == 2
    assert result[0].name == "Intro"
    assert result[0].start == TimeUnit(0)
    assert result[0].end == TimeUnit(90_000)
    assert result[1].name == "Chapter 2"
    assert result[1].start == TimeUnit(90_000)


def test_normalizer_merges_names_equal_after_cleanup(build_chapters: BuildChapters) -> None:
    """Merging should compare names after removal and renaming were applied."""

    chapters = build_chapters(
        [(0, "Track 1: Intro, disc 1"), (30_000, "Track 2: „Intro“, disc 1"), (60_000, "End")]
    )

    result = ChapterNormalizer().normalize(
        chapters, NormalizeOptions(merge_similar=True, no_chapter_numbering=True)
    )

    assert [chapter.name for chapter in result] == ["Intro", "End"]


def test_normalizer_numbers_chapters_unless_disabled(build_chapters: BuildChapters) -> None:
    """Numbering should append 1-based ` (n)` suffixes in sorted order."""

    chapters = build_chapters([(0, "A"), (1000, "B"), (2000, "C")])

    numbered = ChapterNormalizer().normalize(chapters, NormalizeOptions())
    plain = ChapterNormalizer().normalize(chapters, NormalizeOptions(no_chapter_numbering=True))

    assert [chapter.name for chapter in numbered] == ["A (1)", "B (2)", "C (3)"]
    assert [chapter.name for chapter in plain] == ["A", "B", "C"]


def test_normalizer_default_pattern_strips_metadata_boilerplate(
    build_chapters: BuildChapters,
) -> None:
    """Default pattern should reduce `Track n: name, disc n` to the name."""

    chapters = build_chapters([(0, "Track 3: Intro, disc 1"), (1000, "Plain name")])

    result = ChapterNormalizer().normalize(chapters, NormalizeOptions(no_chapter_numbering=True))

    assert [chapter.name for chapter in result] == ["Intro", "Plain name"]


def test_normalizer_removes_characters_before_renaming(build_chapters: BuildChapters) -> None:
    """Configured characters should be removed from every name."""

    chapters = build_chapters([(0, "„Quoted“ title”")])
    options = NormalizeOptions(chapter_pattern=None, no_chapter_numbering=True)

    result = ChapterNormalizer().normalize(chapters, options)

    assert result[0].name == "Quoted title"


def test_normalizer_accepts_custom_pattern_with_backslash_groups(
    build_chapters: BuildChapters,
) -> None:
    """Custom patterns should match case-insensitively and support `\\1` groups."""

    chapters = build_chapters([(0, "PART one"), (1000, "part two")])
    options = NormalizeOptions(
        chapter_pattern=r"^part\s+(\w+)$",
        chapter_replacement=r"Part \1",
        no_chapter_numbering=True,
    )

    result = ChapterNormalizer().normalize(chapters, options)

    assert [chapter.name for chapter in result] == ["Part one", "Part two"]


def test_normalizer_is_idempotent_without_numbering(build_chapters: BuildChapters) -> None:
    """Normalizing an already normalized collection should not change it."""

    chapters = build_chapters(
        [(0, "Track 1: Intro, disc 1"), (30_000, "Intro"), (90_000, "„Finale“")]
    )
    options = NormalizeOptions(merge_similar=True, no_chapter_numbering=True)
    normalizer = ChapterNormalizer()

    once = normalizer.normalize(chapters, options)
    twice = normalizer.normalize(once, options)

    assert twice == once


def test_normalizer_does_not_mutate_input(build_chapters: BuildChapters) -> None:
    """Input collections should keep their names and starts."""

    chapters = build_chapters([(0, "A"), (1000, "B")])

    ChapterNormalizer().normalize(chapters, NormalizeOptions(first_chapter_offset_ms=250))

    assert chapters.keys() == [0, 1000]
    assert [chapter.name for chapter in chapters] == ["A", "B"]


def test_normalizer_result_is_sorted_when_offset_passes_neighbor(
    build_chapters: BuildChapters,
) -> None:
    """A large first offset should still yield a collection sorted by start."""

    chapters = build_chapters([(0, "A"), (1000, "B"), (5000, "C")])
    options = NormalizeOptions(first_chapter_offset_ms=2000, no_chapter_numbering=True)

    result = ChapterNormalizer().normalize(chapters, options)

    assert result.keys() == [1000, 2000, 5000]
    starts = [chapter.start for chapter in result]
    assert starts == sorted(starts)


def test_normalizer_handles_empty_collection() -> None:
    """Empty input should produce an empty collection."""

    result = ChapterNormalizer().normalize(ChapterCollection(), NormalizeOptions())

    assert len(result) == 0


def test_normalizer_rejects_invalid_pattern(build_chapters: BuildChapters) -> None:
    """An invalid pattern should abort with a configuration error."""

    chapters = build_chapters([(0, "A")])

    with pytest.raises(ConfigurationError) as exc_info:
        ChapterNormalizer().normalize(chapters, NormalizeOptions(chapter_pattern="(unclosed"))

    assert exc_info.value.stage == "normalize"
    assert "Invalid chapter pattern" in exc_info.value.detail


@pytest.mark.parametrize(
    ("replacement", "expected"),
    [
        ("$1", "\\g<1>"),
        ("${2} - $1", "\\g<2> - \\g<1>"),
        ("\\1", "\\1"),
        ("plain", "plain"),
    ],
)
def test_to_python_replacement_translates_dollar_groups(replacement: str, expected: str) -> None:
    """Dollar group references should map to `re.sub` named-group syntax."""

    assert to_python_replacement(replacement) == expected
