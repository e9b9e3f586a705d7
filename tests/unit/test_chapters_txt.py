"""Unit tests for the line-oriented `chapters.txt` format and hint files."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from chaptermarker.io.chapters_txt import (
    ChaptersTxtWriter,
    default_backup_path,
    default_chapters_path,
    format_chapters_txt,
    load_hints,
    parse_chapters_txt,
    parse_hint_lines,
)
from chaptermarker.models import ChapterCollection, ChapterHint, TimeUnit


def test_format_chapters_txt_renders_sorted_position_name_lines(
    build_chapters: Callable[..., ChapterCollection],
) -> None:
    """Export should emit one `HH:MM:SS.mmm name` line per chapter in start order."""

    chapters = build_chapters([(3_723_456, "Late"), (0, "Intro (1)")])

    assert format_chapters_txt(chapters) == "00:00:00.000 Intro (1)\n01:02:03.456 Late\n"
    assert format_chapters_txt(ChapterCollection()) == ""


def test_parse_chapters_txt_runs_each_chapter_to_next_start() -> None:
    """Parsing should derive lengths from neighbor starts and the given duration."""

    text = "00:00:00.000 Intro\n\n00:01:00.500 Chapter two\n# comment\n00:03:00.000 End\n"

    chapters = parse_chapters_txt(text, duration=TimeUnit(240_000))

    assert chapters.keys() == [0, 60_500, 180_000]
    assert [chapter.name for chapter in chapters] == ["Intro", "Chapter two", "End"]
    assert chapters[0].length == TimeUnit(60_500)
    assert chapters[2].end == TimeUnit(240_000)


def test_parse_chapters_txt_rejects_line_without_timestamp() -> None:
    """Lines without a leading timestamp should be reported."""

    with pytest.raises(ValueError, match="without timestamp"):
        parse_chapters_txt("00:00:00.000 Intro\nNo time here\n")


def test_parse_hint_lines_accepts_timed_and_bare_names() -> None:
    """Hints may mix timestamped lines and bare chapter names."""

    hints = parse_hint_lines("# hints\n00:00:00.000 Intro\nChapter 1\n\n01:00.000 Chapter 2\n")

    assert hints == [
        ChapterHint(name="Intro", start=TimeUnit(0)),
        ChapterHint(name="Chapter 1"),
        ChapterHint(name="Chapter 2", start=TimeUnit(60_000)),
    ]


def test_writer_creates_parents_and_backup_is_written_once(
    tmp_path: Path,
    build_chapters: Callable[..., ChapterCollection],
) -> None:
    """Backups should never overwrite an existing backup file."""

    writer = ChaptersTxtWriter()
    first = build_chapters([(0, "Old")])
    second = build_chapters([(0, "Newer")])
    backup_path = tmp_path / "nested" / "book.chapters-backup.txt"

    assert writer.write_backup(backup_path, first) is True
    assert writer.write_backup(backup_path, second) is False
    assert backup_path.read_text(encoding="utf-8") == "00:00:00.000 Old\n"


def test_load_hints_and_default_paths(tmp_path: Path) -> None:
    """Hints load from UTF-8 files; default paths derive from the audio stem."""

    hints_path = tmp_path / "hints.txt"
    hints_path.write_text("Prolog\nKapitola 1\n", encoding="utf-8")
    audio_path = tmp_path / "book.m4b"

    assert [hint.name for hint in load_hints(hints_path)] == ["Prolog", "Kapitola 1"]
    assert default_chapters_path(audio_path) == tmp_path / "book.chapters.txt"
    assert default_backup_path(audio_path) == tmp_path / "book.chapters-backup.txt"


def test_parse_hint_lines_keeps_leading_numbers_in_bare_names() -> None:
    """A leading bare number is part of the name, not a seconds timestamp."""

    hints = parse_hint_lines("Prologue\n1 Introduction\n12 Rules\n3:05 Epilogue\n")

    assert hints == [
        ChapterHint(name="Prologue"),
        ChapterHint(name="1 Introduction"),
        ChapterHint(name="12 Rules"),
        ChapterHint(name="Epilogue", start=TimeUnit(185_000)),
    ]


def test_parse_chapters_txt_rejects_seconds_only_prefix() -> None:
    """Chapter lines need at least an `MM:SS` timestamp."""

    with pytest.raises(ValueError, match="without timestamp: `12 Rules`"):
        parse_chapters_txt("00:00:00.000 Intro\n12 Rules\n")
