"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import typer

from chaptermarker.cli_rendering import (
    echo_chapter_list,
    echo_run_summary,
    exit_with_command_error,
)
from chaptermarker.errors import ConfigurationError
from chaptermarker.models import ChapterCollection, ChaptersRunResult, TimeUnit


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = ConfigurationError(
        stage="normalize",
        detail="Invalid chapter pattern `(`: missing ), unterminated subpattern",
        hint="Pass a valid regular expression via `--chapter-pattern`.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("chapters", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "chapters failed at stage `normalize`" in captured.err
    assert "Hint: Pass a valid regular expression via `--chapter-pattern`." in captured.err


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-stage failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("list-chapters", RuntimeError("unexpected failure"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "list-chapters failed: unexpected failure" in captured.err


def test_echo_chapter_list_and_run_summary(
    capsys: pytest.CaptureFixture[str],
    build_chapters: Callable[..., ChapterCollection],
) -> None:
    """Chapter rows should be 0-based; summary should list counters and paths."""

    chapters = build_chapters([(0, "Intro (1)"), (61_500, "Next (2)")], duration_ms=90_000)
    result = ChaptersRunResult(
        input_audio=Path("book.m4b"),
        duration=TimeUnit(90_000),
        silence_count=4,
        chapters=chapters,
        chapters_path=Path("book.chapters.txt"),
        imported=True,
        backup_path=Path("book.chapters-backup.txt"),
    )

    echo_chapter_list(chapters)
    echo_run_summary(result)

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "0. 00:00:00.000 Intro (1)",
        "1. 00:01:01.500 Next (2)",
        "Duration: 00:01:30.000",
        "Silences: 4",
        "Chapters: 2",
        "Chapters file: book.chapters.txt",
        "Imported into audio: yes",
        "Chapters backup: book.chapters-backup.txt",
    ]
