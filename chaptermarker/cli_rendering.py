"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
chapter listing rows, and run summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models import ChapterCollection, ChaptersRunResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_chapter_list(chapters: ChapterCollection) -> None:
    """Print compact deterministic `index. position name` rows."""

    for index, chapter in enumerate(chapters):
        typer.echo(f"{index}. {chapter.start.format()} {chapter.name}")


def echo_run_summary(result: ChaptersRunResult) -> None:
    """Print run-level counters and written artifact paths."""

    typer.echo(f"Duration: {result.duration.format()}")
    typer.echo(f"Silences: {result.silence_count}")
    typer.echo(f"Chapters: {len(result.chapters)}")
    typer.echo(f"Chapters file: {result.chapters_path}")
    typer.echo(f"Imported into audio: {'yes' if result.imported else 'no'}")
    if result.backup_path is not None:
        typer.echo(f"Chapters backup: {result.backup_path}")
