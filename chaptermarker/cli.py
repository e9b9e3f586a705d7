"""Command-line interface for chaptermarker.

Responsibilities:
- Expose user-facing commands for chapter detection and inspection.
- Convert CLI arguments and optional YAML defaults into `ChaptersConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any

import typer

from .cli_rendering import echo_chapter_list, echo_run_summary, exit_with_command_error
from .config import ChaptersConfig, ConfigLoader
from .errors import ConfigurationError, DependencyError
from .io.chapters_txt import parse_chapters_txt
from .models import ChapterCollection
from .pipeline import ChaptersPipeline
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="chaptermarker",
    no_args_is_help=True,
    help="Detect, normalize, and review chapter marks of audiobook files.",
)


class StageProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path | None) -> ChaptersConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigurationError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    input_audio: Path | None,
    overrides: dict[str, Any],
) -> ChaptersConfig:
    """Resolve effective config from YAML defaults and explicit CLI overrides."""

    loaded_config = _load_yaml_config(config_file)
    explicit = {key: value for key, value in overrides.items() if value is not None}

    if loaded_config is None:
        if input_audio is None:
            raise ConfigurationError(
                stage="config",
                detail="Input audio path is required when `--config` is not provided.",
                hint="Pass `<input>` or use `--config <path.yaml>` with `input_audio`.",
            )
        return ChaptersConfig(input_audio=input_audio, **explicit)

    if input_audio is not None:
        explicit["input_audio"] = input_audio
    return replace(loaded_config, **explicit)


@app.command("chapters")
def chapters_command(
    input_audio: Annotated[
        Path | None,
        typer.Argument(help="Audio file to chapterize. Required unless provided by `--config`."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    output_file: Annotated[
        Path | None,
        typer.Option(
            "--output-file",
            "-o",
            help="Write chapters to this file (default: `<input>.chapters.txt`).",
        ),
    ] = None,
    force: Annotated[
        bool | None,
        typer.Option("--force/--no-force", "-f", help="Overwrite an existing chapters file."),
    ] = None,
    hints_file: Annotated[
        Path | None,
        typer.Option(
            "--hints",
            help="Chapter hints file: `HH:MM:SS.mmm name` or one bare name per line.",
        ),
    ] = None,
    adjust_by_silence: Annotated[
        bool | None,
        typer.Option(
            "--adjust-by-silence/--no-adjust-by-silence",
            help="Re-snap chapters already stored in the file to nearby silences.",
        ),
    ] = None,
    merge_similar: Annotated[
        bool | None,
        typer.Option(
            "--merge-similar/--no-merge-similar",
            "-s",
            help="Merge consecutive chapters with equal names.",
        ),
    ] = None,
    no_chapter_numbering: Annotated[
        bool | None,
        typer.Option(
            "--no-chapter-numbering/--chapter-numbering",
            help="Do not append chapter number after name, e.g. `My Chapter (1)`.",
        ),
    ] = None,
    no_chapter_import: Annotated[
        bool | None,
        typer.Option(
            "--no-chapter-import/--chapter-import",
            help="Only write the chapters file, do not import chapters into the audio file.",
        ),
    ] = None,
    chapter_pattern: Annotated[
        str | None,
        typer.Option("--chapter-pattern", help="Regular expression for matching chapter names."),
    ] = None,
    chapter_replacement: Annotated[
        str | None,
        typer.Option(
            "--chapter-replacement",
            help="Replacement for matched chapter names (`$1` or `\\1` group references).",
        ),
    ] = None,
    chapter_remove_chars: Annotated[
        str | None,
        typer.Option("--chapter-remove-chars", help="Remove these characters from chapter names."),
    ] = None,
    first_chapter_offset: Annotated[
        int | None,
        typer.Option("--first-chapter-offset", help="Milliseconds added to the first chapter start."),
    ] = None,
    last_chapter_offset: Annotated[
        int | None,
        typer.Option("--last-chapter-offset", help="Milliseconds added to the last chapter start."),
    ] = None,
    find_misplaced_chapters: Annotated[
        str | None,
        typer.Option(
            "--find-misplaced-chapters",
            help="Mark silences around these 0-based chapter indices, e.g. `8,15,18`.",
        ),
    ] = None,
    strict_misplaced_chapters: Annotated[
        bool | None,
        typer.Option(
            "--strict-misplaced-chapters/--no-strict-misplaced-chapters",
            help="Fail on non-numeric `--find-misplaced-chapters` tokens instead of dropping them.",
        ),
    ] = None,
    find_misplaced_offset: Annotated[
        int | None,
        typer.Option(
            "--find-misplaced-offset",
            help="Search radius in seconds around misplaced chapters (0 disables).",
        ),
    ] = None,
    find_misplaced_tolerance: Annotated[
        int | None,
        typer.Option(
            "--find-misplaced-tolerance",
            help="Milliseconds to shift extra markers to compensate detector offsets.",
        ),
    ] = None,
    silence_min_length: Annotated[
        int | None,
        typer.Option("--silence-min-length", help="Minimum silence length in milliseconds."),
    ] = None,
    silence_noise: Annotated[
        float | None,
        typer.Option("--silence-noise", help="Silence noise floor in dB, e.g. `-30`."),
    ] = None,
) -> None:
    """Detect chapters by silence, normalize them, and write them out."""

    try:
        config = _resolve_command_config(
            config_file=config_file,
            input_audio=input_audio,
            overrides={
                "output_file": output_file,
                "force": force,
                "hints_file": hints_file,
                "adjust_by_silence": adjust_by_silence,
                "merge_similar": merge_similar,
                "no_chapter_numbering": no_chapter_numbering,
                "no_chapter_import": no_chapter_import,
                "chapter_pattern": chapter_pattern,
                "chapter_replacement": chapter_replacement,
                "chapter_remove_chars": chapter_remove_chars,
                "first_chapter_offset_ms": first_chapter_offset,
                "last_chapter_offset_ms": last_chapter_offset,
                "find_misplaced_chapters": find_misplaced_chapters,
                "strict_misplaced_chapters": strict_misplaced_chapters,
                "find_misplaced_offset_s": find_misplaced_offset,
                "find_misplaced_tolerance_ms": find_misplaced_tolerance,
                "silence_min_length_ms": silence_min_length,
                "silence_noise_db": silence_noise,
            },
        )
        progress = StageProgressIndicator(command_name="chapters")
        pipeline = ChaptersPipeline(
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
        )
        result = pipeline.run(config)
    except Exception as exc:
        exit_with_command_error("chapters", exc)

    echo_chapter_list(result.chapters)
    echo_run_summary(result)


def _read_chapters_file(chapters_file: Path) -> ChapterCollection:
    """Read and parse a chapters file, mapping failures to stage errors."""

    try:
        text = chapters_file.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DependencyError(
            stage="chapters-file",
            detail=f"Chapters file not found: `{chapters_file}`.",
            hint="Run `chaptermarker chapters <input>` first or pass an existing file.",
        ) from exc
    try:
        return parse_chapters_txt(text)
    except ValueError as exc:
        raise ConfigurationError(
            stage="chapters-file",
            detail=f"Invalid chapters file `{chapters_file}`: {exc}",
            hint="Each line must look like `HH:MM:SS.mmm name`.",
        ) from exc


@app.command("list-chapters")
def list_chapters_command(
    chapters_file: Annotated[Path, typer.Argument(help="Path to a `chapters.txt` file.")],
) -> None:
    """List chapter rows of a `chapters.txt` file with their 0-based indices."""

    try:
        chapters = _read_chapters_file(chapters_file)
    except Exception as exc:
        exit_with_command_error("list-chapters", exc)

    echo_chapter_list(chapters)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
