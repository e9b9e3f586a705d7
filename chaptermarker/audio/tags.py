"""Chapter metadata writing for audio containers.

Responsibilities:
- Render chapters as an ffmpeg FFMETADATA document.
- Remux a file with replaced chapter marks, keeping streams and other tags intact.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..models import ChapterCollection, TimeUnit
from ..runtime_tools import run_tool

_FFMETADATA_SPECIAL_CHARACTERS = ("\\", "=", ";", "#", "\n")


def escape_ffmetadata_value(value: str) -> str:
    """Escape a value for FFMETADATA (`\\`, `=`, `;`, `#`, and newlines)."""

    escaped = value
    for character in _FFMETADATA_SPECIAL_CHARACTERS:
        escaped = escaped.replace(character, f"\\{character}")
    return escaped


def format_ffmetadata(chapters: ChapterCollection, duration: TimeUnit | None = None) -> str:
    """Render chapters as FFMETADATA `[CHAPTER]` blocks in millisecond timebase.

    Each chapter ends where the next one starts; the last one ends at `duration`
    when given, otherwise at its own end.
    """

    ordered = chapters.copy().sort().chapters()
    lines = [";FFMETADATA1"]
    for position, chapter in enumerate(ordered):
        if position + 1 < len(ordered):
            end = ordered[position + 1].start
        elif duration is not None and duration > chapter.start:
            end = duration
        else:
            end = chapter.end
        lines.extend(
            [
                "[CHAPTER]",
                "TIMEBASE=1/1000",
                f"START={chapter.start.milliseconds}",
                f"END={max(end.milliseconds, chapter.start.milliseconds)}",
                f"title={escape_ffmetadata_value(chapter.name)}",
            ]
        )
    return "\n".join(lines) + "\n"


class FfmpegChapterImporter:
    """Write chapter marks into an audio container via an ffmpeg remux."""

    def import_chapters(
        self,
        audio_path: Path,
        chapters: ChapterCollection,
        duration: TimeUnit | None = None,
    ) -> Path:
        """Replace chapters stored in `audio_path` and return the path."""

        metadata_path = audio_path.with_name(f"{audio_path.stem}.ffmetadata.txt")
        remuxed_path = audio_path.with_name(f"{audio_path.stem}.chapters-tmp{audio_path.suffix}")
        metadata_path.write_text(format_ffmetadata(chapters, duration), encoding="utf-8")
        try:
            run_tool(
                "ffmpeg",
                [
                    "-y",
                    "-hide_banner",
                    "-loglevel",
                    "error",
                    "-i",
                    str(audio_path),
                    "-i",
                    str(metadata_path),
                    "-map",
                    "0",
                    "-map_metadata",
                    "0",
                    "-map_chapters",
                    "1",
                    "-codec",
                    "copy",
                    str(remuxed_path),
                ],
                stage="import",
            )
            remuxed_path.replace(audio_path)
        finally:
            if metadata_path.exists():
                metadata_path.unlink()
            if remuxed_path.exists():
                remuxed_path.unlink()

        logger.debug("imported {} chapters into {}", len(chapters), audio_path.name)
        return audio_path
