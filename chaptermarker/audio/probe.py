"""Duration and chapter probing backed by ffprobe.

Responsibilities:
- Read total duration and existing chapter marks of an audio file.
- Fail with a dependency error when no duration can be determined.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping

from ..errors import DependencyError
from ..models import Chapter, ChapterCollection, TimeUnit
from ..parsing import normalize_optional_string
from ..runtime_tools import run_tool


@dataclass(frozen=True, slots=True)
class AudioInfo:
    """Probed audio properties.

    Attributes:
        duration: Total playback duration.
        chapters: Chapters already stored in the container, possibly empty.
    """

    duration: TimeUnit
    chapters: ChapterCollection


def parse_ffprobe_payload(payload: Mapping[str, Any], source_label: str) -> AudioInfo:
    """Build `AudioInfo` from an ffprobe JSON payload.

    Raises:
        DependencyError: If the payload carries no usable duration.
    """

    raw_duration = (payload.get("format") or {}).get("duration")
    try:
        duration = TimeUnit.from_seconds(float(raw_duration))
    except (TypeError, ValueError) as exc:
        raise DependencyError(
            stage="probe",
            detail=f"Could not detect duration for file `{source_label}`.",
            hint="Verify the file is a complete, playable audio file.",
        ) from exc

    chapters: list[Chapter] = []
    for position, entry in enumerate(payload.get("chapters") or [], start=1):
        start = TimeUnit.from_seconds(float(entry.get("start_time", 0)))
        end = TimeUnit.from_seconds(float(entry.get("end_time", start.seconds())))
        title = normalize_optional_string((entry.get("tags") or {}).get("title"))
        chapters.append(
            Chapter(
                start=start,
                length=TimeUnit(max(0, end.milliseconds - start.milliseconds)),
                name=title or f"{position}",
            )
        )
    return AudioInfo(duration=duration, chapters=ChapterCollection(chapters))


class FfprobeInspector:
    """Probe duration and chapters of an audio file."""

    def inspect(self, audio_path: Path) -> AudioInfo:
        """Return duration and existing chapters for `audio_path`."""

        result = run_tool(
            "ffprobe",
            [
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_format",
                "-show_chapters",
                str(audio_path),
            ],
            stage="probe",
        )
        try:
            payload = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise DependencyError(
                stage="probe",
                detail=f"ffprobe returned unreadable output for `{audio_path}`.",
                hint="Verify the installed ffprobe supports `-print_format json`.",
            ) from exc
        return parse_ffprobe_payload(payload, str(audio_path))
