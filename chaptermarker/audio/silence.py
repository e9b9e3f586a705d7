"""Silence detection backed by ffmpeg's `silencedetect` filter.

Responsibilities:
- Run `silencedetect` over one audio file.
- Parse `silence_start`/`silence_end` stderr lines into ordered `Silence` records.
"""

from __future__ import annotations

from pathlib import Path
import re

from loguru import logger

from ..errors import ConfigurationError
from ..models import Silence, TimeUnit
from ..runtime_tools import run_tool

DEFAULT_SILENCE_MIN_LENGTH_MS = 1750
DEFAULT_SILENCE_NOISE_DB = -30.0

_FFMPEG_NUMBER = r"[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?"
_SILENCE_START = re.compile(rf"silence_start:\s*({_FFMPEG_NUMBER})")
_SILENCE_END = re.compile(
    rf"silence_end:\s*({_FFMPEG_NUMBER})(?:\s*\|\s*silence_duration:\s*({_FFMPEG_NUMBER}))?"
)


def parse_silencedetect_output(
    stderr: str, duration: TimeUnit | None = None
) -> list[Silence]:
    """Parse ffmpeg `silencedetect` log output into silences sorted by start.

    A trailing `silence_start` without a matching end runs to `duration` when it
    is known and is dropped otherwise.
    """

    silences: list[Silence] = []
    pending_start: TimeUnit | None = None
    for line in stderr.splitlines():
        start_match = _SILENCE_START.search(line)
        if start_match is not None:
            pending_start = TimeUnit.from_seconds(max(0.0, float(start_match.group(1))))
            continue

        end_match = _SILENCE_END.search(line)
        if end_match is None or pending_start is None:
            continue
        end = TimeUnit.from_seconds(float(end_match.group(1)))
        silences.append(
            Silence(
                start=pending_start,
                length=TimeUnit(max(0, end.milliseconds - pending_start.milliseconds)),
            )
        )
        pending_start = None

    if pending_start is not None and duration is not None and duration > pending_start:
        silences.append(
            Silence(
                start=pending_start,
                length=TimeUnit(duration.milliseconds - pending_start.milliseconds),
            )
        )
    return sorted(silences, key=lambda silence: silence.start)


class FfmpegSilenceDetector:
    """Detect silences in an audio file via ffmpeg."""

    def __init__(
        self,
        min_length_ms: int = DEFAULT_SILENCE_MIN_LENGTH_MS,
        noise_db: float = DEFAULT_SILENCE_NOISE_DB,
    ) -> None:
        if min_length_ms < 1:
            raise ConfigurationError(
                stage="silence",
                detail="`silence_min_length_ms` must be a positive integer value.",
                hint="Pass `--silence-min-length` with a value of at least 1.",
            )
        self.min_length_ms = min_length_ms
        self.noise_db = noise_db

    def detect(self, audio_path: Path, duration: TimeUnit | None = None) -> list[Silence]:
        """Return silences of at least `min_length_ms`, ordered by start."""

        min_seconds = self.min_length_ms / 1000
        result = run_tool(
            "ffmpeg",
            [
                "-hide_banner",
                "-nostats",
                "-i",
                str(audio_path),
                "-af",
                f"silencedetect=noise={self.noise_db:g}dB:d={min_seconds:g}",
                "-f",
                "null",
                "-",
            ],
            stage="silence",
        )
        silences = parse_silencedetect_output(result.stderr, duration)
        logger.debug("detected {} silences in {}", len(silences), audio_path.name)
        return silences
