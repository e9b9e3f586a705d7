"""Core datatypes shared across chaptermarker modules.

Responsibilities:
- Represent immutable time and interval records exchanged between stages.
- Keep arithmetic on integral milliseconds so keys and positions stay exact.

Key types:
- `TimeUnit`, `Silence`, `Chapter`, `ChapterHint`, and `ChaptersRunResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .collection import ChapterCollection

_TIMESTAMP_PATTERN = re.compile(
    r"^(?P<sign>-)?(?:(?:(?P<hours>\d+):)?(?P<minutes>\d+):)?(?P<seconds>\d+)(?:\.(?P<fraction>\d{1,3}))?$"
)


@dataclass(frozen=True, slots=True, order=True)
class TimeUnit:
    """Instant or duration in integral milliseconds.

    Attributes:
        milliseconds: Signed millisecond count. Absolute positions are expected to be
            non-negative, intermediate arithmetic may go below zero.
    """

    milliseconds: int = 0

    @classmethod
    def from_seconds(cls, seconds: float) -> TimeUnit:
        """Build a value from fractional seconds, rounded to the nearest millisecond."""

        return cls(int(round(seconds * 1000)))

    @classmethod
    def parse(cls, value: str) -> TimeUnit:
        """Parse `HH:MM:SS.mmm` (hours and minutes optional) into a time value.

        Raises:
            ValueError: If the value is not a recognized timestamp.
        """

        match = _TIMESTAMP_PATTERN.match(value.strip())
        if match is None:
            raise ValueError(f"Invalid timestamp `{value}`. Use `HH:MM:SS.mmm`.")
        fraction = (match.group("fraction") or "0").ljust(3, "0")
        total = (
            int(match.group("hours") or 0) * 3_600_000
            + int(match.group("minutes") or 0) * 60_000
            + int(match.group("seconds")) * 1000
            + int(fraction)
        )
        return cls(-total if match.group("sign") else total)

    def add(self, delta: int | TimeUnit) -> TimeUnit:
        """Return a new value shifted by a signed millisecond delta."""

        offset = delta.milliseconds if isinstance(delta, TimeUnit) else int(delta)
        return TimeUnit(self.milliseconds + offset)

    def seconds(self) -> float:
        """Return the value as fractional seconds."""

        return self.milliseconds / 1000

    def format(self) -> str:
        """Format as `HH:MM:SS.mmm`, prefixed with `-` for negative values."""

        sign = "-" if self.milliseconds < 0 else ""
        remaining = abs(self.milliseconds)
        hours, remaining = divmod(remaining, 3_600_000)
        minutes, remaining = divmod(remaining, 60_000)
        seconds, millis = divmod(remaining, 1000)
        return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, slots=True)
class Silence:
    """A detected low-amplitude interval.

    Attributes:
        start: Interval start position.
        length: Interval duration.
        is_chapter_start: Whether a matched chapter boundary already lies in this silence.
    """

    start: TimeUnit
    length: TimeUnit
    is_chapter_start: bool = False

    @property
    def end(self) -> TimeUnit:
        return self.start.add(self.length)

    def contains(self, position: TimeUnit) -> bool:
        """Return whether `position` falls inside the closed silence interval."""

        return self.start <= position <= self.end

    def as_chapter_start(self) -> Silence:
        return replace(self, is_chapter_start=True)


@dataclass(frozen=True, slots=True)
class Chapter:
    """A named time interval used for navigation.

    Attributes:
        start: Chapter start position.
        length: Chapter duration.
        name: Display name.
    """

    start: TimeUnit
    length: TimeUnit
    name: str

    @property
    def end(self) -> TimeUnit:
        return self.start.add(self.length)

    @property
    def key(self) -> int:
        """Collection key: start position in whole milliseconds."""

        return self.start.milliseconds

    def with_name(self, name: str) -> Chapter:
        return replace(self, name=name)

    def with_start(self, start: TimeUnit) -> Chapter:
        return replace(self, start=start)

    def with_length(self, length: TimeUnit) -> Chapter:
        return replace(self, length=length)


@dataclass(frozen=True, slots=True)
class ChapterHint:
    """Externally supplied chapter name with optional timing.

    Attributes:
        name: Chapter name as provided by the hint source.
        start: Optional expected start position.
        length: Optional expected chapter length.
    """

    name: str
    start: TimeUnit | None = None
    length: TimeUnit | None = None


@dataclass(frozen=True, slots=True)
class ChaptersRunResult:
    """Record of one chapter pipeline run.

    Attributes:
        input_audio: Processed audio file.
        duration: Probed total duration.
        silence_count: Number of detected silences.
        chapters: Final chapter collection.
        chapters_path: Written `chapters.txt` path.
        imported: Whether chapters were written into the audio file.
        backup_path: Backup of pre-existing chapters, when one was written.
    """

    input_audio: Path
    duration: TimeUnit
    silence_count: int
    chapters: ChapterCollection
    chapters_path: Path
    imported: bool
    backup_path: Path | None = None
