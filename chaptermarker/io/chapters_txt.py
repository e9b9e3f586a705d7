"""Line-oriented chapter text format (mp4v2 `chapters.txt`).

Responsibilities:
- Serialize a chapter collection as `HH:MM:SS.mmm <name>` lines in sorted order.
- Parse such files back into chapters or into chapter hints.
"""

from __future__ import annotations

from pathlib import Path
import re

from ..chapters.matcher import chapters_from_starts
from ..models import ChapterCollection, ChapterHint, TimeUnit

# At least `MM:SS`; a bare leading number belongs to the chapter name.
_LINE_TIMESTAMP = re.compile(r"^(?:\d+:)?\d+:\d+(?:\.\d{1,3})?$")


def format_chapters_txt(chapters: ChapterCollection) -> str:
    """Return one `HH:MM:SS.mmm name` line per chapter, sorted by start."""

    lines = [
        f"{chapter.start.format()} {chapter.name}"
        for chapter in chapters.copy().sort()
    ]
    return "\n".join(lines) + ("\n" if lines else "")


def parse_hint_lines(text: str) -> list[ChapterHint]:
    """Parse hint lines: `HH:MM:SS.mmm name` for timed hints, bare text otherwise.

    Blank lines and lines starting with `#` are skipped.
    """

    hints: list[ChapterHint] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        head, _, rest = line.partition(" ")
        if _LINE_TIMESTAMP.match(head) is None:
            hints.append(ChapterHint(name=line))
            continue
        hints.append(ChapterHint(name=rest.strip(), start=TimeUnit.parse(head)))
    return hints


def parse_chapters_txt(text: str, duration: TimeUnit | None = None) -> ChapterCollection:
    """Parse timed chapter lines; each chapter runs to the next start.

    Raises:
        ValueError: If a non-blank line does not start with a timestamp.
    """

    starts: list[tuple[TimeUnit, str]] = []
    for hint in parse_hint_lines(text):
        if hint.start is None:
            raise ValueError(f"Chapter line without timestamp: `{hint.name}`.")
        starts.append((hint.start, hint.name))
    if not starts:
        return ChapterCollection()
    end = duration if duration is not None else max(start for start, _ in starts)
    return chapters_from_starts(starts, end)


class ChaptersTxtWriter:
    """Write chapter collections as `chapters.txt` files."""

    def write(self, path: Path, chapters: ChapterCollection) -> Path:
        """Write `chapters` to `path`, creating parent directories."""

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(format_chapters_txt(chapters), encoding="utf-8")
        return path

    def write_backup(self, path: Path, chapters: ChapterCollection) -> bool:
        """Write a backup once; return `False` when `path` already exists."""

        if path.exists():
            return False
        self.write(path, chapters)
        return True


def load_hints(path: Path) -> list[ChapterHint]:
    """Load chapter hints from a text file."""

    return parse_hint_lines(path.read_text(encoding="utf-8"))


def default_chapters_path(audio_path: Path) -> Path:
    """Return `<dir>/<stem>.chapters.txt` for an audio file."""

    return audio_path.with_name(f"{audio_path.stem}.chapters.txt")


def default_backup_path(audio_path: Path) -> Path:
    """Return `<dir>/<stem>.chapters-backup.txt` for an audio file."""

    return audio_path.with_name(f"{audio_path.stem}.chapters-backup.txt")
