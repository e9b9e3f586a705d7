"""Integration-test fixtures replacing ffmpeg/ffprobe calls with deterministic fakes."""

from __future__ import annotations

from pathlib import Path

import pytest

from chaptermarker.audio.probe import AudioInfo, FfprobeInspector
from chaptermarker.audio.silence import FfmpegSilenceDetector
from chaptermarker.audio.tags import FfmpegChapterImporter
from chaptermarker.models import ChapterCollection, Silence, TimeUnit


@pytest.fixture
def imported_chapters() -> list[ChapterCollection]:
    """Collect chapter collections passed to the mocked importer."""

    return []


@pytest.fixture(autouse=True)
def _mock_ffmpeg_tools(
    monkeypatch: pytest.MonkeyPatch, imported_chapters: list[ChapterCollection]
) -> None:
    """Mock ffprobe/ffmpeg collaborators so integration tests need no binaries."""

    def _mock_inspect(self, audio_path: Path) -> AudioInfo:
        """Return a fixed five-minute recording without stored chapters."""

        _ = self
        _ = audio_path
        return AudioInfo(duration=TimeUnit(300_000), chapters=ChapterCollection())

    def _mock_detect(self, audio_path: Path, duration: TimeUnit | None = None) -> list[Silence]:
        """Return deterministic silences around the one and three minute marks."""

        _ = self
        _ = audio_path
        _ = duration
        return [
            Silence(start=TimeUnit(59_000), length=TimeUnit(3000)),
            Silence(start=TimeUnit(120_000), length=TimeUnit(2000)),
            Silence(start=TimeUnit(179_500), length=TimeUnit(2000)),
        ]

    def _mock_import(
        self, audio_path: Path, chapters: ChapterCollection, duration: TimeUnit | None = None
    ) -> Path:
        """Record imported chapters instead of remuxing the file."""

        _ = self
        _ = duration
        imported_chapters.append(chapters)
        return audio_path

    monkeypatch.setattr(FfprobeInspector, "inspect", _mock_inspect)
    monkeypatch.setattr(FfmpegSilenceDetector, "detect", _mock_detect)
    monkeypatch.setattr(FfmpegChapterImporter, "import_chapters", _mock_import)


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    """Provide a placeholder audio file path that exists on disk."""

    audio_path = tmp_path / "book.m4b"
    audio_path.write_bytes(b"placeholder")
    return audio_path
