"""Pipeline orchestration for chaptermarker.

Responsibilities:
- Define the stage order for chapterizing one recording.
- Coordinate probing, silence detection, matching, normalization, diagnostics,
  and chapter import/export into a `ChaptersRunResult`.

Key types:
- `ChaptersPipeline`: orchestration facade with injectable collaborators.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol, Sequence

from ..audio.probe import AudioInfo, FfprobeInspector
from ..audio.silence import FfmpegSilenceDetector
from ..audio.tags import FfmpegChapterImporter
from ..chapters.diagnostics import MisplacedChapterDiagnostics
from ..chapters.matcher import ChapterMatcher, SilenceChapterMatcher, mark_chapter_silences
from ..chapters.normalizer import ChapterNormalizer
from ..config import ChaptersConfig
from ..errors import ConfigurationError, DependencyError
from ..io.chapters_txt import ChaptersTxtWriter, default_backup_path, load_hints
from ..models import ChapterCollection, ChapterHint, ChaptersRunResult, Silence, TimeUnit
from ..telemetry.logger import RunLogger
from .telemetry import PipelineTelemetryMixin


class SilenceDetector(Protocol):
    def detect(self, audio_path: Path, duration: TimeUnit | None = None) -> list[Silence]:
        """Return silences ordered by start."""


class AudioInspector(Protocol):
    def inspect(self, audio_path: Path) -> AudioInfo:
        """Return duration and existing chapters."""


class ChapterImporter(Protocol):
    def import_chapters(
        self, audio_path: Path, chapters: ChapterCollection, duration: TimeUnit | None = None
    ) -> Path:
        """Write chapters into the audio container."""


def _default_detector_factory(config: ChaptersConfig) -> SilenceDetector:
    return FfmpegSilenceDetector(
        min_length_ms=config.silence_min_length_ms,
        noise_db=config.silence_noise_db,
    )


class ChaptersPipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single chapter run."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        *,
        inspector: AudioInspector | None = None,
        detector_factory: Callable[[ChaptersConfig], SilenceDetector] | None = None,
        matcher: ChapterMatcher | None = None,
        importer: ChapterImporter | None = None,
        writer: ChaptersTxtWriter | None = None,
    ) -> None:
        """Initialize logging hooks and collaborators; defaults wrap ffmpeg/ffprobe."""

        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._inspector = inspector or FfprobeInspector()
        self._detector_factory = detector_factory or _default_detector_factory
        self._matcher = matcher or SilenceChapterMatcher()
        self._importer = importer or FfmpegChapterImporter()
        self._writer = writer or ChaptersTxtWriter()
        self._normalizer = ChapterNormalizer()
        self._diagnostics = MisplacedChapterDiagnostics()

    def run(self, config: ChaptersConfig) -> ChaptersRunResult:
        """Chapterize `config.input_audio` and write the chapters file.

        Raises:
            PipelineStageError: Any configuration or collaborator failure; no chapter
                artifact is written in that case.
        """

        output_path = self._run_stage("config", lambda: self._prepare(config))
        audio_path = config.input_audio

        info = self._run_stage(
            "probe",
            lambda: self._inspector.inspect(audio_path),
            lambda result: {
                "duration": result.duration.format(),
                "chapters": len(result.chapters),
            },
        )
        silences = self._run_stage(
            "silence",
            lambda: self._detector_factory(config).detect(audio_path, info.duration),
            lambda result: {"silences": len(result)},
        )

        chapters = self._run_stage(
            "match",
            lambda: self._matcher.match(
                self._resolve_hints(config, info), silences, info.duration
            ),
            lambda result: {"chapters": len(result)},
        )
        silences = mark_chapter_silences(chapters, silences)

        if config.adjust_by_silence:
            self._on_stage_skipped("normalize", "adjust_by_silence")
            self._on_stage_skipped("misplaced", "adjust_by_silence")
        else:
            chapters = self._normalize_and_annotate(config, chapters, silences, info.duration)

        backup_path = self._backup(config, info)
        imported = False
        if config.no_chapter_import:
            self._on_stage_skipped("import", "no_chapter_import")
        else:
            self._run_stage(
                "import",
                lambda: self._importer.import_chapters(audio_path, chapters, info.duration),
            )
            imported = True

        self._run_stage("export", lambda: self._writer.write(output_path, chapters))

        return ChaptersRunResult(
            input_audio=audio_path,
            duration=info.duration,
            silence_count=len(silences),
            chapters=chapters,
            chapters_path=output_path,
            imported=imported,
            backup_path=backup_path,
        )

    def _prepare(self, config: ChaptersConfig) -> Path:
        """Validate config and input/output paths; return the chapters file path."""

        config.validate()
        if not config.input_audio.is_file():
            raise DependencyError(
                stage="config",
                detail=f"Input file is not a valid file: `{config.input_audio}`.",
                hint="Pass a single audio file; directories are not supported.",
            )
        if config.hints_file is not None and not config.hints_file.is_file():
            raise DependencyError(
                stage="config",
                detail=f"Hints file not found: `{config.hints_file}`.",
                hint="Pass an existing file via `--hints`.",
            )
        output_path = config.chapters_output_path()
        if output_path.exists() and not config.force:
            raise ConfigurationError(
                stage="config",
                detail=f"Output file already exists: `{output_path}`.",
                hint="Add `--force` to overwrite it.",
            )
        return output_path

    def _resolve_hints(self, config: ChaptersConfig, info: AudioInfo) -> list[ChapterHint]:
        """Return hints from existing chapters (adjust mode) or the hints file."""

        if config.adjust_by_silence:
            if len(info.chapters) == 0:
                raise DependencyError(
                    stage="match",
                    detail=f"No chapters found in `{config.input_audio}` to adjust.",
                    hint="Drop `--adjust-by-silence` to build chapters from silences.",
                )
            return [
                ChapterHint(name=chapter.name, start=chapter.start, length=chapter.length)
                for chapter in info.chapters
            ]
        if config.hints_file is None:
            return []
        try:
            return load_hints(config.hints_file)
        except (OSError, UnicodeDecodeError) as exc:
            raise DependencyError(
                stage="match",
                detail=f"Could not read hints file `{config.hints_file}`: {exc}",
                hint="Provide a UTF-8 text file with one chapter per line.",
            ) from exc

    def _normalize_and_annotate(
        self,
        config: ChaptersConfig,
        chapters: ChapterCollection,
        silences: Sequence[Silence],
        duration: TimeUnit,
    ) -> ChapterCollection:
        normalized = self._run_stage(
            "normalize",
            lambda: self._normalizer.normalize(chapters, config.normalize_options()),
            lambda result: {"chapters": len(result)},
        )
        targets = config.misplaced_indices()
        if not targets:
            self._on_stage_skipped("misplaced", "no_targets")
            return normalized
        return self._run_stage(
            "misplaced",
            lambda: self._diagnostics.annotate(
                normalized,
                silences,
                targets,
                max_offset_ms=config.misplaced_offset_ms(),
                tolerance_ms=config.find_misplaced_tolerance_ms,
                duration=duration,
            ),
            lambda result: {
                "targets": ",".join(str(index) for index in targets),
                "chapters": len(result),
            },
        )

    def _backup(self, config: ChaptersConfig, info: AudioInfo) -> Path | None:
        """Write pre-existing chapters once before they are replaced."""

        if config.no_chapter_import or len(info.chapters) == 0:
            self._on_stage_skipped("backup", "nothing_to_replace")
            return None
        backup_path = default_backup_path(config.input_audio)
        written = self._run_stage(
            "backup",
            lambda: self._writer.write_backup(backup_path, info.chapters),
            lambda result: {"written": result},
        )
        return backup_path if written else None

