"""Misplaced-chapter diagnostic markers.

Responsibilities:
- Bracket suspicious chapters with labeled candidate markers built from nearby silences.
- Add tolerance-shifted markers that compensate the detector's systematic offset.
- Suffix every original chapter with its 0-based index so markers can be mapped back.

The inserted markers are review aids only: original chapters are never removed or moved,
so a marker landing exactly on an existing chapter start is dropped.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from loguru import logger

from ..models import Chapter, ChapterCollection, Silence, TimeUnit

DEFAULT_MISPLACED_OFFSET_MS = 120_000
DEFAULT_MISPLACED_TOLERANCE_MS = -4000


def _half_up(milliseconds: int) -> int:
    """Return half of a non-negative millisecond count, rounding .5 upward."""

    return (milliseconds + 1) // 2


def _clamped(position: TimeUnit) -> TimeUnit:
    return position if position.milliseconds >= 0 else TimeUnit(0)


class MisplacedChapterDiagnostics:
    """Insert diagnostic candidate chapters around selected chapter indices."""

    def annotate(
        self,
        chapters: ChapterCollection,
        silences: Sequence[Silence],
        target_indices: Iterable[int],
        max_offset_ms: int = DEFAULT_MISPLACED_OFFSET_MS,
        tolerance_ms: int = DEFAULT_MISPLACED_TOLERANCE_MS,
        duration: TimeUnit | None = None,
    ) -> ChapterCollection:
        """Return a new collection with diagnostic markers for each target index.

        Args:
            chapters: Normalized chapter collection.
            silences: Detected silences; entries flagged as chapter starts are ignored.
            target_indices: 0-based positions of chapters suspected to be misplaced.
            max_offset_ms: Search radius around the chapter start; `0` disables clamping.
            tolerance_ms: Signed shift for tolerance markers (typically negative).
            duration: Total recording length, bounding the window of the last chapter.
        """

        numbered = chapters.copy().sort().chapters()
        targets = set(target_indices)
        skipped = sorted(index for index in targets if not 0 <= index < len(numbered))
        if skipped:
            logger.warning(
                "misplaced chapter indices out of range for {} chapters: {}",
                len(numbered),
                ",".join(str(index) for index in skipped),
            )

        ordered_silences = sorted(silences, key=lambda silence: silence.start)
        total = duration if duration is not None else (
            numbered[-1].end if numbered else TimeUnit(0)
        )

        diagnostics: list[Chapter] = []
        for index, chapter in enumerate(numbered):
            if index not in targets:
                continue
            window_start, window_end = self._window(numbered, index, total, max_offset_ms)
            diagnostics.extend(
                self._markers_for(
                    chapter, ordered_silences, window_start, window_end, tolerance_ms
                )
            )

        result = ChapterCollection(
            chapter.with_name(f"{chapter.name} - index: {index}")
            for index, chapter in enumerate(numbered)
        )
        original_keys = set(result.keys())
        for marker in diagnostics:
            if marker.key in original_keys:
                logger.warning(
                    "diagnostic marker at {} skipped, a chapter already starts there: `{}`",
                    marker.start.format(),
                    marker.name,
                )
                continue
            result.put(marker)
        return result.sort()

    def _window(
        self,
        numbered: list[Chapter],
        index: int,
        total: TimeUnit,
        max_offset_ms: int,
    ) -> tuple[TimeUnit, TimeUnit]:
        """Resolve the search window between neighbors, optionally clamped around the start."""

        chapter = numbered[index]
        start = numbered[index - 1].end if index > 0 else TimeUnit(0)
        end = numbered[index + 1].start if index + 1 < len(numbered) else total
        if max_offset_ms > 0:
            start = max(start, chapter.start.add(-max_offset_ms))
            end = min(end, chapter.start.add(max_offset_ms))
        return start, end

    def _markers_for(
        self,
        chapter: Chapter,
        silences: list[Silence],
        window_start: TimeUnit,
        window_end: TimeUnit,
        tolerance_ms: int,
    ) -> list[Chapter]:
        """Build the tolerance marker and silence candidates for one chapter."""

        tolerance_start = _clamped(chapter.start.add(tolerance_ms))
        markers = [
            Chapter(
                start=tolerance_start,
                length=chapter.length,
                name=(
                    f"=> tolerance {tolerance_ms}ms: {chapter.name}"
                    f" - pos: {tolerance_start.format()}"
                ),
            )
        ]

        silence_number = 1
        for silence in silences:
            if silence.is_chapter_start:
                continue
            if silence.start < window_start or silence.start > window_end:
                continue

            direction = "before" if silence.start < chapter.start else "after"
            candidate_name = (
                f"=> silence {silence_number} {direction}: {chapter.name}"
                f" - pos: {silence.start.format()}, len: {silence.length.format()}"
            )
            markers.append(
                Chapter(
                    start=silence.start.add(_half_up(silence.length.milliseconds)),
                    length=silence.length,
                    name=candidate_name,
                )
            )
            markers.append(
                Chapter(
                    start=_clamped(silence.start.add(tolerance_ms)),
                    length=silence.length,
                    name=f"{candidate_name} - tolerance",
                )
            )
            silence_number += 1
        return markers
