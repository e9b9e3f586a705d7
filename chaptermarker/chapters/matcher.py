"""Provisional chapter matching from hints and silences.

Responsibilities:
- Define the `ChapterMatcher` contract consumed by the pipeline.
- Provide a silence-snapping default implementation.
- Flag silences that already carry a matched chapter boundary.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from ..models import Chapter, ChapterCollection, ChapterHint, Silence, TimeUnit

DEFAULT_SEARCH_WINDOW_MS = 20_000
DEFAULT_CHAPTER_SILENCE_MIN_MS = 2000
DEFAULT_MIN_CHAPTER_LENGTH_MS = 60_000
UNNAMED_CHAPTER = "Chapter"


class ChapterMatcher(Protocol):
    """Turn hints, silences, and total duration into provisional chapters."""

    def match(
        self,
        hints: Sequence[ChapterHint],
        silences: Sequence[Silence],
        duration: TimeUnit,
    ) -> ChapterCollection:
        """Return one provisional chapter per hint, or silence-derived chapters."""


def _midpoint(silence: Silence) -> TimeUnit:
    return silence.start.add((silence.length.milliseconds + 1) // 2)


def mark_chapter_silences(
    chapters: ChapterCollection, silences: Sequence[Silence]
) -> list[Silence]:
    """Return silences with `is_chapter_start` set where a chapter starts inside them."""

    starts = [chapter.start for chapter in chapters]
    return [
        silence.as_chapter_start()
        if not silence.is_chapter_start and any(silence.contains(start) for start in starts)
        else silence
        for silence in sorted(silences, key=lambda item: item.start)
    ]


def chapters_from_starts(
    starts: Sequence[tuple[TimeUnit, str]], duration: TimeUnit
) -> ChapterCollection:
    """Build chapters from ordered `(start, name)` pairs, each running to the next start."""

    ordered = sorted(starts, key=lambda item: item[0])
    chapters: list[Chapter] = []
    for position, (start, name) in enumerate(ordered):
        end = ordered[position + 1][0] if position + 1 < len(ordered) else duration
        length = TimeUnit(max(0, end.milliseconds - start.milliseconds))
        chapters.append(Chapter(start=start, length=length, name=name))
    return ChapterCollection(chapters)


class SilenceChapterMatcher:
    """Snap hinted chapter starts to the most plausible nearby silence.

    With hints, each chapter after the first is moved to the midpoint of the
    longest silence whose midpoint lies within `search_window_ms` of the
    expected start. Without hints, long silences spaced at least
    `min_chapter_length_ms` apart open new chapters.
    """

    def __init__(
        self,
        search_window_ms: int = DEFAULT_SEARCH_WINDOW_MS,
        chapter_silence_min_ms: int = DEFAULT_CHAPTER_SILENCE_MIN_MS,
        min_chapter_length_ms: int = DEFAULT_MIN_CHAPTER_LENGTH_MS,
    ) -> None:
        self.search_window_ms = search_window_ms
        self.chapter_silence_min_ms = chapter_silence_min_ms
        self.min_chapter_length_ms = min_chapter_length_ms

    def match(
        self,
        hints: Sequence[ChapterHint],
        silences: Sequence[Silence],
        duration: TimeUnit,
    ) -> ChapterCollection:
        ordered_silences = sorted(silences, key=lambda silence: silence.start)
        if hints:
            return self._match_hints(hints, ordered_silences, duration)
        return self._match_silences(ordered_silences, duration)

    def _match_hints(
        self,
        hints: Sequence[ChapterHint],
        silences: list[Silence],
        duration: TimeUnit,
    ) -> ChapterCollection:
        starts: list[tuple[TimeUnit, str]] = []
        used: set[int] = set()
        expected = TimeUnit(0)
        previous_length: TimeUnit | None = None

        for position, hint in enumerate(hints):
            if hint.start is not None:
                expected = hint.start
            elif previous_length is not None:
                expected = expected.add(previous_length)
            else:
                # untimed hints are spread evenly over the recording
                expected = TimeUnit(duration.milliseconds * position // len(hints))
            previous_length = hint.length

            if position == 0:
                starts.append((expected, hint.name))
                continue

            snapped = self._best_silence(expected, silences, used)
            if snapped is None:
                starts.append((expected, hint.name))
                continue
            used.add(snapped.start.milliseconds)
            starts.append((_midpoint(snapped), hint.name))
            if hint.start is None:
                expected = _midpoint(snapped)

        return chapters_from_starts(starts, duration)

    def _best_silence(
        self, expected: TimeUnit, silences: list[Silence], used: set[int]
    ) -> Silence | None:
        """Pick the longest unused silence near `expected`; ties go to the closest one."""

        candidates = [
            silence
            for silence in silences
            if silence.start.milliseconds not in used
            and abs(_midpoint(silence).milliseconds - expected.milliseconds)
            <= self.search_window_ms
        ]
        if not candidates:
            return None
        return max(
            candidates,
            key=lambda silence: (
                silence.length.milliseconds,
                -abs(_midpoint(silence).milliseconds - expected.milliseconds),
            ),
        )

    def _match_silences(
        self, silences: list[Silence], duration: TimeUnit
    ) -> ChapterCollection:
        starts: list[tuple[TimeUnit, str]] = [(TimeUnit(0), UNNAMED_CHAPTER)]
        last_start = TimeUnit(0)
        for silence in silences:
            if silence.length.milliseconds < self.chapter_silence_min_ms:
                continue
            candidate = _midpoint(silence)
            if candidate.milliseconds - last_start.milliseconds < self.min_chapter_length_ms:
                continue
            if duration.milliseconds - candidate.milliseconds < self.min_chapter_length_ms:
                continue
            starts.append((candidate, UNNAMED_CHAPTER))
            last_start = candidate
        return chapters_from_starts(starts, duration)
