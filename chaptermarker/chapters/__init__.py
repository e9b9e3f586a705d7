"""Chapter matching, normalization, and misplaced-chapter diagnostics."""

from .diagnostics import MisplacedChapterDiagnostics
from .matcher import ChapterMatcher, SilenceChapterMatcher, mark_chapter_silences
from .normalizer import ChapterNormalizer, NormalizeOptions

__all__ = [
    "ChapterMatcher",
    "ChapterNormalizer",
    "MisplacedChapterDiagnostics",
    "NormalizeOptions",
    "SilenceChapterMatcher",
    "mark_chapter_silences",
]
