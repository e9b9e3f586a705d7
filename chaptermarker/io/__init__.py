"""Input/output components for chaptermarker.

This package contains the `chapters.txt` writer, parsers, and hint loading
used by the pipeline.
"""

from .chapters_txt import (
    ChaptersTxtWriter,
    format_chapters_txt,
    load_hints,
    parse_chapters_txt,
)

__all__ = ["ChaptersTxtWriter", "format_chapters_txt", "load_hints", "parse_chapters_txt"]
