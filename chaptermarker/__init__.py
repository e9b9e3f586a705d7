"""Top-level package for chaptermarker.

This package derives chapter marks for long audio recordings from detected
silences and optional chapter hints, normalizes them, and can insert
diagnostic markers around chapters that look misplaced. The main
orchestration entry point is `ChaptersPipeline`.
"""

from .pipeline import ChaptersPipeline

__all__ = ["ChaptersPipeline", "__version__"]

__version__ = "0.1.0"
