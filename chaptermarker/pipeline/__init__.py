"""chaptermarker pipeline package.

This package contains the orchestration facade and stage telemetry helpers
for chapterizing one recording.
"""

from .orchestrator import ChaptersPipeline

__all__ = ["ChaptersPipeline"]
