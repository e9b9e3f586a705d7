"""Audio collaborators: silence detection, probing, and chapter tagging.

This package wraps the ffmpeg and ffprobe command-line tools.
"""

from .probe import AudioInfo, FfprobeInspector
from .silence import FfmpegSilenceDetector
from .tags import FfmpegChapterImporter

__all__ = [
    "AudioInfo",
    "FfmpegChapterImporter",
    "FfmpegSilenceDetector",
    "FfprobeInspector",
]
