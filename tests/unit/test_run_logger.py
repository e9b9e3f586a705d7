"""Unit tests for deterministic phase log lines."""

from __future__ import annotations

import io

from chaptermarker.telemetry.logger import RunLogger


def test_run_logger_emits_sorted_sanitized_phase_lines() -> None:
    """Phase lines should carry level, stage, event, and sorted context tokens."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.log_stage_start("probe")
    run_logger.log_stage_complete("misplaced", targets="8,15", chapters=12, note="two words")
    run_logger.log_stage_skipped("import", "no_chapter_import")
    run_logger.log_stage_failure("silence", "DependencyError")

    assert sink.getvalue().splitlines() == [
        "[phase] level=INFO stage=probe event=start",
        "[phase] level=INFO stage=misplaced event=complete chapters=12 note=two_words targets=8,15",
        "[phase] level=INFO stage=import event=skipped reason=no_chapter_import",
        "[phase] level=ERROR stage=silence event=failure error_type=DependencyError",
    ]
