"""Domain exceptions for pipeline and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ConfigurationError(PipelineStageError):
    """Raised for invalid options such as a broken rename pattern."""


class DependencyError(PipelineStageError):
    """Raised when a collaborator cannot supply duration, tags, or silences."""


class InvalidArgumentError(PipelineStageError):
    """Raised for malformed argument values when strict parsing is requested."""
