"""Telemetry and observability helpers.

This package emits deterministic run events for auditing pipeline stages.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
