"""Data models for URL expansion."""

from .types import (
    ExpansionConfig,
    OccurrenceKind,
    ProcessResult,
    ResolutionOutcome,
    URLOccurrence,
)

__all__ = [
    "ExpansionConfig",
    "OccurrenceKind",
    "ProcessResult",
    "ResolutionOutcome",
    "URLOccurrence",
]
