"""Data types for URL expansion."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class OccurrenceKind(Enum):
    """How a URL appears in the source text."""

    MARKDOWN = "markdown"
    BARE = "bare"


@dataclass(frozen=True)
class URLOccurrence:
    """A single position of a URL in the source text.

    For Markdown links the span covers the whole ``[label](url)`` construct,
    for bare URLs only the URL token.
    """

    raw_url: str
    kind: OccurrenceKind
    span_start: int
    span_end: int
    display_text: Optional[str] = None

    def span_text(self, text: str) -> str:
        """Return the exact source text covered by this occurrence."""
        return text[self.span_start:self.span_end]

    def overlaps(self, other: "URLOccurrence") -> bool:
        return self.span_start < other.span_end and other.span_start < self.span_end


@dataclass(frozen=True)
class ResolutionOutcome:
    """Result of resolving one URL."""

    original_url: str
    resolved_url: str
    resolved: bool
    attempts: int = 0
    error: Optional[str] = None

    @classmethod
    def unresolved(
        cls, url: str, attempts: int = 0, error: Optional[str] = None
    ) -> "ResolutionOutcome":
        """Outcome for a URL left unchanged."""
        return cls(
            original_url=url,
            resolved_url=url,
            resolved=False,
            attempts=attempts,
            error=error,
        )

    @property
    def changed(self) -> bool:
        return self.resolved and self.resolved_url != self.original_url


@dataclass(frozen=True)
class ExpansionConfig:
    """Engine settings, fixed at construction."""

    concurrency: int = 5
    timeout_ms: int = 30000
    max_retries: int = 2

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout must be > 0 ms, got {self.timeout_ms}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")


@dataclass
class ProcessResult:
    """Result from URLExpander.process_file()."""

    success: bool
    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "input_path": str(self.input_path),
            "output_path": str(self.output_path),
        }
