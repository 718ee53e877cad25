"""URL Expander - rewrites shortened URLs in text with their destinations.

This module provides tools to:
1. Detect URLs in text (bare and Markdown links) and classify shorteners
2. Resolve shorteners via a HEAD probe, falling back to a headless browser
3. Rewrite the text, leaving everything else byte-identical

Example:
    from url_expander import URLExpander

    async with URLExpander(concurrency=5, timeout=30000, max_retries=2) as expander:
        result = await expander.process_file("notes.md", "notes_expanded.md")

    if result.success:
        print(f"Wrote {result.output_path}")
    else:
        print(f"Error: {result.error}")
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import (
    ClassificationError,
    ExpansionError,
    FileError,
    NavigationError,
    ProbeError,
)
from .links import ShortenerClassifier, ShortenerRegistry, URLDetector
from .models import (
    ExpansionConfig,
    OccurrenceKind,
    ProcessResult,
    ResolutionOutcome,
    URLOccurrence,
)
from .resolvers import (
    BaseNavigator,
    BaseProbe,
    PlaywrightNavigator,
    RedirectProbe,
    RedirectResolver,
)
from .rewriter import TextRewriter
from .scheduler import BatchScheduler

__version__ = "0.1.0"

__all__ = [
    # Main class
    "URLExpander",
    "default_output_path",
    # Models
    "ExpansionConfig",
    "OccurrenceKind",
    "ProcessResult",
    "ResolutionOutcome",
    "URLOccurrence",
    # Components (for standalone use)
    "BatchScheduler",
    "PlaywrightNavigator",
    "RedirectProbe",
    "RedirectResolver",
    "ShortenerClassifier",
    "ShortenerRegistry",
    "TextRewriter",
    "URLDetector",
    # Errors
    "ClassificationError",
    "ExpansionError",
    "FileError",
    "NavigationError",
    "ProbeError",
]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def default_output_path(input_path: PathLike, suffix: str = "_expanded") -> Path:
    """Output path next to the input: ``notes.md`` -> ``notes_expanded.md``."""
    path = Path(input_path)
    return path.with_name(f"{path.stem}{suffix}{path.suffix}")


class URLExpander:
    """Main class for expanding shortened URLs in text.

    Combines detection, classification, batched resolution and rewriting
    into a single API. The headless browser is only started if some URL
    needs the navigation tier, and must be released with ``close()`` (or by
    using the expander as an async context manager).

    Example:
        expander = URLExpander(concurrency=5, timeout=30000, max_retries=2)
        try:
            text = await expander.process_text(
                "Check [this](https://bit.ly/abc) and https://bit.ly/xyz now"
            )
        finally:
            await expander.close()
    """

    def __init__(
        self,
        concurrency: int = 5,
        timeout: int = 30000,
        max_retries: int = 2,
        navigator: Optional[BaseNavigator] = None,
        prober: Optional[BaseProbe] = None,
        extra_shorteners: Optional[Iterable[str]] = None,
    ):
        """Initialize the URLExpander.

        Args:
            concurrency: Maximum number of URLs resolved at the same time.
            timeout: Browser navigation timeout in milliseconds.
            max_retries: Extra attempts per URL after a failed one.
            navigator: Navigation tier (default: PlaywrightNavigator).
            prober: Probe tier (default: RedirectProbe).
            extra_shorteners: Hostnames to treat as shorteners on top of
                the built-in list.

        Raises:
            ValueError: If any setting is out of range.
        """
        self.config = ExpansionConfig(
            concurrency=concurrency,
            timeout_ms=timeout,
            max_retries=max_retries,
        )

        self.detector = URLDetector()
        self.classifier = ShortenerClassifier(
            ShortenerRegistry.default(extra_shorteners)
        )
        self.resolver = RedirectResolver(
            navigator=navigator or PlaywrightNavigator(pool_size=concurrency),
            prober=prober or RedirectProbe(),
            timeout_ms=self.config.timeout_ms,
            max_retries=self.config.max_retries,
        )
        self.scheduler = BatchScheduler(
            resolver=self.resolver,
            concurrency=self.config.concurrency,
            classifier=self.classifier,
        )
        self.rewriter = TextRewriter()

        logger.info(
            f"URLExpander initialized: "
            f"concurrency={self.config.concurrency}, "
            f"timeout={self.config.timeout_ms}ms, "
            f"retries={self.config.max_retries}, "
            f"shorteners={len(self.classifier.registry)}"
        )

    async def __aenter__(self) -> "URLExpander":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the browser and HTTP client. Safe to call repeatedly."""
        await self.resolver.close()

    async def expand_url(self, url: str) -> str:
        """Expand a single URL; non-shorteners come back unchanged."""
        if not self.classifier.is_shortened(url):
            return url
        return await self.resolver.resolve(url)

    async def process_text(self, text: str) -> str:
        """Expand every shortened URL in text.

        Args:
            text: Source text (plain or Markdown).

        Returns:
            Text with resolved shorteners replaced.
        """
        occurrences = self.detector.detect(text)
        candidates = [
            url
            for url in self.detector.unique_urls(occurrences)
            if self.classifier.is_shortened(url)
        ]

        logger.info(
            f"Found {len(occurrences)} URL occurrence(s), "
            f"{len(candidates)} shortened"
        )
        if not candidates:
            return text

        outcomes = await self.scheduler.resolve_all(candidates)

        expanded = sum(1 for o in outcomes.values() if o.changed)
        logger.info(f"Expanded {expanded}/{len(candidates)} shortened URL(s)")

        return self.rewriter.rewrite(text, occurrences, outcomes)

    async def process_file(
        self, input_path: PathLike, output_path: PathLike
    ) -> ProcessResult:
        """Expand shortened URLs in a file and write the result.

        The output is written whole or not at all.

        Args:
            input_path: UTF-8 text file to read.
            output_path: Destination file.

        Returns:
            ProcessResult; never raises for I/O problems.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        try:
            content = self._read_text(input_path)
            processed = await self.process_text(content)
            self._write_text(output_path, processed)
        except FileError as e:
            logger.error(f"Error processing file: {e}")
            return ProcessResult(success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error processing {input_path}: {e}")
            return ProcessResult(success=False, error=str(e))

        return ProcessResult(
            success=True,
            input_path=input_path,
            output_path=output_path,
        )

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileError(f"Cannot read {path}: {e}") from e

    @staticmethod
    def _write_text(path: Path, content: str) -> None:
        """Write via a temp file in the target directory, then rename."""
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            raise FileError(f"Cannot write {path}: {e}") from e
