"""Windowed concurrent resolution of many URLs."""

import asyncio
import logging
from typing import Optional, Sequence

from .links.shorteners import ShortenerClassifier
from .models.types import ResolutionOutcome
from .resolvers.base import BaseResolver

logger = logging.getLogger(__name__)


class BatchScheduler:
    """Resolves URLs in fixed windows of at most ``concurrency`` at a time.

    A window is dispatched together and fully awaited before the next one
    starts. Results are merged into the mapping only after their window
    completes.
    """

    def __init__(
        self,
        resolver: BaseResolver,
        concurrency: int = 5,
        classifier: Optional[ShortenerClassifier] = None,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.resolver = resolver
        self.concurrency = concurrency
        self.classifier = classifier or ShortenerClassifier()

    async def resolve_all(self, urls: Sequence[str]) -> dict[str, ResolutionOutcome]:
        """Resolve candidate URLs.

        Args:
            urls: De-duplicated candidate URLs.

        Returns:
            Mapping from each input URL to its ResolutionOutcome. URLs that
            are not shorteners map to an unresolved outcome without any
            network activity.
        """
        results: dict[str, ResolutionOutcome] = {}

        for start in range(0, len(urls), self.concurrency):
            window = urls[start:start + self.concurrency]
            logger.debug(
                f"Resolving window {start // self.concurrency + 1} "
                f"({len(window)} URL(s))"
            )
            outcomes = await asyncio.gather(
                *(self._resolve_one(url) for url in window),
                return_exceptions=True,
            )

            for url, outcome in zip(window, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.warning(f"Failed to expand {url}: {outcome}")
                    outcome = ResolutionOutcome.unresolved(url, error=str(outcome))
                results[url] = outcome

        return results

    async def _resolve_one(self, url: str) -> ResolutionOutcome:
        if not self.classifier.is_shortened(url):
            return ResolutionOutcome.unresolved(url)
        return await self.resolver.resolve_outcome(url)
