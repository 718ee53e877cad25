"""Two-tier redirect resolution with retry.

Each URL moves through an explicit state machine:

    PROBING -> RESOLVED
            -> NAVIGATION_PENDING -> RESOLVED
                                  -> RETRYING -> PROBING
                                  -> UNRESOLVED

A round is one probe plus, if needed, one navigation. A failed navigation
starts a new round after ``round * backoff`` seconds, up to ``max_retries``
extra rounds.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from .base import BaseNavigator, BaseProbe, BaseResolver
from .probe import RedirectProbe
from ..models.types import ResolutionOutcome

logger = logging.getLogger(__name__)

# Delay unit between rounds; round N waits N * this
BACKOFF_SECONDS = 1.0


class ResolutionState(str, Enum):
    """Where a URL is in its resolution."""

    PROBING = "probing"
    NAVIGATION_PENDING = "navigation_pending"
    RETRYING = "retrying"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


class RedirectResolver(BaseResolver):
    """Resolves a URL via a redirect probe, falling back to page navigation.

    ``resolve`` and ``resolve_outcome`` never raise. A URL that cannot be
    resolved after all rounds comes back unchanged.

    Example:
        resolver = RedirectResolver(
            navigator=PlaywrightNavigator(pool_size=5),
            timeout_ms=30000,
            max_retries=2,
        )
        final_url = await resolver.resolve("https://bit.ly/abc")
    """

    def __init__(
        self,
        navigator: BaseNavigator,
        prober: Optional[BaseProbe] = None,
        timeout_ms: int = 30000,
        max_retries: int = 2,
        backoff_seconds: float = BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the resolver.

        Args:
            navigator: Navigation tier.
            prober: Probe tier (default: RedirectProbe).
            timeout_ms: Navigation timeout in milliseconds.
            max_retries: Extra rounds after the first failed one.
            backoff_seconds: Delay unit between rounds.
            sleep: Coroutine used for backoff delays.
        """
        self.navigator = navigator
        self.prober = prober or RedirectProbe()
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    async def resolve_outcome(self, url: str) -> ResolutionOutcome:
        """Resolve a URL to its final destination.

        Args:
            url: Shortened URL.

        Returns:
            ResolutionOutcome; ``resolved`` is False only when every round
            failed, in which case ``resolved_url`` is ``url``.
        """
        state = ResolutionState.PROBING
        attempt = 1
        resolved_url = url
        last_error: Optional[str] = None

        while True:
            if state is ResolutionState.PROBING:
                location = await self._probe(url)
                if location and location != url:
                    resolved_url = location
                    state = ResolutionState.RESOLVED
                else:
                    state = ResolutionState.NAVIGATION_PENDING

            elif state is ResolutionState.NAVIGATION_PENDING:
                try:
                    resolved_url = await self.navigator.navigate(url, self.timeout_ms)
                    state = ResolutionState.RESOLVED
                except Exception as e:
                    last_error = str(e) or type(e).__name__
                    if attempt <= self.max_retries:
                        state = ResolutionState.RETRYING
                    else:
                        state = ResolutionState.UNRESOLVED

            elif state is ResolutionState.RETRYING:
                delay = attempt * self.backoff_seconds
                logger.warning(
                    f"Retry {attempt}/{self.max_retries} for {url} "
                    f"in {delay:.1f}s: {last_error}"
                )
                await self._sleep(delay)
                attempt += 1
                state = ResolutionState.PROBING

            elif state is ResolutionState.RESOLVED:
                return ResolutionOutcome(
                    original_url=url,
                    resolved_url=resolved_url,
                    resolved=True,
                    attempts=attempt,
                )

            else:
                logger.warning(f"Failed to expand {url}: {last_error}")
                return ResolutionOutcome.unresolved(
                    url, attempts=attempt, error=last_error
                )

    async def _probe(self, url: str) -> Optional[str]:
        """Run the probe tier; any failure means "no redirect"."""
        try:
            return await self.prober.probe(url)
        except Exception as e:
            logger.debug(f"Probe raised for {url}: {e}")
            return None

    async def close(self) -> None:
        """Release the probe client and the navigator.

        The navigator is closed even if closing the probe client fails.
        """
        try:
            await self.prober.close()
        finally:
            await self.navigator.close()
