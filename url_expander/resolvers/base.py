"""Base classes for the resolution tiers."""

from abc import ABC, abstractmethod
from typing import Optional


class BaseProbe(ABC):
    """Cheap protocol-level redirect lookup.

    Implementations never raise: anything short of a usable redirect is
    reported as None so the caller can fall through to navigation.
    """

    @abstractmethod
    async def probe(self, url: str) -> Optional[str]:
        """Return the redirect target of a URL, or None.

        Args:
            url: URL to probe.

        Returns:
            Absolute redirect target that differs from ``url``, or None.
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""


class BaseNavigator(ABC):
    """Full page navigation for script-driven redirects.

    All implementations must isolate calls from each other: headers, viewport
    and cookies of one navigation never leak into another, even when calls
    run concurrently.
    """

    @abstractmethod
    async def navigate(self, url: str, timeout_ms: int) -> str:
        """Navigate to a URL and return the URL the page settled on.

        Args:
            url: URL to open.
            timeout_ms: Navigation timeout in milliseconds.

        Returns:
            Final URL after navigation.

        Raises:
            NavigationError: If navigation fails or times out.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying browser. Safe to call more than once."""
        pass


class BaseResolver(ABC):
    """Resolves one URL to its final destination."""

    @abstractmethod
    async def resolve_outcome(self, url: str):
        """Resolve a URL, returning a ResolutionOutcome. Never raises."""
        pass

    async def resolve(self, url: str) -> str:
        """Resolve a URL, returning the original on failure."""
        outcome = await self.resolve_outcome(url)
        return outcome.resolved_url
