"""Probe tier: a single HEAD request that does not follow redirects."""

import logging
from typing import Optional

import httpx

from .base import BaseProbe
from ..errors import ProbeError

logger = logging.getLogger(__name__)

# Browser-like headers for probe requests
_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;"
        "q=0.9,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.5",
}

# Fixed probe timeout, independent of the navigation timeout
PROBE_TIMEOUT_SECONDS = 5.0


class RedirectProbe(BaseProbe):
    """Reads the ``Location`` of a 3xx response to a HEAD request.

    The httpx client is created on first use and shared by all probes.

    Example:
        probe = RedirectProbe()
        target = await probe.probe("https://bit.ly/abc")
        await probe.close()
    """

    def __init__(
        self,
        timeout: float = PROBE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the probe.

        Args:
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=False,
                timeout=self.timeout,
                headers=_HEADERS,
                transport=self._transport,
            )
        return self._client

    async def probe(self, url: str) -> Optional[str]:
        try:
            location = await self._head(url)
        except ProbeError as e:
            logger.debug(f"Probe miss for {url}: {e}")
            return None

        logger.info(f"HEAD expanded: {url} → {location}")
        return location

    async def _head(self, url: str) -> str:
        """Send the HEAD request and extract the redirect target.

        Raises:
            ProbeError: On transport errors, timeouts, non-redirect status,
                missing Location, or a Location equal to the input.
        """
        try:
            response = await self._get_client().head(url)
        except httpx.TimeoutException as e:
            raise ProbeError(f"timeout after {self.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeError(f"request failed: {e}") from e

        if not 300 <= response.status_code < 400:
            raise ProbeError(f"HTTP {response.status_code} is not a redirect")

        location = response.headers.get("location")
        if not location:
            raise ProbeError(f"HTTP {response.status_code} without Location")

        try:
            target = str(response.request.url.join(location))
        except httpx.InvalidURL as e:
            raise ProbeError(f"invalid Location {location!r}") from e

        if target == url:
            raise ProbeError("Location points back at the same URL")
        return target

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
