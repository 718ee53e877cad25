"""Navigation tier: headless Chromium via Playwright.

One browser process is launched lazily and shared. Access to it goes through
a pool of ``pool_size`` slots; a navigation checks out a slot, opens its own
browser context (user agent, headers, viewport, cookies), and closes that
context before handing the slot back. Nothing about one navigation is visible
to another.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from .base import BaseNavigator
from ..errors import NavigationError

logger = logging.getLogger(__name__)

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

_EXTRA_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

_VIEWPORT = {"width": 1280, "height": 800}

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-extensions",
    "--disable-default-apps",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]

# Wait after network idle for client-side redirects
REDIRECT_GRACE_SECONDS = 1.0


class PlaywrightNavigator(BaseNavigator):
    """Resolves script-driven redirects by loading the page in Chromium.

    Example:
        navigator = PlaywrightNavigator(pool_size=5)
        try:
            final_url = await navigator.navigate("https://bit.ly/abc", 30000)
        finally:
            await navigator.close()
    """

    def __init__(
        self,
        pool_size: int = 5,
        headless: bool = True,
        grace_period: float = REDIRECT_GRACE_SECONDS,
    ):
        """Initialize the navigator. No browser is started here.

        Args:
            pool_size: Maximum number of simultaneous navigations.
            headless: Run Chromium without a window.
            grace_period: Seconds to wait after the network settles.
        """
        if pool_size < 1:
            raise ValueError(f"pool_size must be >= 1, got {pool_size}")
        self.pool_size = pool_size
        self.headless = headless
        self.grace_period = grace_period

        self._playwright = None
        self._browser = None
        self._slots: Optional[asyncio.Queue] = None
        self._start_lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._browser is not None

    async def _ensure_started(self) -> None:
        """Launch the browser and fill the slot pool on first use."""
        async with self._start_lock:
            if self._browser is not None:
                return

            logger.info(f"Launching headless browser (pool size {self.pool_size})")
            playwright = await async_playwright().start()
            try:
                browser = await playwright.chromium.launch(
                    headless=self.headless,
                    args=_LAUNCH_ARGS,
                )
            except PlaywrightError as e:
                await playwright.stop()
                raise NavigationError(
                    f"Browser launch failed: {e}. "
                    "Run: playwright install chromium"
                ) from e

            slots: asyncio.Queue = asyncio.Queue(maxsize=self.pool_size)
            for slot_id in range(self.pool_size):
                slots.put_nowait(slot_id)

            self._playwright = playwright
            self._browser = browser
            self._slots = slots

    async def navigate(self, url: str, timeout_ms: int) -> str:
        await self._ensure_started()

        slots = self._slots
        slot_id = await slots.get()
        context = None
        try:
            context = await self._browser.new_context(
                user_agent=_USER_AGENT,
                extra_http_headers=_EXTRA_HEADERS,
                viewport=_VIEWPORT,
            )
            page = await context.new_page()

            await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            await asyncio.sleep(self.grace_period)

            final_url = page.url
            logger.debug(f"Slot {slot_id} navigated {url} → {final_url}")
            return final_url

        except PlaywrightTimeout as e:
            raise NavigationError(f"Navigation timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise NavigationError(f"Navigation failed: {e}") from e
        finally:
            if context is not None:
                try:
                    await context.close()
                except PlaywrightError as e:
                    logger.debug(f"Failed to close context for {url}: {e}")
            slots.put_nowait(slot_id)

    async def close(self) -> None:
        async with self._start_lock:
            browser, playwright = self._browser, self._playwright
            self._browser = None
            self._playwright = None
            self._slots = None

            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError as e:
                    logger.warning(f"Error closing browser: {e}")
            if playwright is not None:
                await playwright.stop()
                logger.info("Headless browser closed")
