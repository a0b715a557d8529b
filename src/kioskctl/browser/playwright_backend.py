"""Playwright browser connection backend.

Either attaches to an already running Chrome over CDP or launches a
Chromium instance, then drives one page for the lifetime of the process.
"""

from __future__ import annotations

import logging

from playwright.async_api import Browser, Error as PlaywrightError, Page, Playwright, async_playwright

from kioskctl.browser.base import BrowserConnection
from kioskctl.domain.errors import ConnectionFailureError

logger = logging.getLogger(__name__)

KIOSK_ARGS = ["--kiosk", "--noerrdialogs", "--disable-infobars"]


class PlaywrightConnection(BrowserConnection):
    """Drives a single Chromium page through Playwright."""

    def __init__(
        self,
        cdp_url: str | None = None,
        headless: bool = False,
        kiosk: bool = True,
        navigation_timeout: float = 30.0,
        wait_until: str = "load",
    ) -> None:
        self._cdp_url = cdp_url
        self._headless = headless
        self._kiosk = kiosk
        self._timeout_ms = navigation_timeout * 1000
        self._wait_until = wait_until
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    @property
    def is_connected(self) -> bool:
        return (
            self._page is not None
            and not self._page.is_closed()
            and self._browser is not None
            and self._browser.is_connected()
        )

    @property
    def current_url(self) -> str | None:
        if self._page is None:
            return None
        return self._page.url

    async def connect(self) -> None:
        """Start Playwright and attach to (or launch) the browser."""
        self._playwright = await async_playwright().start()
        try:
            if self._cdp_url:
                self._browser = await self._playwright.chromium.connect_over_cdp(self._cdp_url)
                context = (
                    self._browser.contexts[0]
                    if self._browser.contexts
                    else await self._browser.new_context()
                )
                self._page = context.pages[0] if context.pages else await context.new_page()
                logger.info("Attached to browser over CDP at %s", self._cdp_url)
            else:
                self._browser = await self._playwright.chromium.launch(
                    headless=self._headless,
                    args=KIOSK_ARGS if self._kiosk else [],
                )
                context = await self._browser.new_context(no_viewport=True)
                self._page = await context.new_page()
                logger.info("Launched Chromium (headless=%s, kiosk=%s)", self._headless, self._kiosk)
        except PlaywrightError as e:
            await self.disconnect()
            raise ConnectionFailureError(
                f"Failed to open browser: {e}", backend="playwright"
            ) from e
        self._page.set_default_navigation_timeout(self._timeout_ms)
        self._page.set_default_timeout(self._timeout_ms)

    async def disconnect(self) -> None:
        """Close the browser (or detach from it) and stop Playwright."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.debug("Browser close error: %s", e)
            self._browser = None
        self._page = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            logger.info("Browser connection closed")

    async def navigate(self, url: str) -> None:
        page = self._require_page()
        try:
            await page.goto(url, wait_until=self._wait_until)
        except PlaywrightError as e:
            raise ConnectionFailureError(
                f"Navigation to {url} failed: {e}", backend="playwright"
            ) from e
        logger.debug("Navigated to %s", url)

    async def reload(self) -> None:
        page = self._require_page()
        try:
            await page.reload(wait_until=self._wait_until)
        except PlaywrightError as e:
            raise ConnectionFailureError(f"Reload failed: {e}", backend="playwright") from e
        logger.debug("Reloaded %s", page.url)

    async def evaluate(self, source: str) -> object:
        page = self._require_page()
        try:
            return await page.evaluate(source)
        except PlaywrightError as e:
            raise ConnectionFailureError(
                f"Script evaluation failed: {e}", backend="playwright"
            ) from e

    def _require_page(self) -> Page:
        page = self._page
        if page is None or not self.is_connected:
            raise ConnectionFailureError("Browser connection is not open", backend="playwright")
        return page
