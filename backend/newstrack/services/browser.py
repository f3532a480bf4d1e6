"""Rendered page sessions on a pool of headless Chromium contexts."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from playwright.async_api import Browser, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .. import config
from .errors import NavigationError, UpstreamUnreachable
from .page import Document, PageSession, parse_html


logger = logging.getLogger(__name__)

T = TypeVar("T")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
]


class RenderedPageSession(PageSession):
    """PageSession driving one live browser page.

    Documents handed back are snapshots of the live DOM taken after the
    settle delay, so script-injected bylines are included.
    """

    kind = "rendered"

    def __init__(self, page: Page) -> None:
        super().__init__()
        self.page = page

    async def navigate(self, url: str, sub_page: bool = False) -> None:
        """Navigate with the idle-then-loaded retry policy."""
        if sub_page:
            try:
                await self.page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=config.SUBPAGE_TIMEOUT * 1000,
                )
            except PlaywrightError as e:
                raise NavigationError(url, str(e)) from e
            await asyncio.sleep(config.SUBPAGE_SETTLE_DELAY)
            return

        try:
            await self.page.goto(
                url, wait_until="networkidle", timeout=config.NAV_IDLE_TIMEOUT * 1000
            )
        except PlaywrightTimeoutError:
            logger.info("Network never went idle for %s, retrying on DOM load", url)
            try:
                await self.page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=config.NAV_LOADED_TIMEOUT * 1000,
                )
            except PlaywrightError as e:
                raise NavigationError(url, str(e)) from e
        except PlaywrightError as e:
            raise NavigationError(url, str(e)) from e

        await asyncio.sleep(config.SETTLE_DELAY)

    async def load(self, url: str, sub_page: bool = False) -> Document:
        await self.navigate(url, sub_page=sub_page)
        try:
            html = await self.page.content()
        except PlaywrightError as e:
            raise NavigationError(url, f"could not read page content: {e}") from e
        self.current = parse_html(html)
        self.current_url = self.page.url or url
        return self.current


class BrowserPool:
    """Owns one Chromium process and hands out isolated page sessions.

    At most ``size`` sessions are open at once; each session gets its own
    browser context, closed when the session scope exits.
    """

    def __init__(self, size: Optional[int] = None, browser: Optional[Browser] = None) -> None:
        self.size = size or config.BROWSER_POOL_SIZE
        self._semaphore = asyncio.Semaphore(self.size)
        self._playwright = None
        self._browser = browser
        self._owns_browser = browser is None

    @property
    def started(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """Launch the headless browser. Safe to call twice."""
        if self._browser is not None:
            return
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=True, args=LAUNCH_ARGS
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.info("Browser pool started (size=%d)", self.size)

    async def shutdown(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser is not None and self._owns_browser:
            await self._browser.close()
        self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser pool shut down")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[RenderedPageSession]:
        """Acquire a rendered session; its context is closed on every exit path."""
        if self._browser is None:
            raise RuntimeError("BrowserPool.start() has not been called")
        async with self._semaphore:
            try:
                context = await self._browser.new_context(
                    user_agent=config.USER_AGENT,
                    viewport={"width": 1366, "height": 900},
                    extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
                )
            except PlaywrightError as e:
                raise UpstreamUnreachable(f"Browser session unavailable: {e}") from e
            try:
                page = await context.new_page()
                yield RenderedPageSession(page)
            finally:
                await context.close()

    async def with_page(
        self, url: str, fn: Callable[[RenderedPageSession], Awaitable[T]]
    ) -> T:
        """Load url in a fresh session and return fn(session)."""
        async with self.session() as session:
            await session.load(url)
            return await fn(session)
