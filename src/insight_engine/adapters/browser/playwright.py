"""Playwright (Chromium) browser provider."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Route
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from insight_engine.adapters.browser.base import BrowserPage, BrowserProvider
from insight_engine.config import settings
from insight_engine.exceptions import ScrapeError
from insight_engine.logging import get_logger

logger = get_logger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]

# Resource types that never carry search result data
BLOCKED_RESOURCE_TYPES = {"image", "font", "stylesheet", "media"}


class PlaywrightPage(BrowserPage):
    """BrowserPage backed by a Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    async def goto(self, url: str, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ScrapeError(f"Navigation to {url} timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise ScrapeError(f"Navigation to {url} failed: {e.message}") from e

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self._page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            logger.debug("element_wait_timed_out", selector=selector, timeout_ms=timeout_ms)
            return False

    async def click(self, selector: str, timeout_ms: int) -> bool:
        try:
            await self._page.click(selector, timeout=timeout_ms)
            return True
        except PlaywrightError:
            return False

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as e:
            raise ScrapeError(f"Page evaluation failed: {e.message}") from e

    async def scroll_to_bottom(self) -> None:
        await self.evaluate("() => window.scrollTo(0, document.documentElement.scrollHeight)")

    async def scroll_height(self) -> int:
        return int(await self.evaluate("() => document.documentElement.scrollHeight"))

    async def pause(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)


class PlaywrightBrowserProvider(BrowserProvider):
    """Launches a fresh headless Chromium per session."""

    def __init__(
        self,
        headless: bool | None = None,
        user_agent: str | None = None,
        viewport: dict[str, int] | None = None,
        block_resources: bool = True,
    ) -> None:
        self.headless = settings.browser_headless if headless is None else headless
        self.user_agent = user_agent or settings.browser_user_agent
        self.viewport = viewport or {"width": 1366, "height": 768}
        self.block_resources = block_resources

    @property
    def name(self) -> str:
        return "playwright:chromium"

    @staticmethod
    async def _filter_route(route: Route) -> None:
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BrowserPage]:
        async with async_playwright() as p:
            try:
                browser = await p.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
            except PlaywrightError as e:
                raise ScrapeError(f"Browser launch failed: {e.message}") from e

            logger.info("browser_session_opened", provider=self.name, headless=self.headless)
            try:
                context = await browser.new_context(
                    viewport=self.viewport,
                    user_agent=self.user_agent,
                )
                page = await context.new_page()
                page.set_default_timeout(settings.browser_element_timeout_ms)
                if self.block_resources:
                    await page.route("**/*", self._filter_route)
                yield PlaywrightPage(page)
            finally:
                await browser.close()
                logger.info("browser_session_closed", provider=self.name)
