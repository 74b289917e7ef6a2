"""Playwright page session shared by login, checks and purchases."""
import asyncio
import logging
from contextlib import asynccontextmanager

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)
from config import Config

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base class for page interaction failures."""


class ElementNotFound(SessionError):
    def __init__(self, selector: str):
        super().__init__(f"No element matches {selector!r}")
        self.selector = selector


class ElementTimeout(SessionError):
    def __init__(self, selector: str, timeout_ms: int):
        super().__init__(f"{selector!r} not visible after {timeout_ms}ms")
        self.selector = selector
        self.timeout_ms = timeout_ms


class PageSession:
    """One browser page plus the handles needed to tear it down."""

    def __init__(
        self,
        page: Page,
        context: BrowserContext | None = None,
        browser: Browser | None = None,
        playwright: Playwright | None = None,
    ):
        self._page = page
        self._context = context
        self._browser = browser
        self._playwright = playwright
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def navigate(self, url: str):
        logger.debug(f"Navigating to {url}")
        await self._page.goto(url, wait_until="load")

    async def find_all(self, selector: str) -> list[ElementHandle]:
        return await self._page.query_selector_all(selector)

    async def find_one(self, selector: str) -> ElementHandle:
        element = await self._page.query_selector(selector)
        if element is None:
            raise ElementNotFound(selector)
        return element

    async def wait_visible(self, selector: str, timeout_ms: int) -> ElementHandle:
        try:
            return await self._page.wait_for_selector(
                selector, state="visible", timeout=timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise ElementTimeout(selector, timeout_ms) from e

    async def click(self, selector: str):
        element = await self.find_one(selector)
        await element.click()

    async def fill(self, selector: str, text: str):
        element = await self.find_one(selector)
        await element.fill(text)

    async def text_of(self, element: ElementHandle) -> str | None:
        """Rendered text of ``element``, or None when it is not displayed."""
        if not await element.is_visible():
            return None
        return await element.inner_text()

    async def screenshot(self) -> bytes:
        return await self._page.screenshot()

    async def sleep(self, ms: float):
        await asyncio.sleep(ms / 1000)

    async def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            if self._context:
                await self._context.close()
            if self._browser:
                await self._browser.close()
        finally:
            if self._playwright:
                await self._playwright.stop()
        logger.info("Browser session closed")


@asynccontextmanager
async def open_session(config: Config):
    """Launch Chromium and yield a PageSession, closing it on every exit path."""
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=config.headless)
        context = await browser.new_context(
            viewport={
                "width": config.viewport_width,
                "height": config.viewport_height,
            },
            user_agent=config.user_agent,
        )
        page = await context.new_page()
        page.set_default_timeout(config.request_timeout)
    except BaseException:
        await playwright.stop()
        raise

    session = PageSession(page, context=context, browser=browser, playwright=playwright)
    logger.info(f"Browser session opened (headless={config.headless})")
    try:
        yield session
    finally:
        await session.close()
