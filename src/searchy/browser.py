"""
Browser session boundary.

The retrieval code only talks to a BrowserSession; PlaywrightSession is the
production implementation over a single headless Chromium page.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Protocol, Sequence

from playwright.async_api import async_playwright

from searchy.config import Settings

logger = logging.getLogger(__name__)

# Substring of the error Playwright raises when content is read mid-navigation
NAVIGATION_IN_PROGRESS = "navigating"


class BrowserSession(Protocol):
    async def navigate(self, url: str) -> None: ...

    async def query_all(self, selector: str) -> Sequence[Any]: ...

    async def get_attribute(self, element: Any, name: str) -> Optional[str]: ...

    async def click(self, element: Any) -> None: ...

    async def wait_for_network_idle(self) -> None: ...

    async def content(self) -> str: ...


def is_navigation_in_progress(error: BaseException) -> bool:
    """True when a content read failed only because the page was still navigating."""
    return NAVIGATION_IN_PROGRESS in str(error)


class PlaywrightSession:
    """BrowserSession over a Playwright page."""

    def __init__(self, page, navigation_timeout_ms: int = 30000):
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms

    async def navigate(self, url):
        await self.page.goto(url, timeout=self.navigation_timeout_ms)

    async def query_all(self, selector):
        return await self.page.query_selector_all(selector)

    async def get_attribute(self, element, name):
        return await element.get_attribute(name)

    async def click(self, element):
        await element.click()

    async def wait_for_network_idle(self):
        await self.page.wait_for_load_state("networkidle", timeout=self.navigation_timeout_ms)

    async def content(self):
        return await self.page.content()


@asynccontextmanager
async def open_session(settings: Settings) -> AsyncIterator[PlaywrightSession]:
    """Launch Chromium, yield a session on a fresh page, always tear it down."""
    async with async_playwright() as p:
        logger.debug(f"Launching Chromium (headless={settings.headless})")
        browser = await p.chromium.launch(headless=settings.headless)
        try:
            if settings.user_agent:
                context = await browser.new_context(user_agent=settings.user_agent)
            else:
                context = await browser.new_context()
            page = await context.new_page()
            yield PlaywrightSession(page, navigation_timeout_ms=settings.navigation_timeout_ms)
        finally:
            await browser.close()
            logger.debug("Browser closed")
