"""Playwright browser lifecycle manager.

Every scrape gets its own disposable browser: a fresh Playwright driver,
Chromium process, context and page, all torn down when the session exits.
Nothing is shared between runs, so cookies, storage and crashed renderer
state cannot leak from one scrape into the next.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional, Sequence

import structlog
from playwright.async_api import Browser, Error as PlaywrightError, Page, Playwright, async_playwright

from sattawatch.config import settings
from sattawatch.core.exceptions import BrowserLaunchError
from sattawatch.scrapers.utils.user_agents import resolve_user_agent

logger = structlog.get_logger(__name__)


DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--window-size=1280,800",
)

DEFAULT_VIEWPORT = {"width": 1280, "height": 800}


class BrowserManager:
    """Hands out isolated, single-use Playwright browser sessions.

    Usage:
        async with browser_manager.session() as page:
            await page.goto(url)
    """

    def __init__(
        self,
        headless: bool = True,
        executable_path: Optional[str] = None,
        user_agent: str = "",
        launch_args: Sequence[str] = DEFAULT_LAUNCH_ARGS,
        playwright_factory: Callable = async_playwright,
    ):
        self._headless = headless
        self._executable_path = executable_path
        self._user_agent = user_agent
        self._launch_args = list(launch_args)
        self._playwright_factory = playwright_factory
        self.logger = logger.bind(service="browser_manager")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Page]:
        """Launch a browser, yield a ready page, and always tear it down.

        Raises:
            BrowserLaunchError: If the driver, Chromium or its first page
                cannot be started
        """
        playwright = await self._start_driver()
        browser: Optional[Browser] = None
        try:
            browser = await self._launch(playwright)
            page = await self._open_page(browser)
            yield page
        finally:
            if browser is not None:
                try:
                    await browser.close()
                    self.logger.debug("browser_closed")
                except Exception as e:
                    self.logger.warning("browser_close_failed", error=str(e))
            try:
                await playwright.stop()
            except Exception as e:
                self.logger.warning("playwright_stop_failed", error=str(e))

    async def _start_driver(self) -> Playwright:
        try:
            return await self._playwright_factory().start()
        except (PlaywrightError, OSError) as e:
            self.logger.error("playwright_driver_failed", error=str(e))
            raise BrowserLaunchError(str(e)) from e

    async def _launch(self, playwright: Playwright) -> Browser:
        launch_kwargs = {
            "headless": self._headless,
            "args": self._launch_args,
        }
        if self._executable_path:
            launch_kwargs["executable_path"] = self._executable_path

        self.logger.info(
            "launching_browser",
            headless=self._headless,
            executable_path=self._executable_path or "bundled",
        )
        try:
            browser = await playwright.chromium.launch(**launch_kwargs)
        except (PlaywrightError, OSError) as e:
            self.logger.error(
                "browser_launch_failed",
                executable_path=self._executable_path or "bundled",
                error=str(e),
            )
            raise BrowserLaunchError(str(e)) from e
        self.logger.info("browser_launched")
        return browser

    async def _open_page(self, browser: Browser) -> Page:
        # A browser that dies before its first page is a launch failure
        try:
            context = await browser.new_context(
                user_agent=resolve_user_agent(self._user_agent),
                viewport=DEFAULT_VIEWPORT,
                device_scale_factor=1,
                ignore_https_errors=True,
                java_script_enabled=True,
            )
            return await context.new_page()
        except PlaywrightError as e:
            self.logger.error("browser_page_failed", error=str(e))
            raise BrowserLaunchError(str(e)) from e


# Singleton instance
_browser_manager: Optional[BrowserManager] = None


def get_browser_manager() -> BrowserManager:
    """Get the global BrowserManager configured from settings."""
    global _browser_manager
    if _browser_manager is None:
        _browser_manager = BrowserManager(
            headless=settings.BROWSER_HEADLESS,
            executable_path=settings.get_executable_path(),
            user_agent=settings.USER_AGENT,
        )
    return _browser_manager
