"""Rendered-page fetcher.

The result board is filled in client-side, so a plain HTTP GET returns an
empty shell. The fetcher drives a headless browser until the network goes
quiet and hands back the rendered HTML.
"""

from typing import Optional

import structlog
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from sattawatch.core.exceptions import NavigationError
from sattawatch.scrapers.utils.browser_manager import BrowserManager

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class PageFetcher:
    """Loads a page in a disposable browser session and returns its HTML."""

    def __init__(self, browser_manager: BrowserManager, default_timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """Initialize page fetcher.

        Args:
            browser_manager: Source of single-use browser sessions
            default_timeout: Seconds allowed for each navigation/wait step
        """
        self.browser_manager = browser_manager
        self.default_timeout = default_timeout
        self.logger = logger.bind(service="page_fetcher")

    async def fetch(self, target_url: str, timeout: Optional[float] = None) -> str:
        """Render target_url and return the resulting HTML.

        Waits for DOMContentLoaded and then for network idle (no requests
        in flight for 500ms) before reading the content.

        Args:
            target_url: Page to load
            timeout: Seconds per wait step, defaults to default_timeout

        Returns:
            Fully rendered HTML

        Raises:
            BrowserLaunchError: If the browser cannot be started
            NavigationError: If the page fails to load, answers with a
                non-2xx status, or does not settle within the timeout
        """
        timeout = self.default_timeout if timeout is None else timeout
        timeout_ms = timeout * 1000

        async with self.browser_manager.session() as page:
            self.logger.info("navigating", url=target_url, timeout_seconds=timeout)
            try:
                response = await page.goto(target_url, wait_until="domcontentloaded", timeout=timeout_ms)
                await page.wait_for_load_state("networkidle", timeout=timeout_ms)

                if response is None:
                    raise NavigationError(target_url, "no response received")
                if not response.ok:
                    self.logger.warning("navigation_bad_status", url=target_url, status=response.status)
                    raise NavigationError(target_url, f"status {response.status}", status=response.status)

                html = await page.content()
            except PlaywrightTimeoutError as e:
                self.logger.warning("navigation_timed_out", url=target_url, timeout_seconds=timeout)
                raise NavigationError(target_url, f"timed out after {timeout:g}s") from e
            except PlaywrightError as e:
                # Includes a renderer that crashed or closed before content was read
                self.logger.warning("navigation_failed", url=target_url, error=str(e))
                raise NavigationError(target_url, str(e)) from e

        self.logger.info("page_fetched", url=target_url, html_length=len(html))
        return html
