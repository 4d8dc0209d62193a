"""Factory functions wiring the scrape pipeline from settings."""

from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sattawatch.config import Settings, settings as default_settings
from sattawatch.scrapers.extractor import MarketResultExtractor
from sattawatch.scrapers.fetcher import PageFetcher
from sattawatch.scrapers.scheduler import UpdateScheduler
from sattawatch.scrapers.scraper_service import ScraperService
from sattawatch.scrapers.utils.browser_manager import BrowserManager, get_browser_manager
from sattawatch.services.result_store import ResultStore

logger = structlog.get_logger(__name__)


def create_scraper_service(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Optional[Settings] = None,
    browser_manager: Optional[BrowserManager] = None,
) -> ScraperService:
    """Build the fetch -> extract -> save pipeline.

    Args:
        session_factory: Async session factory for the result store
        settings: Settings to read (module settings if None)
        browser_manager: Browser session source (global manager if None)

    Returns:
        Configured ScraperService
    """
    settings = settings or default_settings
    fetcher = PageFetcher(
        browser_manager or get_browser_manager(),
        default_timeout=settings.NAVIGATION_TIMEOUT_SECONDS,
    )
    extractor = MarketResultExtractor(
        container_selector=settings.RESULT_CONTAINER_SELECTOR,
        name_selector=settings.MARKET_NAME_SELECTOR,
        value_selector=settings.MARKET_VALUE_SELECTOR,
    )
    store = ResultStore(session_factory)

    logger.info(
        "scraper_service_created",
        target_url=settings.TARGET_URL,
        timeout_seconds=settings.NAVIGATION_TIMEOUT_SECONDS,
    )
    return ScraperService(fetcher, extractor, store, target_url=settings.TARGET_URL)


def create_update_scheduler(
    scraper_service: ScraperService,
    settings: Optional[Settings] = None,
) -> UpdateScheduler:
    """Build the update scheduler around an existing scraper service."""
    settings = settings or default_settings
    return UpdateScheduler(
        scraper_service,
        update_interval=settings.update_interval,
        retry_delay=settings.retry_delay,
        max_consecutive_retries=settings.MAX_CONSECUTIVE_RETRIES,
    )
