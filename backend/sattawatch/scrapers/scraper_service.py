"""Scrape orchestration service.

Composes the fetcher, extractor and result store into a single run:
fetch -> extract -> build ScrapeRun -> save. Errors are classified where
they originate and propagate from here unchanged.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from sattawatch.scrapers.base import ScrapeRun
from sattawatch.scrapers.extractor import MarketResultExtractor
from sattawatch.scrapers.fetcher import PageFetcher

if TYPE_CHECKING:
    from sattawatch.services.result_store import ResultStore

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScraperService:
    """Runs the fetch -> extract -> save pipeline once per call.

    Holds no per-run state, so concurrent calls are independent end to
    end; each one opens its own browser session through the fetcher.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: MarketResultExtractor,
        store: "ResultStore",
        target_url: str,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize scraper service.

        Args:
            fetcher: Rendered-page fetcher
            extractor: HTML -> MarketResult parser
            store: Result persistence
            target_url: Page to scrape
            timeout: Per-step navigation timeout in seconds (fetcher default if None)
            clock: Source of the current UTC time
        """
        self.fetcher = fetcher
        self.extractor = extractor
        self.store = store
        self.target_url = target_url
        self.timeout = timeout
        self.clock = clock
        self.logger = logger.bind(service="scraper_service")

    async def run_once(self) -> ScrapeRun:
        """Execute one complete scrape run.

        Returns:
            The persisted run, with run_id assigned by the store

        Raises:
            BrowserLaunchError, NavigationError: From the fetcher
            PersistenceError: From the store (fetch/extract work is kept in
                memory only and discarded)
        """
        self.logger.info("scrape_run_started", url=self.target_url)

        html = await self.fetcher.fetch(self.target_url, timeout=self.timeout)

        scraped_at = self.clock()
        results = self.extractor.extract(html, captured_at=scraped_at)
        run = ScrapeRun(scraped_at=scraped_at, results=tuple(results))
        self.logger.info("market_results_found", count=run.result_count)

        run_id = await self.store.save(run)
        run = run.with_run_id(run_id)

        self.logger.info("scrape_run_completed", run_id=run_id, result_count=run.result_count)
        return run
