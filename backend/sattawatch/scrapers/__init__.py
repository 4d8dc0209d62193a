"""Scrape pipeline for the market result board.

This package provides:
- Typed records for parsed market results and scrape runs
- A rendered-page fetcher and an HTML extractor
- The orchestration service tying fetch, extract and save together
- The update scheduler that runs the pipeline on a timer
"""

from .base import MarketResult, ScrapeRun
from .extractor import MarketResultExtractor
from .fetcher import PageFetcher
from .scraper_service import ScraperService

__all__ = [
    # Data structures
    "MarketResult",
    "ScrapeRun",
    # Pipeline
    "MarketResultExtractor",
    "PageFetcher",
    "ScraperService",
]
