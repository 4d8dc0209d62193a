"""Manual scraper runner for testing and debugging the pipeline.

Renders the result board once and prints what the extractor found.
Nothing is written to the database unless --save is given.

Usage:
    python scripts/run_scraper.py
    python scripts/run_scraper.py --limit 5
    python scripts/run_scraper.py --html saved_page.html
    python scripts/run_scraper.py --save
"""

import asyncio
import argparse
import sys
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

# Add backend to path so we can import sattawatch modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from sattawatch.config import settings
from sattawatch.core.exceptions import SattaWatchException
from sattawatch.scrapers.base import MarketResult
from sattawatch.scrapers.extractor import MarketResultExtractor
from sattawatch.scrapers.fetcher import PageFetcher
from sattawatch.scrapers.utils.browser_manager import get_browser_manager


async def run_scraper(url: str, limit: int = 10, html_file: Optional[str] = None, save: bool = False) -> int:
    """Fetch (or load) the page, extract results and display them.

    Args:
        url: Page to render when no HTML file is given
        limit: Maximum number of results to display
        html_file: Optional saved HTML to extract from instead of fetching
        save: Persist the run through the normal pipeline

    Returns:
        Process exit code
    """
    print(f"\n{'='*70}")
    print(f"  Running result board scraper")
    print(f"{'='*70}")
    print(f"  Source: {html_file or url}")
    print(f"  Display Limit: {limit}")
    print(f"{'='*70}\n")

    try:
        if save:
            run = await _run_and_save()
            results: List[MarketResult] = list(run.results)
            print(f"Saved run #{run.run_id} at {run.scraped_at.isoformat()}\n")
        else:
            if html_file:
                html = Path(html_file).read_text(encoding="utf-8")
            else:
                fetcher = PageFetcher(get_browser_manager(), default_timeout=settings.NAVIGATION_TIMEOUT_SECONDS)
                html = await fetcher.fetch(url)
            extractor = MarketResultExtractor(
                container_selector=settings.RESULT_CONTAINER_SELECTOR,
                name_selector=settings.MARKET_NAME_SELECTOR,
                value_selector=settings.MARKET_VALUE_SELECTOR,
            )
            results = extractor.extract(html, captured_at=datetime.now(timezone.utc))
    except SattaWatchException as e:
        print(f"\nError: {type(e).__name__}: {e.message}\n")
        return 1

    if not results:
        print("No market results found.\n")
        return 0

    print(f"Found {len(results)} market results\n")
    for result in results[:limit]:
        print(f"[{result.position}] {result.market_name or '(no name)'}")
        print(f"    Numbers: {result.raw_numbers or '-'}")
        print(f"    Open: {result.open or '-'}  Jodi: {result.jodi or '-'}  Close: {result.close or '-'}")
        print()

    print(f"{'='*70}")
    print(f"  Total Results: {len(results)}")
    print(f"  Displayed: {min(limit, len(results))}")
    print(f"{'='*70}\n")
    return 0


async def _run_and_save():
    from sattawatch.db.session import async_session_factory, engine
    from sattawatch.db.utils import create_tables
    from sattawatch.scrapers.factory import create_scraper_service

    await create_tables(engine)
    try:
        service = create_scraper_service(async_session_factory)
        return await service.run_once()
    finally:
        await engine.dispose()


def main():
    """Parse arguments and run the scraper."""
    parser = argparse.ArgumentParser(
        description="Run the result board scraper once",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py
  python scripts/run_scraper.py --limit 5
  python scripts/run_scraper.py --html saved_page.html
        """,
    )

    parser.add_argument(
        "--url",
        default=settings.TARGET_URL,
        help=f"Page to render (default: {settings.TARGET_URL})",
    )

    parser.add_argument(
        "--html",
        help="Extract from a saved HTML file instead of launching a browser",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of results to display (default: 10)",
    )

    parser.add_argument(
        "--save",
        action="store_true",
        help="Scrape TARGET_URL through the full pipeline and persist the run (ignores --url/--html)",
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(run_scraper(args.url, args.limit, args.html, args.save)))


if __name__ == "__main__":
    main()
