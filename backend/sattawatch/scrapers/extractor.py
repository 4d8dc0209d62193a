"""Market-result extractor for the rendered result board.

Expected markup (one div per market):

    <div class="satta-main-result">
      <div><h4>MILAN MORNING</h4><span>599-39-568</span></div>
      ...
    </div>

The upstream page is not under our control, so missing labels or values
default to empty strings instead of failing the run.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from sattawatch.scrapers.base import MarketResult

logger = structlog.get_logger(__name__)

DEFAULT_CONTAINER_SELECTOR = ".satta-main-result"
DEFAULT_NAME_SELECTOR = "h4"
DEFAULT_VALUE_SELECTOR = "span"


class MarketResultExtractor:
    """Parses rendered HTML into ordered MarketResult records."""

    def __init__(
        self,
        container_selector: str = DEFAULT_CONTAINER_SELECTOR,
        name_selector: str = DEFAULT_NAME_SELECTOR,
        value_selector: str = DEFAULT_VALUE_SELECTOR,
    ):
        self.container_selector = container_selector
        self.name_selector = name_selector
        self.value_selector = value_selector
        self.logger = logger.bind(service="market_result_extractor")

    def extract(self, html_content: str, captured_at: Optional[datetime] = None) -> List[MarketResult]:
        """Extract market results in document order.

        Never raises: unparseable input yields an empty or partial list.

        Args:
            html_content: Rendered page HTML
            captured_at: Timestamp stamped on every record (defaults to now)

        Returns:
            Results with position equal to the entry's 1-based index among
            all entries visited, entries with neither name nor numbers dropped
        """
        captured_at = captured_at or datetime.now(timezone.utc)

        try:
            soup = BeautifulSoup(html_content or "", "lxml")
            entries = soup.select(f"{self.container_selector} > div")
        except Exception as e:
            self.logger.warning("result_board_unparseable", error=str(e))
            return []

        results: List[MarketResult] = []
        for index, entry in enumerate(entries, start=1):
            try:
                result = self._parse_entry(entry, index, captured_at)
            except Exception as e:
                self.logger.warning("failed_to_parse_entry", position=index, error=str(e))
                continue
            if not result.is_empty:
                results.append(result)

        self.logger.info("market_results_extracted", entries=len(entries), results=len(results))
        return results

    def _parse_entry(self, entry: Tag, position: int, captured_at: datetime) -> MarketResult:
        market_name = self._joined_text(entry, self.name_selector)
        raw_numbers = self._joined_text(entry, self.value_selector)
        return MarketResult.from_fields(
            market_name=market_name,
            raw_numbers=raw_numbers,
            raw_text=entry.get_text().strip(),
            position=position,
            captured_at=captured_at,
        )

    @staticmethod
    def _joined_text(entry: Tag, selector: str) -> str:
        # Text of every match, concatenated
        return "".join(el.get_text() for el in entry.select(selector)).strip()
