"""Typed records produced by the scrape pipeline.

MarketResult is one parsed entry from the result board; ScrapeRun is one
execution of fetch -> extract -> save. Both are immutable once built.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

NUMBER_DELIMITER = "-"


@dataclass(frozen=True)
class MarketResult:
    """One market entry parsed from the result board."""

    market_name: str
    raw_numbers: str
    raw_text: str
    position: int  # 1-based, document order
    captured_at: datetime
    open: str = ""
    jodi: str = ""
    close: str = ""

    @classmethod
    def from_fields(
        cls,
        market_name: str,
        raw_numbers: str,
        raw_text: str,
        position: int,
        captured_at: datetime,
    ) -> "MarketResult":
        """Build a result, splitting raw_numbers into open/jodi/close.

        "599-39-568" gives open="599", jodi="39", close="568". Missing
        segments default to an empty string; extra segments are ignored.
        """
        parts = raw_numbers.split(NUMBER_DELIMITER)
        parts += [""] * (3 - len(parts))
        return cls(
            market_name=market_name,
            raw_numbers=raw_numbers,
            raw_text=raw_text,
            position=position,
            captured_at=captured_at,
            open=parts[0],
            jodi=parts[1],
            close=parts[2],
        )

    @property
    def is_empty(self) -> bool:
        return not self.market_name and not self.raw_numbers

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market_name": self.market_name,
            "raw_numbers": self.raw_numbers,
            "open": self.open,
            "jodi": self.jodi,
            "close": self.close,
            "raw_text": self.raw_text,
            "position": self.position,
            "captured_at": self.captured_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketResult":
        captured_at = data.get("captured_at")
        if isinstance(captured_at, str):
            captured_at = datetime.fromisoformat(captured_at)
        return cls(
            market_name=data.get("market_name", ""),
            raw_numbers=data.get("raw_numbers", ""),
            raw_text=data.get("raw_text", ""),
            position=int(data.get("position", 0)),
            captured_at=captured_at,
            open=data.get("open", ""),
            jodi=data.get("jodi", ""),
            close=data.get("close", ""),
        )


@dataclass(frozen=True)
class ScrapeRun:
    """One execution of the scrape pipeline.

    run_id stays None until the result store assigns one on insert.
    """

    scraped_at: datetime
    results: Tuple[MarketResult, ...] = field(default_factory=tuple)
    run_id: Optional[int] = None

    @property
    def result_count(self) -> int:
        return len(self.results)

    def with_run_id(self, run_id: int) -> "ScrapeRun":
        return replace(self, run_id=run_id)
