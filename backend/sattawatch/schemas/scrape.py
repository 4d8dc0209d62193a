"""Scrape run schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from sattawatch.scrapers.base import MarketResult, ScrapeRun


class MarketResultResponse(BaseModel):
    """One market entry as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    market_name: str
    raw_numbers: str
    open: str
    jodi: str
    close: str
    raw_text: str
    position: int
    captured_at: datetime

    @classmethod
    def from_result(cls, result: MarketResult) -> "MarketResultResponse":
        return cls.model_validate(result)


class ScrapeRunResponse(BaseModel):
    """A persisted scrape run."""

    id: Optional[int] = None
    scraped_at: datetime
    result_count: int
    results: List[MarketResultResponse]

    @classmethod
    def from_run(cls, run: ScrapeRun) -> "ScrapeRunResponse":
        return cls(
            id=run.run_id,
            scraped_at=run.scraped_at,
            result_count=run.result_count,
            results=[MarketResultResponse.from_result(r) for r in run.results],
        )
