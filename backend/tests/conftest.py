"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sattawatch.models import Base
from sattawatch.scrapers.base import MarketResult, ScrapeRun


RESULT_BOARD_HTML = """
<html>
  <body>
    <header><div><h4>Not a market</h4><span>0-0-0</span></div></header>
    <div class="satta-main-result">
      <div><h4>MILAN MORNING</h4><span>599-39-568</span></div>
      <div></div>
      <div>
        <h4> KALYAN </h4>
        <span> 123-45 </span>
      </div>
      <div><h4>MAIN BAZAR</h4></div>
      <div><span>111-22-333</span><p>no label</p></div>
    </div>
  </body>
</html>
"""


class FixedClock:
    """Callable clock returning a settable UTC time."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_run(scraped_at: datetime, names: List[str] = ("MILAN MORNING",)) -> ScrapeRun:
    results = tuple(
        MarketResult.from_fields(
            market_name=name,
            raw_numbers="599-39-568",
            raw_text=f"{name}599-39-568",
            position=i,
            captured_at=scraped_at,
        )
        for i, name in enumerate(names, start=1)
    )
    return ScrapeRun(scraped_at=scraped_at, results=results)


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def result_board_html() -> str:
    return RESULT_BOARD_HTML


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def empty_session_factory():
    """In-memory SQLite database without any tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
