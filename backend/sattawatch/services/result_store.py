"""Append-only store for scrape runs.

Only two operations are exposed: insert a run, and read back the most
recent runs newest first. Runs are never updated or deleted here.
"""

from datetime import datetime, timezone
from typing import List

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sattawatch.core.exceptions import classify_persistence_error
from sattawatch.models.scrape_run import ScrapeRunRecord
from sattawatch.scrapers.base import MarketResult, ScrapeRun

logger = structlog.get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ResultStore:
    """Persists ScrapeRuns through an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize result store.

        Args:
            session_factory: Async session factory for database access
        """
        self.session_factory = session_factory
        self.logger = logger.bind(service="result_store")

    async def save(self, run: ScrapeRun) -> int:
        """Insert a run and return its assigned id.

        Args:
            run: Run to persist (its run_id is ignored)

        Returns:
            Database id of the new row

        Raises:
            SchemaMissingError: If the results table does not exist
            PermissionDeniedError: If the database refuses the write
            PersistenceError: For any other database failure
        """
        record = ScrapeRunRecord(
            scraped_at=run.scraped_at,
            result_count=run.result_count,
            results=[result.to_dict() for result in run.results],
        )
        try:
            async with self.session_factory() as db:
                db.add(record)
                await db.commit()
                run_id = record.id
        except SQLAlchemyError as e:
            error = classify_persistence_error(e, operation="save")
            self.logger.error(
                "scrape_run_save_failed",
                error_type=type(error).__name__,
                error=str(e),
            )
            raise error from e

        self.logger.info("scrape_run_saved", run_id=run_id, result_count=run.result_count)
        return run_id

    async def list_recent(self, limit: int = 10) -> List[ScrapeRun]:
        """Return up to `limit` runs, newest scraped_at first.

        Raises:
            PersistenceError: If the read fails (same subtypes as save)
        """
        if limit <= 0:
            return []

        query = (
            select(ScrapeRunRecord)
            .order_by(ScrapeRunRecord.scraped_at.desc(), ScrapeRunRecord.id.desc())
            .limit(limit)
        )
        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                records = list(result.scalars().all())
        except SQLAlchemyError as e:
            error = classify_persistence_error(e, operation="list_recent")
            self.logger.error(
                "scrape_run_list_failed",
                error_type=type(error).__name__,
                error=str(e),
            )
            raise error from e

        return [self._to_run(record) for record in records]

    @staticmethod
    def _to_run(record: ScrapeRunRecord) -> ScrapeRun:
        return ScrapeRun(
            run_id=record.id,
            scraped_at=_as_utc(record.scraped_at),
            results=tuple(MarketResult.from_dict(item) for item in record.results or []),
        )
