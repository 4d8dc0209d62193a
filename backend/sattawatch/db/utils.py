"""Database bootstrap helpers."""

import logging

import structlog
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from sattawatch.models import Base

logger = structlog.get_logger(__name__)


# The database container often comes up after the API on fresh deployments
@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=2, min=2, max=30),
    retry=retry_if_exception_type((OperationalError, OSError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables for the registered models.

    Args:
        engine: Async engine bound to the target database

    Raises:
        OperationalError: If the database is still unreachable after retries
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_ready", tables=sorted(Base.metadata.tables))
