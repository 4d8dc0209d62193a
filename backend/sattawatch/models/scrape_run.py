"""Persisted scrape runs."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from sattawatch.models.base import Base


class ScrapeRunRecord(Base):
    """One persisted execution of the scrape pipeline.

    Rows are append-only: written once by the result store and never
    updated or deleted by the service. Retention is handled outside.
    """

    __tablename__ = "scrape_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    scraped_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="When the page was scraped",
    )

    result_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of market results in this run",
    )

    # Ordered list of market result dicts, position order preserved
    results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ScrapeRunRecord(id={self.id}, scraped_at={self.scraped_at}, result_count={self.result_count})>"
