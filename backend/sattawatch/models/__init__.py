"""SQLAlchemy models for SattaWatch.

All models are imported here so metadata.create_all can discover them.
"""

from sattawatch.models.base import Base
from sattawatch.models.scrape_run import ScrapeRunRecord

__all__ = [
    "Base",
    "ScrapeRunRecord",
]
