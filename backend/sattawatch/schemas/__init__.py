"""Pydantic schemas for the SattaWatch API.

All request/response models are defined here for easy import.
"""

from sattawatch.schemas.common import ApiResponse, ErrorResponse
from sattawatch.schemas.health import HealthCheckResponse, UpdateStatusResponse
from sattawatch.schemas.scrape import MarketResultResponse, ScrapeRunResponse

__all__ = [
    # Common
    "ApiResponse",
    "ErrorResponse",
    # Health
    "HealthCheckResponse",
    "UpdateStatusResponse",
    # Scrape
    "MarketResultResponse",
    "ScrapeRunResponse",
]
