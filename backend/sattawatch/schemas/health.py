"""Health and update-status schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    success: bool = True
    status: str = "Server is running"
    last_update: Optional[datetime] = None
    next_update: Optional[datetime] = None


class UpdateStatusResponse(BaseModel):
    """Scheduler timing and run status."""

    success: bool = True
    last_update: Optional[datetime] = None
    next_update: Optional[datetime] = None
    update_interval_hours: float
    running: bool = False
    scheduler_running: bool = False
    last_error: Optional[str] = None
    consecutive_failures: int = 0
