"""Common Pydantic schemas used across the API."""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope."""

    success: bool = True
    data: T
    last_update: Optional[datetime] = None
    next_update: Optional[datetime] = None


class ErrorResponse(BaseModel):
    """Standard API error response."""

    success: bool = False
    error: str
