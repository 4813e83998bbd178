"""
Warden - Base API Models
========================

Common response models and utilities.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, Field


# =============================================================================
# Generic Type Variables
# =============================================================================

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Base Response Models
# =============================================================================

class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    service: str = "Warden"
    run_id: Optional[str] = None
    database: bool
    timestamp: datetime = Field(default_factory=_utcnow)


__all__ = [
    "APIResponse",
    "HealthResponse",
]
