"""
Warden - Auth API Models
========================

Authentication response models.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

from warden.core.database import UserRecord


# =============================================================================
# Response Models
# =============================================================================

class UserResponse(BaseModel):
    """The logged-in user."""

    id: str = Field(description="Local user ID")
    discord_id: str = Field(description="Discord user ID")
    email: Optional[str] = Field(None, description="Email shared through OAuth")
    created_at: Optional[datetime] = Field(None, description="First login")

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        created = user.get("created_at")
        return cls(
            id=user["id"],
            discord_id=user["external_id"],
            email=user.get("email"),
            created_at=datetime.fromtimestamp(created, tz=timezone.utc) if created else None,
        )


__all__ = ["UserResponse"]
