"""
Warden - Database Type Definitions
==================================

TypedDict definitions for database records, plus the guild setting keys.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from enum import Enum
from typing import Optional, TypedDict


class SessionRecord(TypedDict):
    """Row of the sessions table. `data` is a JSON string."""
    id: str
    data: Optional[str]
    expires: Optional[str]


class UserRecord(TypedDict, total=False):
    """Type for local user records."""
    id: str
    email: Optional[str]
    external_id: str
    created_at: float


class Setting(str, Enum):
    """
    Guild setting keys.

    The values are the keys persisted in guild_settings and must not change.
    """

    MODERATOR = "moderator"
    MOD_LOG = "modLog"


__all__ = [
    "SessionRecord",
    "UserRecord",
    "Setting",
]
