"""
Warden - Database Module
========================

Centralized database management for Warden.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from warden.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)

from warden.core.database.models import (
    SessionRecord,
    UserRecord,
    Setting,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "SessionRecord",
    "UserRecord",
    "Setting",
]
