"""
Warden - Users Database Mixin
=============================

Local user accounts linked to Discord accounts.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import sqlite3
import time
import uuid
from typing import TYPE_CHECKING, Optional

from warden.core.logger import logger
from warden.core.database.models import UserRecord

if TYPE_CHECKING:
    from warden.core.database.manager import DatabaseManager


class UsersMixin:
    """Mixin for user operations."""

    def create_user(
        self: "DatabaseManager",
        email: Optional[str],
        external_id: str,
    ) -> Optional[str]:
        """
        Create a local user for a Discord account.

        Args:
            email: Email reported by Discord, if the scope allowed it.
            external_id: Discord user ID.

        Returns:
            The new user id, or None if the insert failed.
        """
        user_id = str(uuid.uuid4())
        try:
            self.execute(
                "INSERT INTO users (id, email, external_id, created_at) VALUES (?, ?, ?, ?)",
                (user_id, email, str(external_id), time.time())
            )
        except sqlite3.Error as e:
            logger.error("Failed to Create User", [
                ("External ID", str(external_id)),
                ("Error", str(e)[:100]),
            ])
            return None

        logger.tree("User Created", [
            ("User ID", user_id),
            ("External ID", str(external_id)),
        ], emoji="👤")
        return user_id

    def get_user_by_id(self: "DatabaseManager", user_id: str) -> Optional[UserRecord]:
        """Get a user by local id."""
        row = self.fetchone(
            "SELECT id, email, external_id, created_at FROM users WHERE id = ?",
            (user_id,)
        )
        return UserRecord(**dict(row)) if row else None

    def get_user_by_external_id(self: "DatabaseManager", external_id: str) -> Optional[UserRecord]:
        """Get a user by Discord user ID."""
        row = self.fetchone(
            "SELECT id, email, external_id, created_at FROM users WHERE external_id = ?",
            (str(external_id),)
        )
        return UserRecord(**dict(row)) if row else None

    def count_users(self: "DatabaseManager") -> int:
        """Count local users."""
        row = self.fetchone("SELECT COUNT(*) AS n FROM users")
        return row["n"] if row else 0


__all__ = ["UsersMixin"]
