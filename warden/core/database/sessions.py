"""
Warden - Sessions Database Mixin
================================

CRUD for server-side session rows.

DESIGN:
    The store is a dumb keyed blob store. It never looks at `expires`;
    an expired row is returned like any other.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from warden.core.database.models import SessionRecord

if TYPE_CHECKING:
    from warden.core.database.manager import DatabaseManager


def _expires_str(expires: Optional[datetime]) -> Optional[str]:
    return expires.isoformat() if expires is not None else None


class SessionsMixin:
    """Mixin for session row operations."""

    def create_session(
        self: "DatabaseManager",
        data: Dict[str, Any],
        expires: Optional[datetime] = None,
    ) -> str:
        """
        Insert a new session row.

        Args:
            data: Session data, stored as JSON.
            expires: Optional expiry marker.

        Returns:
            The generated session id.
        """
        session_id = str(uuid.uuid4())
        self.execute(
            "INSERT INTO sessions (id, data, expires) VALUES (?, ?, ?)",
            (session_id, json.dumps(data), _expires_str(expires))
        )
        return session_id

    def read_session(self: "DatabaseManager", session_id: str) -> Optional[SessionRecord]:
        """
        Fetch a session row.

        Returns:
            The row, or None if no row has this id.
        """
        row = self.fetchone(
            "SELECT id, data, expires FROM sessions WHERE id = ?",
            (session_id,)
        )
        if row is None:
            return None
        return SessionRecord(id=row["id"], data=row["data"], expires=row["expires"])

    def update_session(
        self: "DatabaseManager",
        session_id: str,
        data: Dict[str, Any],
        expires: Optional[datetime] = None,
    ) -> None:
        """Overwrite data and expiry of an existing session row."""
        self.execute(
            "UPDATE sessions SET data = ?, expires = ? WHERE id = ?",
            (json.dumps(data), _expires_str(expires), session_id)
        )

    def delete_session(self: "DatabaseManager", session_id: str) -> None:
        """Delete a session row. Deleting a missing row is a no-op."""
        self.execute("DELETE FROM sessions WHERE id = ?", (session_id,))


__all__ = ["SessionsMixin"]
