"""
Warden - Constants
==================

Shared constants for storage and sessions.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Database
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0
"""Seconds sqlite3.connect waits for a locked database."""

SQLITE_BUSY_TIMEOUT = 5000
"""PRAGMA busy_timeout in milliseconds."""


# =============================================================================
# Sessions
# =============================================================================

CLIENT_SESSION_COOKIE = "__client-session"
"""Signed cookie holding the logged-in user id."""

DB_SESSION_COOKIE = "__session"
"""Cookie holding the id of the server-side session row."""

PENDING_LOGIN_MAX_AGE = 60 * 60 * 1  # 1 hour
USER_SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days

USER_SESSION_KEY = "userId"
STATE_KEY = "state"
RETURN_TO_KEY = "redirectTo"
TOKEN_KEY = "discordToken"


__all__ = [
    "DB_CONNECTION_TIMEOUT",
    "SQLITE_BUSY_TIMEOUT",
    "CLIENT_SESSION_COOKIE",
    "DB_SESSION_COOKIE",
    "PENDING_LOGIN_MAX_AGE",
    "USER_SESSION_MAX_AGE",
    "USER_SESSION_KEY",
    "STATE_KEY",
    "RETURN_TO_KEY",
    "TOKEN_KEY",
]
