"""
Warden - Database Schema Module
===============================

Table definitions.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from warden.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Sessions Table
        # DESIGN: Server-side session rows referenced by the __session
        # cookie. `data` is a JSON blob, `expires` is informational only.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                id TEXT PRIMARY KEY,
                data TEXT,
                expires TEXT
            )
        """)

        # -----------------------------------------------------------------
        # Users Table
        # DESIGN: Local accounts, one per Discord account (external_id)
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT,
                external_id TEXT NOT NULL UNIQUE,
                created_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Guilds Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guilds (
                id TEXT PRIMARY KEY,
                registered_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Guild Settings Table
        # DESIGN: One row per (guild, setting key)
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guild_settings (
                guild_id TEXT NOT NULL REFERENCES guilds(id),
                key TEXT NOT NULL,
                value TEXT,
                updated_at REAL NOT NULL,
                PRIMARY KEY (guild_id, key)
            )
        """)

        conn.commit()


__all__ = ["SchemaMixin"]
