"""
Warden - Guilds Database Mixin
==============================

Guild registration and per-guild settings.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import time
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from warden.core.logger import logger
from warden.core.database.models import Setting

if TYPE_CHECKING:
    from warden.core.database.manager import DatabaseManager


class GuildsMixin:
    """Mixin for guild and guild settings operations."""

    # =========================================================================
    # Registration
    # =========================================================================

    def register_guild(self: "DatabaseManager", guild_id: str) -> bool:
        """
        Register a guild if it is not registered yet.

        Returns:
            True if the guild was newly registered.
        """
        cursor = self.execute(
            "INSERT OR IGNORE INTO guilds (id, registered_at) VALUES (?, ?)",
            (str(guild_id), time.time())
        )
        created = cursor.rowcount > 0
        if created:
            logger.tree("Guild Registered", [
                ("Guild ID", str(guild_id)),
            ], emoji="🏠")
        return created

    def is_guild_registered(self: "DatabaseManager", guild_id: str) -> bool:
        """Check if a guild is registered."""
        row = self.fetchone("SELECT 1 FROM guilds WHERE id = ?", (str(guild_id),))
        return row is not None

    # =========================================================================
    # Settings
    # =========================================================================

    def set_settings(
        self: "DatabaseManager",
        guild_id: str,
        settings: Dict[Setting, Optional[str]],
    ) -> None:
        """
        Write settings for a guild, overwriting existing values.

        Args:
            guild_id: Guild ID (must be registered).
            settings: Mapping of setting key to value.
        """
        now = time.time()
        with self.transaction() as tx:
            for key, value in settings.items():
                tx.execute(
                    """INSERT INTO guild_settings (guild_id, key, value, updated_at)
                       VALUES (?, ?, ?, ?)
                       ON CONFLICT(guild_id, key)
                       DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
                    (str(guild_id), Setting(key).value, value, now)
                )

        logger.tree("Guild Settings Updated", [
            ("Guild ID", str(guild_id)),
            *[(Setting(k).value, str(v)) for k, v in settings.items()],
        ], emoji="⚙️")

    def fetch_settings(
        self: "DatabaseManager",
        guild_id: str,
        keys: Optional[Iterable[Setting]] = None,
    ) -> Dict[str, Optional[str]]:
        """
        Read settings for a guild.

        Args:
            guild_id: Guild ID.
            keys: Settings to read. Defaults to every known setting.

        Returns:
            Mapping of setting key to value for the settings that are set.
        """
        wanted = {Setting(k).value for k in (keys if keys is not None else Setting)}
        rows = self.fetchall(
            "SELECT key, value FROM guild_settings WHERE guild_id = ?",
            (str(guild_id),)
        )
        return {row["key"]: row["value"] for row in rows if row["key"] in wanted}


__all__ = ["GuildsMixin"]
