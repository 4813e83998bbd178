"""
Warden - Main Bot Class
=======================

Core Discord client. Loads the command cogs and syncs the command tree.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime
from typing import Optional

import discord
from discord.ext import commands

from warden.core.logger import logger
from warden.core.config import Config, get_config
from warden.core.database import DatabaseManager


# =============================================================================
# WardenBot Class
# =============================================================================

class WardenBot(commands.Bot):
    """
    Main Discord bot class.

    DESIGN:
        Slash commands only, so no privileged intents are requested.
        The database is shared with the API service running next to it.
    """

    def __init__(self, config: Optional[Config] = None, db: Optional[DatabaseManager] = None) -> None:
        self.config = config or get_config()

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=discord.Intents.default(),
            help_command=None,
        )

        self.db = db or DatabaseManager(self.config.database_path)
        self.start_time: datetime = datetime.now()
        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load cogs and sync commands before on_ready."""
        from warden.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.info(f"Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        try:
            synced = await self.tree.sync()
            logger.tree("Commands Synced", [("Count", str(len(synced)))], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        if self.config.error_webhook_url:
            logger.set_webhook(self.config.error_webhook_url)


__all__ = ["WardenBot"]
