"""
Warden - Setup Command Cog
==========================

Slash command that stores a guild's moderator role and mod-log channel.

DESIGN:
    /setup is the only way guild settings are written. Every failure,
    including missing input, is reported back to the invoking member as
    text; nothing propagates to discord.py's error handler.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from warden.core.logger import logger
from warden.core.database import Setting

if TYPE_CHECKING:
    from warden.bot import WardenBot


SUCCESS_MESSAGE = "Setup completed!"


class SetupError(Exception):
    """Input the setup command cannot work with."""


# =============================================================================
# Setup Cog
# =============================================================================

class SetupCog(commands.Cog):
    """
    Guild configuration command.

    Attributes:
        bot: Reference to the main bot instance.
        db: Database holding guild registrations and settings.
    """

    def __init__(self, bot: "WardenBot") -> None:
        self.bot = bot
        self.db = bot.db

    # =========================================================================
    # Setup Command
    # =========================================================================

    @app_commands.command(name="setup", description="Set the moderator role and mod-log channel")
    @app_commands.rename(mod_log_channel="mod-log-channel")
    @app_commands.describe(
        moderator="Role whose members can moderate",
        mod_log_channel="Channel moderation actions are logged to",
    )
    @app_commands.default_permissions(manage_guild=True)
    @app_commands.guild_only()
    async def setup_command(
        self,
        interaction: discord.Interaction,
        moderator: discord.Role,
        mod_log_channel: discord.TextChannel,
    ) -> None:
        """Register the guild and save both settings."""
        try:
            guild_id = self.apply_setup(interaction.guild, moderator, mod_log_channel)
        except Exception as e:
            logger.warning("Setup Failed", [
                ("Guild", str(interaction.guild_id or "-")),
                ("By", str(interaction.user)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            await interaction.response.send_message(
                f"Something broke:\n```\n{e}\n```",
                ephemeral=True,
            )
            return

        logger.tree("Guild Setup", [
            ("Guild", guild_id),
            ("By", str(interaction.user)),
            ("Moderator Role", str(moderator.id)),
            ("Mod Log Channel", str(mod_log_channel.id)),
        ], emoji="🛠️")

        await interaction.response.send_message(SUCCESS_MESSAGE, ephemeral=True)

    def apply_setup(
        self,
        guild: Optional[discord.Guild],
        role: Optional[discord.Role],
        channel: Optional[discord.abc.GuildChannel],
    ) -> str:
        """
        Validate the command input and write the guild's settings.

        Returns:
            The guild id the settings were written for.

        Raises:
            SetupError: The guild, role or channel is missing.
        """
        if guild is None:
            raise SetupError("Interaction has no guild")
        if role is None:
            raise SetupError("Interaction has no role")
        if channel is None:
            raise SetupError("Interaction has no channel")

        guild_id = str(guild.id)
        self.db.register_guild(guild_id)
        self.db.set_settings(guild_id, {
            Setting.MODERATOR: str(role.id),
            Setting.MOD_LOG: str(channel.id),
        })
        return guild_id


# =============================================================================
# Setup
# =============================================================================

async def setup(bot: "WardenBot") -> None:
    """Add the setup cog to the bot."""
    await bot.add_cog(SetupCog(bot))
