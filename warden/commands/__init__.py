"""
Warden - Commands Package
=========================

Slash command implementations for the Warden bot.
Commands are implemented as discord.py Cogs for modularity.

DESIGN:
    Each command file contains a Cog class with related commands.
    Cogs are loaded dynamically by the bot using load_extension().

    To add a new command:
    1. Create new_command.py in this directory
    2. Create a Cog class with @app_commands.command decorators
    3. Add async def setup(bot) function at the end
    4. Add the cog to COMMAND_COGS list below

Available Commands:
    /setup: Set the moderator role and mod-log channel (Manage Server)

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "warden.commands.setup",
]
"""
List of command cog module paths for dynamic loading.

DESIGN:
    Bot iterates this list and calls load_extension() for each.
"""


__all__ = [
    "COMMAND_COGS",
]
