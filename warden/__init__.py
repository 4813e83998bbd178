"""
Warden
======

Discord moderation bot with a web dashboard backend.

The package has three parts:
    warden.core      configuration, logging, SQLite storage
    warden.api       FastAPI service: sessions and Discord OAuth login
    warden.commands  slash commands loaded by warden.bot

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

__version__ = "1.0.0"
