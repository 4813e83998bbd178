"""
Warden - API Services
=====================

Service layer for the API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

# Sessions
from .sessions import (
    Session,
    CookieOptions,
    SetCookie,
    CookieSessionStorage,
    DatabaseSessionStorage,
)

# Discord OAuth
from .discord_oauth import DiscordOAuthClient, DiscordUser, OAuthToken, OAuthError

# Auth flow
from .auth_flow import AuthFlow, Anonymous, Authenticated, Stale, SessionState

__all__ = [
    # Sessions
    "Session",
    "CookieOptions",
    "SetCookie",
    "CookieSessionStorage",
    "DatabaseSessionStorage",
    # OAuth
    "DiscordOAuthClient",
    "DiscordUser",
    "OAuthToken",
    "OAuthError",
    # Auth flow
    "AuthFlow",
    "Anonymous",
    "Authenticated",
    "Stale",
    "SessionState",
]
