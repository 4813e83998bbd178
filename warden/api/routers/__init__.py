"""
Warden - API Routers
====================

Route handlers for the API.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .health import router as health_router
from .auth import router as auth_router

__all__ = [
    "health_router",
    "auth_router",
]
