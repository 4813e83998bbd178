"""
Warden - API Configuration
==========================

Centralized configuration for the FastAPI service.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from dataclasses import dataclass
from typing import Optional
import os

from warden.core.constants import (
    CLIENT_SESSION_COOKIE,
    DB_SESSION_COOKIE,
    PENDING_LOGIN_MAX_AGE,
    USER_SESSION_MAX_AGE,
)


@dataclass(frozen=True)
class APIConfig:
    """API configuration settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8081
    debug: bool = False

    # CORS
    cors_origins: tuple[str, ...] = ("*",)

    # Sessions
    client_session_cookie: str = CLIENT_SESSION_COOKIE
    db_session_cookie: str = DB_SESSION_COOKIE
    pending_login_max_age: int = PENDING_LOGIN_MAX_AGE
    user_session_max_age: int = USER_SESSION_MAX_AGE


def load_api_config() -> APIConfig:
    """Load API configuration from environment."""
    origins = tuple(
        o.strip() for o in os.getenv("WARDEN_API_CORS_ORIGINS", "*").split(",") if o.strip()
    )
    return APIConfig(
        host=os.getenv("WARDEN_API_HOST", "0.0.0.0"),
        port=int(os.getenv("WARDEN_API_PORT", "8081")),
        debug=os.getenv("WARDEN_API_DEBUG", "false").lower() == "true",
        cors_origins=origins or ("*",),
    )


# Singleton instance
_config: Optional[APIConfig] = None


def get_api_config() -> APIConfig:
    """Get the API configuration singleton."""
    global _config
    if _config is None:
        _config = load_api_config()
    return _config


__all__ = ["APIConfig", "get_api_config", "load_api_config"]
