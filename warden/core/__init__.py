"""
Warden - Core Package
=====================

Core components shared by the bot and the web service: configuration,
logging and the SQLite database manager.

DESIGN:
    Core modules are singletons or global instances so state is
    consistent across the bot and the API:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .config import (
    Config,
    ConfigValidationError,
    NY_TZ,
    get_config,
)

from .logger import logger, TreeLogger

from .database import DatabaseManager, get_db


__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "NY_TZ",
    "get_config",
    # Database
    "DatabaseManager",
    "get_db",
    # Logger
    "logger",
    "TreeLogger",
]
