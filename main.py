#!/usr/bin/env python3
"""
Warden - Entry Point
====================

Runs the Discord bot and the dashboard API in one process.

Features:
- Slash command /setup for guild configuration
- Discord OAuth login for the dashboard
- Cookie and database backed sessions

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import sys

from dotenv import load_dotenv

from warden.core.logger import logger


async def main() -> None:
    """
    Main entry point.

    Handles the complete lifecycle:
    1. Loads environment configuration
    2. Validates required variables
    3. Starts the API service in the background
    4. Connects the bot to Discord
    5. Stops the API service on shutdown
    """
    load_dotenv()

    from warden.core.config import ConfigValidationError, validate_and_log_config
    from warden.api import APIService
    from warden.api.app import create_app
    from warden.bot import WardenBot

    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Invalid Configuration", [("Error", str(e))])
        sys.exit(1)

    logger.tree("WARDEN STARTING", [
        ("Server", "discord.gg/syria"),
        ("Commands", "/setup"),
        ("Dashboard", config.public_url),
    ], emoji="🛡️")

    bot = WardenBot(config)
    api_service = APIService(create_app(config, db=bot.db))

    await api_service.start()
    try:
        async with bot:
            await bot.start(config.discord_token)
    finally:
        await api_service.stop()
        bot.db.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
