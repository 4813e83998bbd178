"""
Warden - API Package
====================

FastAPI service for the moderation dashboard: Discord login and sessions.

Usage with bot:
    from warden.api import APIService

    api_service = APIService()
    await api_service.start()

    # On shutdown
    await api_service.stop()

Standalone (for development):
    uvicorn --factory warden.api.app:create_app --reload

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Optional

import uvicorn
from fastapi import FastAPI

from warden.core.logger import logger
from warden.utils.async_utils import create_safe_task
from warden.api.config import get_api_config, APIConfig
from warden.api.app import create_app


# =============================================================================
# API Service
# =============================================================================

class APIService:
    """
    Manages the FastAPI server lifecycle next to the Discord bot.

    This service runs the API server in a background task, allowing
    the bot and API to run concurrently.
    """

    def __init__(self, app: Optional[FastAPI] = None, config: Optional[APIConfig] = None) -> None:
        """
        Initialize the API service.

        Args:
            app: Application to serve. Defaults to create_app().
            config: Server configuration. Defaults to get_api_config().
        """
        self._config = config or get_api_config()
        self._app = app or create_app(api_config=self._config)
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def app(self) -> FastAPI:
        return self._app

    @property
    def is_running(self) -> bool:
        """Check if the API server is running."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the API server in a background task."""
        if self.is_running:
            logger.warning("API Already Running", [])
            return

        config = uvicorn.Config(
            app=self._app,
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            access_log=False,
        )

        self._server = uvicorn.Server(config)
        self._task = create_safe_task(self._server.serve(), "API Server")

        logger.tree("API Service Started", [
            ("Host", self._config.host),
            ("Port", str(self._config.port)),
            ("Debug", str(self._config.debug)),
        ], emoji="🌐")

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self.is_running:
            return

        logger.tree("API Service Stopping", [], emoji="🛑")

        if self._server:
            self._server.should_exit = True

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=5.0)
            except asyncio.TimeoutError:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass

        self._server = None
        self._task = None

        logger.tree("API Service Stopped", [], emoji="✅")


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "APIService",
    "APIConfig",
    "get_api_config",
    "create_app",
]
