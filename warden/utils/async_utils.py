"""
Warden - Async Utilities
========================

Background tasks that log their failures instead of losing them.

Usage:
    from warden.utils.async_utils import create_safe_task

    create_safe_task(server.serve(), "API Server")

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Coroutine

from warden.core.logger import logger


# =============================================================================
# Safe Background Tasks
# =============================================================================

def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Args:
        coro: The coroutine to run as a background task.
        name: Name for logging purposes.

    Returns:
        The created asyncio.Task.
    """
    async def wrapped():
        try:
            await coro
        except asyncio.CancelledError:
            # Expected during shutdown
            pass
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])

    return asyncio.create_task(wrapped(), name=name)


__all__ = ["create_safe_task"]
