"""
Warden - Utilities
==================

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .async_utils import create_safe_task

__all__ = ["create_safe_task"]
