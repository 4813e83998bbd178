"""
Warden - API Models
===================

Pydantic models for API requests and responses.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .base import APIResponse, HealthResponse
from .auth import UserResponse

__all__ = [
    "APIResponse",
    "HealthResponse",
    "UserResponse",
]
