"""
Warden - API Dependencies
=========================

FastAPI dependency injection utilities.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from fastapi import Depends, HTTPException, Request

from warden.core.database import UserRecord
from warden.api.services.auth_flow import AuthFlow


# =============================================================================
# Auth Flow
# =============================================================================

def get_auth_flow(request: Request) -> AuthFlow:
    """Get the AuthFlow built by create_app()."""
    flow = getattr(request.app.state, "auth_flow", None)
    if flow is None:
        raise HTTPException(
            status_code=503,
            detail="Auth not initialized",
        )
    return flow


# =============================================================================
# Authentication Dependencies
# =============================================================================

async def require_user_id(
    request: Request,
    flow: AuthFlow = Depends(get_auth_flow),
) -> str:
    """
    Require a logged-in caller.
    Redirects to /login?redirectTo=<path> if nobody is logged in.
    """
    return await flow.require_user_id(request)


async def require_user(
    request: Request,
    flow: AuthFlow = Depends(get_auth_flow),
) -> UserRecord:
    """
    Require a logged-in caller whose user still exists.
    A stale session is logged out instead.
    """
    return await flow.require_user(request)


__all__ = [
    "get_auth_flow",
    "require_user_id",
    "require_user",
]
