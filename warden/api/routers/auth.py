"""
Warden - Auth Router
====================

Discord login, token refresh and logout endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse, Response

from warden.core.constants import RETURN_TO_KEY
from warden.core.database import UserRecord
from warden.core.logger import logger
from warden.api.dependencies import get_auth_flow, require_user
from warden.api.models.base import APIResponse
from warden.api.models.auth import UserResponse
from warden.api.services.auth_flow import AuthFlow


router = APIRouter(tags=["Auth"])


def _get_client_ip(request: Request) -> str:
    """Get client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


@router.get("/login")
async def login(
    request: Request,
    redirect_to: Optional[str] = Query(None, alias=RETURN_TO_KEY),
    flow: AuthFlow = Depends(get_auth_flow),
) -> RedirectResponse:
    """
    Start a Discord login.

    Stores a state token in the database session and redirects to
    Discord. `redirectTo` is where the caller lands once logged in.
    """
    logger.debug("Login Requested", [
        ("Redirect To", redirect_to or "-"),
        ("IP", _get_client_ip(request)),
    ])
    return await flow.initiate(request, return_to=redirect_to)


@router.get("/discord-oauth")
async def discord_oauth_callback(
    request: Request,
    flow: AuthFlow = Depends(get_auth_flow),
) -> RedirectResponse:
    """Discord's OAuth callback. Completes the login started by /login."""
    return await flow.complete(request)


@router.post("/refresh")
async def refresh(
    request: Request,
    flow: AuthFlow = Depends(get_auth_flow),
) -> Response:
    """Refresh the Discord token kept in the database session."""
    return await flow.refresh(request)


@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    request: Request,
    flow: AuthFlow = Depends(get_auth_flow),
) -> RedirectResponse:
    """Clear both sessions and redirect home."""
    return await flow.logout(request)


@router.get("/me", response_model=APIResponse[UserResponse])
async def me(user: UserRecord = Depends(require_user)) -> APIResponse[UserResponse]:
    """The logged-in user."""
    return APIResponse(success=True, data=UserResponse.from_record(user))


__all__ = ["router"]
