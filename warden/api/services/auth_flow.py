"""
Warden - Auth Flow
==================

Discord login built on the cookie and database session storages.

DESIGN:
    Two sessions are kept per browser:

        cookie session    signed cookie, holds only the local user id
        database session  sessions row, holds the pending OAuth state
                          and, once logged in, the Discord token

    Login moves a caller through three states:

        anonymous --initiate--> pending --complete--> authenticated
            ^                                               |
            +--------------------logout---------------------+

    A pending login stores the state token in the database session and
    nothing in the cookie session. complete() checks the state before it
    talks to Discord, so a forged callback creates neither a user nor a
    session.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import secrets
import sqlite3
from dataclasses import dataclass
from typing import Iterable, Optional, Union
from urllib.parse import urlencode

from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response
from starlette.status import HTTP_302_FOUND, HTTP_401_UNAUTHORIZED

from warden.core.constants import (
    PENDING_LOGIN_MAX_AGE,
    RETURN_TO_KEY,
    STATE_KEY,
    TOKEN_KEY,
    USER_SESSION_KEY,
    USER_SESSION_MAX_AGE,
)
from warden.core.database import DatabaseManager, UserRecord
from warden.core.logger import logger
from warden.api.errors import APIError, ErrorCode, RedirectRequired
from warden.api.services.discord_oauth import DiscordOAuthClient, DiscordUser, OAuthError
from warden.api.services.sessions import (
    CookieSessionStorage,
    DatabaseSessionStorage,
    SetCookie,
)


# =============================================================================
# Constants
# =============================================================================

HOME_PATH = "/"
LOGIN_PATH = "/login"
REDIRECT_URI_KEY = "redirectUri"


# =============================================================================
# Session Resolution Results
# =============================================================================

@dataclass(frozen=True)
class Anonymous:
    """No user id in the cookie session."""


@dataclass(frozen=True)
class Authenticated:
    """Cookie session points at an existing user."""

    user: UserRecord


@dataclass(frozen=True)
class Stale:
    """Cookie session points at a user that no longer exists."""

    user_id: str


SessionState = Union[Anonymous, Authenticated, Stale]


# =============================================================================
# Helpers
# =============================================================================

def redirect(
    location: str,
    status_code: int = HTTP_302_FOUND,
    cookies: Iterable[SetCookie] = (),
) -> RedirectResponse:
    """Build a redirect carrying the given Set-Cookie headers."""
    response = RedirectResponse(location, status_code=status_code)
    for cookie in cookies:
        cookie.apply(response)
    return response


def login_location(return_to: str) -> str:
    """Login URL that sends the caller back to return_to afterwards."""
    return f"{LOGIN_PATH}?{urlencode({RETURN_TO_KEY: return_to})}"


def safe_return_to(value: Optional[str]) -> str:
    """Keep only local paths so a login can't bounce to another site."""
    if isinstance(value, str) and value.startswith("/") and not value.startswith("//"):
        return value
    return HOME_PATH


# =============================================================================
# Auth Flow
# =============================================================================

class AuthFlow:
    """
    Login, logout and session resolution for the dashboard API.

    Built once at startup and stored on app.state; see warden.api.app.
    """

    def __init__(
        self,
        cookie_storage: CookieSessionStorage,
        db_storage: DatabaseSessionStorage,
        oauth: DiscordOAuthClient,
        db: DatabaseManager,
        redirect_uri: str,
        pending_max_age: int = PENDING_LOGIN_MAX_AGE,
        user_max_age: int = USER_SESSION_MAX_AGE,
    ) -> None:
        self.cookie_storage = cookie_storage
        self.db_storage = db_storage
        self.oauth = oauth
        self.db = db
        self.redirect_uri = redirect_uri
        self.pending_max_age = pending_max_age
        self.user_max_age = user_max_age

    # =========================================================================
    # Login
    # =========================================================================

    async def initiate(
        self,
        request: Request,
        redirect_to: Optional[str] = None,
        return_to: Optional[str] = None,
    ) -> RedirectResponse:
        """
        Start a login and redirect to Discord's authorization page.

        Args:
            request: Incoming request, read for its cookies.
            redirect_to: OAuth callback URL. Defaults to the configured one.
            return_to: Local path to land on once the login completes.
        """
        redirect_uri = redirect_to or self.redirect_uri
        state = secrets.token_urlsafe(32)

        db_session = await self.db_storage.get_session(request.cookies)
        db_session.set(STATE_KEY, state)
        db_session.set(REDIRECT_URI_KEY, redirect_uri)
        if return_to:
            db_session.set(RETURN_TO_KEY, safe_return_to(return_to))

        cookie = await self.db_storage.commit_session(db_session, max_age=self.pending_max_age)

        logger.tree("Login Initiated", [
            ("Session ID", db_session.id or "-"),
            ("Return To", db_session.get(RETURN_TO_KEY, HOME_PATH)),
        ], emoji="🔑")

        return redirect(self.oauth.auth_url(redirect=redirect_uri, state=state), cookies=(cookie,))

    async def complete(self, request: Request) -> RedirectResponse:
        """
        Finish a login from Discord's callback.

        Raises:
            RedirectRequired: State does not match or no code was sent
                (401 redirect to the login route).
            APIError: Discord rejected the code, or no local user could be
                found or created.
        """
        cookie_session, db_session = await asyncio.gather(
            self.cookie_storage.get_session(request.cookies),
            self.db_storage.get_session(request.cookies),
        )

        state = request.query_params.get("state")
        expected = db_session.get(STATE_KEY)
        if not state or not expected or state != expected:
            logger.warning("OAuth State Mismatch", [
                ("Session ID", db_session.id or "-"),
                ("State Present", "Yes" if state else "No"),
                ("Pending Login", "Yes" if expected else "No"),
            ])
            raise RedirectRequired(redirect(LOGIN_PATH, status_code=HTTP_401_UNAUTHORIZED))

        code = request.query_params.get("code")
        if not code:
            # Discord sends error= instead of code= when the user cancels
            logger.warning("OAuth Callback Without Code", [
                ("Session ID", db_session.id or "-"),
                ("Error", request.query_params.get("error", "-")),
            ])
            raise RedirectRequired(redirect(LOGIN_PATH, status_code=HTTP_401_UNAUTHORIZED))

        redirect_uri = db_session.get(REDIRECT_URI_KEY) or self.redirect_uri
        try:
            token = await self.oauth.fetch_token(code, redirect_uri)
            discord_user = await self.oauth.fetch_user(token)
        except OAuthError as e:
            logger.error("OAuth Completion Failed", [
                ("Session ID", db_session.id or "-"),
                ("Error", str(e)[:100]),
            ])
            raise APIError(ErrorCode.AUTH_OAUTH_FAILED) from e

        user_id = self._find_or_create_user(discord_user)
        if not user_id:
            raise APIError(ErrorCode.USER_RESOLUTION_FAILED)

        cookie_session.set(USER_SESSION_KEY, user_id)
        return_to = safe_return_to(db_session.get(RETURN_TO_KEY))
        db_session.unset(STATE_KEY)
        db_session.unset(RETURN_TO_KEY)
        db_session.unset(REDIRECT_URI_KEY)
        db_session.set(TOKEN_KEY, token.serialize())

        cookies = await asyncio.gather(
            self.cookie_storage.commit_session(cookie_session, max_age=self.user_max_age),
            self.db_storage.commit_session(db_session),
        )

        logger.tree("Login Completed", [
            ("User ID", user_id),
            ("Discord User", f"{discord_user.username} ({discord_user.id})"),
            ("Redirect", return_to),
        ], emoji="✅")

        return redirect(return_to, cookies=cookies)

    def _find_or_create_user(self, discord_user: DiscordUser) -> Optional[str]:
        try:
            user = self.db.get_user_by_external_id(discord_user.id)
        except sqlite3.Error as e:
            logger.warning("User Lookup Failed", [
                ("External ID", discord_user.id),
                ("Error", str(e)[:100]),
            ])
            user = None

        if user:
            return user["id"]

        return self.db.create_user(discord_user.email, discord_user.id)

    # =========================================================================
    # Token Refresh
    # =========================================================================

    async def refresh(self, request: Request) -> Response:
        """
        Refresh the Discord token stored in the database session.

        Raises:
            APIError: No token is stored, or Discord refused the refresh.
        """
        db_session = await self.db_storage.get_session(request.cookies)
        stored = db_session.get(TOKEN_KEY)
        if not stored:
            raise APIError(ErrorCode.AUTH_MISSING_TOKEN)

        try:
            token = self.oauth.parse_token(stored)
            new_token = await self.oauth.refresh_token(token)
        except OAuthError as e:
            logger.warning("Token Refresh Failed", [
                ("Session ID", db_session.id or "-"),
                ("Error", str(e)[:100]),
            ])
            raise APIError(ErrorCode.AUTH_OAUTH_FAILED) from e

        db_session.set(TOKEN_KEY, new_token.serialize())
        cookie = await self.db_storage.commit_session(db_session)

        logger.tree("Token Refreshed", [
            ("Session ID", db_session.id or "-"),
        ], emoji="🔄")

        response = PlainTextResponse("OK")
        cookie.apply(response)
        return response

    # =========================================================================
    # Logout
    # =========================================================================

    async def logout(self, request: Request) -> RedirectResponse:
        """Destroy both sessions and redirect home. Safe to repeat."""
        cookie_session, db_session = await asyncio.gather(
            self.cookie_storage.get_session(request.cookies),
            self.db_storage.get_session(request.cookies),
        )
        cookies = await asyncio.gather(
            self.cookie_storage.destroy_session(cookie_session),
            self.db_storage.destroy_session(db_session),
        )

        logger.tree("Logged Out", [
            ("User ID", str(cookie_session.get(USER_SESSION_KEY) or "-")),
            ("Session ID", db_session.id or "-"),
        ], emoji="👋")

        return redirect(HOME_PATH, cookies=cookies)

    # =========================================================================
    # Session Resolution
    # =========================================================================

    async def get_user_id(self, request: Request) -> Optional[str]:
        session = await self.cookie_storage.get_session(request.cookies)
        user_id = session.get(USER_SESSION_KEY)
        return str(user_id) if user_id else None

    async def resolve_session(self, request: Request) -> SessionState:
        """Classify the caller as Anonymous, Authenticated or Stale."""
        user_id = await self.get_user_id(request)
        if not user_id:
            return Anonymous()

        user = self.db.get_user_by_id(user_id)
        if user is None:
            return Stale(user_id)
        return Authenticated(user)

    async def require_user_id(self, request: Request, redirect_to: Optional[str] = None) -> str:
        """
        User id from the cookie session.

        Raises:
            RedirectRequired: Nobody is logged in. The redirect points at
                the login route with redirect_to (default: the request path).
        """
        user_id = await self.get_user_id(request)
        if not user_id:
            raise RedirectRequired(redirect(login_location(redirect_to or request.url.path)))
        return user_id

    async def require_user(self, request: Request, redirect_to: Optional[str] = None) -> UserRecord:
        """
        User record for the logged-in caller.

        Raises:
            RedirectRequired: Nobody is logged in (login redirect), or the
                session is stale (logout redirect clearing both sessions).
        """
        state = await self.resolve_session(request)
        if isinstance(state, Authenticated):
            return state.user
        if isinstance(state, Stale):
            logger.warning("Stale Session", [("User ID", state.user_id)])
            raise RedirectRequired(await self.logout(request))
        raise RedirectRequired(redirect(login_location(redirect_to or request.url.path)))


__all__ = [
    "Anonymous",
    "Authenticated",
    "Stale",
    "SessionState",
    "AuthFlow",
    "redirect",
    "login_location",
    "safe_return_to",
]
