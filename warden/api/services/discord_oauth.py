"""
Warden - Discord OAuth2 Client
==============================

Authorization-code flow against Discord's OAuth2 endpoints.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp
from pydantic import BaseModel, Field, ValidationError

from warden.core.logger import logger


# =============================================================================
# Constants
# =============================================================================

DISCORD_API = "https://discord.com/api/v10"
AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
TOKEN_URL = f"{DISCORD_API}/oauth2/token"
USER_URL = f"{DISCORD_API}/users/@me"

REQUEST_TIMEOUT = 10


# =============================================================================
# Models
# =============================================================================

class OAuthToken(BaseModel):
    """Token set returned by the token endpoint."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    obtained_at: float = Field(default_factory=time.time)

    @property
    def expires_at(self) -> Optional[float]:
        if self.expires_in is None:
            return None
        return self.obtained_at + self.expires_in

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and time.time() >= self.expires_at

    def serialize(self) -> str:
        """JSON form stored in the database session."""
        return self.model_dump_json()


class DiscordUser(BaseModel):
    """Subset of the /users/@me payload."""

    id: str
    username: str
    global_name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None


class OAuthError(Exception):
    """Raised when Discord rejects or fails an OAuth request."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


# =============================================================================
# Client
# =============================================================================

class DiscordOAuthClient:
    """
    Discord OAuth2 client.

    Attributes:
        client_id: OAuth2 application client ID.
        scopes: Scopes requested on authorization.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        scopes: List[str],
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self.scopes = list(scopes)
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    # =========================================================================
    # Authorization
    # =========================================================================

    def auth_url(self, redirect: str, state: str) -> str:
        """
        Build the authorization URL the user is redirected to.

        Args:
            redirect: Callback URL Discord sends the user back to.
            state: Opaque value echoed back on the callback.
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "scope": " ".join(self.scopes),
            "state": state,
            "redirect_uri": redirect,
            "prompt": "none",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    # =========================================================================
    # Tokens
    # =========================================================================

    async def fetch_token(self, code: str, redirect: str) -> OAuthToken:
        """Exchange an authorization code for a token."""
        return await self._request_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect,
        })

    async def refresh_token(self, token: OAuthToken) -> OAuthToken:
        """Exchange a token's refresh token for a new token."""
        if not token.refresh_token:
            raise OAuthError("Token has no refresh token")
        return await self._request_token({
            "grant_type": "refresh_token",
            "refresh_token": token.refresh_token,
        })

    def parse_token(self, serialized: Optional[str]) -> OAuthToken:
        """Rebuild a token from its serialized form."""
        if not serialized:
            raise OAuthError("No stored token")
        try:
            return OAuthToken.model_validate_json(serialized)
        except ValidationError as e:
            raise OAuthError(f"Stored token is invalid: {e.error_count()} errors") from e

    async def _request_token(self, form: Dict[str, str]) -> OAuthToken:
        payload = await self._request(
            "POST",
            TOKEN_URL,
            data=form,
            auth=aiohttp.BasicAuth(self.client_id, self._client_secret),
        )
        try:
            return OAuthToken.model_validate(payload)
        except ValidationError as e:
            raise OAuthError("Malformed token response") from e

    # =========================================================================
    # User
    # =========================================================================

    async def fetch_user(self, token: OAuthToken) -> DiscordUser:
        """Fetch the profile of the token's owner."""
        payload = await self._request(
            "GET",
            USER_URL,
            headers={"Authorization": f"{token.token_type} {token.access_token}"},
        )
        try:
            return DiscordUser.model_validate(payload)
        except ValidationError as e:
            raise OAuthError("Malformed user response") from e

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.request(method, url, **kwargs) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        logger.warning("Discord OAuth Request Rejected", [
                            ("URL", url),
                            ("Status", str(resp.status)),
                            ("Body", body[:100]),
                        ])
                        raise OAuthError(f"Discord returned {resp.status}", status=resp.status)
                    return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Discord OAuth Request Failed", [
                ("URL", url),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            raise OAuthError(f"Discord request failed: {type(e).__name__}") from e


__all__ = [
    "OAuthToken",
    "DiscordUser",
    "OAuthError",
    "DiscordOAuthClient",
]
