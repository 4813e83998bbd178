"""
Warden - FastAPI Application
============================

FastAPI application factory and configuration.

Standalone (for development):
    uvicorn --factory warden.api.app:create_app --reload

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from warden import __version__
from warden.core.config import Config, get_config
from warden.core.database import DatabaseManager
from warden.core.logger import logger
from warden.api.config import APIConfig, get_api_config
from warden.api.errors import ErrorCode, RedirectRequired, error_response
from warden.api.routers import auth_router, health_router
from warden.api.services.auth_flow import AuthFlow
from warden.api.services.discord_oauth import DiscordOAuthClient
from warden.api.services.sessions import (
    CookieOptions,
    CookieSessionStorage,
    DatabaseSessionStorage,
)


# =============================================================================
# OpenAPI Documentation
# =============================================================================

API_DESCRIPTION = """
## Warden Dashboard API

Login and session backend for the Warden moderation dashboard.

### Authentication

Log in through Discord at `/login?redirectTo=<path>`. Two cookies are set:

- `__client-session`: signed, holds your user id (7 days)
- `__session`: id of the server-side session holding your Discord token

### Error Responses

All errors follow a consistent format:
```json
{
    "success": false,
    "error_code": "AUTH_OAUTH_FAILED",
    "message": "Discord OAuth authentication failed",
    "details": null
}
```
"""

OPENAPI_TAGS = [
    {
        "name": "Health",
        "description": "Health check and status endpoints",
    },
    {
        "name": "Auth",
        "description": "Login, logout and token refresh via Discord OAuth",
    },
]


# =============================================================================
# Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    logger.tree("API Starting", [
        ("Version", __version__),
        ("OAuth Callback", app.state.auth_flow.redirect_uri),
    ], emoji="🚀")

    yield

    # Shutdown
    logger.tree("API Stopping", [], emoji="🛑")


# =============================================================================
# Auth Wiring
# =============================================================================

def build_auth_flow(
    config: Config,
    api_config: APIConfig,
    db: DatabaseManager,
    oauth: Optional[DiscordOAuthClient] = None,
) -> AuthFlow:
    """Build the session storages, OAuth client and AuthFlow once."""
    cookie_storage = CookieSessionStorage(
        CookieOptions(api_config.client_session_cookie, secure=config.production),
        config.session_secrets,
    )
    db_storage = DatabaseSessionStorage(
        CookieOptions(api_config.db_session_cookie, secure=config.production),
        db,
    )
    if oauth is None:
        oauth = DiscordOAuthClient(
            config.discord_client_id,
            config.discord_client_secret,
            config.oauth_scopes,
        )

    return AuthFlow(
        cookie_storage=cookie_storage,
        db_storage=db_storage,
        oauth=oauth,
        db=db,
        redirect_uri=config.oauth_redirect_uri,
        pending_max_age=api_config.pending_login_max_age,
        user_max_age=api_config.user_session_max_age,
    )


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    config: Optional[Config] = None,
    db: Optional[DatabaseManager] = None,
    oauth: Optional[DiscordOAuthClient] = None,
    api_config: Optional[APIConfig] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: App configuration. Defaults to get_config().
        db: Database manager. Defaults to the one at config.database_path.
        oauth: OAuth client. Defaults to a Discord client built from config.
        api_config: Server configuration. Defaults to get_api_config().

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()
    api_config = api_config or get_api_config()
    if db is None:
        db = DatabaseManager(config.database_path)

    app = FastAPI(
        title="Warden API",
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs" if api_config.debug else None,
        redoc_url="/redoc" if api_config.debug else None,
        openapi_url="/openapi.json" if api_config.debug else None,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    app.state.auth_flow = build_auth_flow(config, api_config, db, oauth)

    # ==========================================================================
    # Middleware
    # ==========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(api_config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==========================================================================
    # Exception Handlers
    # ==========================================================================

    @app.exception_handler(RedirectRequired)
    async def redirect_required_handler(request: Request, exc: RedirectRequired):
        """Answer with the redirect prepared by the auth flow."""
        return exc.response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions with consistent error format."""
        logger.error("Unhandled API Error", [
            ("Path", str(request.url.path)[:50]),
            ("Method", request.method),
            ("Error Type", type(exc).__name__),
            ("Error", str(exc)[:100]),
        ])

        return error_response(
            ErrorCode.SERVER_ERROR,
            details={"path": str(request.url.path)} if api_config.debug else None,
        )

    # ==========================================================================
    # Routers
    # ==========================================================================

    app.include_router(health_router)
    app.include_router(auth_router)

    return app


__all__ = ["create_app", "build_auth_flow"]
