"""
Warden - Test Fixtures
======================

Shared fixtures for all tests.
"""

import os
import sys
from http.cookies import Morsel, SimpleCookie
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"
os.environ["LOG_TO_FILE"] = "0"

from starlette.requests import Request
from starlette.responses import Response


DISCORD_USER_ID = "80351110224678912"


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_warden.db"


@pytest.fixture
def test_db(temp_db_path):
    """Create a fresh test database instance."""
    from warden.core.database import DatabaseManager

    # Reset singleton
    DatabaseManager._instance = None

    db = DatabaseManager(temp_db_path)
    yield db

    # Cleanup
    db.close()
    DatabaseManager._instance = None


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def test_config(temp_db_path):
    """Config with every required value set."""
    from warden.core.config import Config

    return Config(
        discord_token="bot-token",
        discord_client_id="client-id",
        discord_client_secret="client-secret",
        session_secrets=["test-secret"],
        public_url="http://testserver",
        database_path=temp_db_path,
    )


@pytest.fixture
def api_config():
    from warden.api.config import APIConfig

    return APIConfig()


# =============================================================================
# OAuth
# =============================================================================

@pytest.fixture
def mock_oauth():
    """
    Discord OAuth client whose network calls are AsyncMocks.

    auth_url() and parse_token() stay real.
    """
    from warden.api.services.discord_oauth import DiscordOAuthClient, DiscordUser, OAuthToken

    oauth = DiscordOAuthClient("client-id", "client-secret", ["identify", "email"])
    oauth.fetch_token = AsyncMock(return_value=OAuthToken(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_in=604800,
        scope="identify email",
    ))
    oauth.fetch_user = AsyncMock(return_value=DiscordUser(
        id=DISCORD_USER_ID,
        username="nelly",
        email="nelly@example.com",
    ))
    oauth.refresh_token = AsyncMock(return_value=OAuthToken(
        access_token="access-2",
        refresh_token="refresh-2",
        expires_in=604800,
    ))
    return oauth


# =============================================================================
# Auth Flow & App
# =============================================================================

@pytest.fixture
def auth_flow(test_config, api_config, test_db, mock_oauth):
    """AuthFlow wired the same way create_app() wires it."""
    from warden.api.app import build_auth_flow

    return build_auth_flow(test_config, api_config, test_db, mock_oauth)


@pytest.fixture
def app(test_config, api_config, test_db, mock_oauth):
    from warden.api.app import create_app

    return create_app(test_config, db=test_db, oauth=mock_oauth, api_config=api_config)


@pytest.fixture
def client(app):
    """TestClient that does not follow redirects."""
    from fastapi.testclient import TestClient

    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


# =============================================================================
# Requests & Cookies
# =============================================================================

@pytest.fixture
def make_request():
    """Build a Starlette request carrying the given cookies."""
    def _make(
        path: str = "/",
        query: str = "",
        cookies: Optional[Dict[str, str]] = None,
    ) -> Request:
        headers = []
        if cookies:
            header = "; ".join(f"{name}={value}" for name, value in cookies.items())
            headers.append((b"cookie", header.encode()))
        return Request({
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": path,
            "query_string": query.encode(),
            "headers": headers,
        })

    return _make


@pytest.fixture
def set_cookies():
    """Parse the Set-Cookie headers of a response into {name: Morsel}."""
    def _parse(response: Response) -> Dict[str, Morsel]:
        jar: Dict[str, Morsel] = {}
        for header in response.headers.getlist("set-cookie"):
            cookie = SimpleCookie()
            cookie.load(header)
            jar.update(cookie)
        return jar

    return _parse


# =============================================================================
# Discord
# =============================================================================

@pytest.fixture
def mock_discord_guild():
    """Create a mock Discord guild."""
    guild = MagicMock()
    guild.id = 987654321
    guild.name = "Test Server"
    return guild


@pytest.fixture
def mock_discord_role():
    role = MagicMock()
    role.id = 123
    role.name = "Moderator"
    return role


@pytest.fixture
def mock_discord_text_channel(mock_discord_guild):
    """Create a mock Discord text channel."""
    channel = MagicMock()
    channel.id = 456
    channel.name = "mod-log"
    channel.guild = mock_discord_guild
    return channel


@pytest.fixture
def mock_discord_interaction(mock_discord_guild):
    """Create a mock Discord interaction."""
    interaction = MagicMock()
    interaction.user = MagicMock()
    interaction.user.id = 111222333
    interaction.guild = mock_discord_guild
    interaction.guild_id = mock_discord_guild.id
    interaction.response = MagicMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    return interaction


@pytest.fixture
def mock_bot(test_db):
    """Create a mock bot instance."""
    bot = MagicMock()
    bot.db = test_db
    return bot
