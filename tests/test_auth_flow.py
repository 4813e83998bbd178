"""
Warden - Auth Flow Tests
========================

Tests for login, callback, refresh, logout and session resolution.
"""

import json
from urllib.parse import parse_qs, urlparse

import jwt
import pytest

from warden.api.errors import APIError, ErrorCode, RedirectRequired
from warden.api.services.auth_flow import (
    Anonymous,
    Authenticated,
    Stale,
    login_location,
    safe_return_to,
)
from warden.api.services.discord_oauth import OAuthError


DISCORD_USER_ID = "80351110224678912"
CLIENT_COOKIE = "__client-session"
DB_COOKIE = "__session"


def _state_from(response) -> str:
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


async def _start_login(auth_flow, make_request, set_cookies, return_to=None):
    """Run initiate() and return (db session id, state)."""
    response = await auth_flow.initiate(make_request("/login"), return_to=return_to)
    return set_cookies(response)[DB_COOKIE].value, _state_from(response)


async def _log_in(auth_flow, make_request, set_cookies, return_to=None):
    """Run a full login and return the cookies of the final response."""
    session_id, state = await _start_login(auth_flow, make_request, set_cookies, return_to)
    response = await auth_flow.complete(make_request(
        "/discord-oauth",
        query=f"code=the-code&state={state}",
        cookies={DB_COOKIE: session_id},
    ))
    return response, {name: m.value for name, m in set_cookies(response).items()}


class TestHelpers:
    """Tests for redirect helpers."""

    def test_login_location_encodes_target(self):
        assert login_location("/dashboard/settings") == "/login?redirectTo=%2Fdashboard%2Fsettings"

    @pytest.mark.parametrize("value,expected", [
        ("/dashboard", "/dashboard"),
        ("https://evil.example", "/"),
        ("//evil.example", "/"),
        (None, "/"),
    ])
    def test_safe_return_to(self, value, expected):
        assert safe_return_to(value) == expected


class TestInitiate:
    """Tests for starting a login."""

    @pytest.mark.asyncio
    async def test_redirects_to_discord_with_state(self, auth_flow, make_request, set_cookies, test_db):
        response = await auth_flow.initiate(make_request("/login"))

        location = urlparse(response.headers["location"])
        params = parse_qs(location.query)
        assert response.status_code == 302
        assert location.netloc == "discord.com"
        assert params["client_id"] == ["client-id"]
        assert params["redirect_uri"] == ["http://testserver/discord-oauth"]

        cookies = set_cookies(response)
        record = test_db.read_session(cookies[DB_COOKIE].value)
        assert json.loads(record["data"])["state"] == params["state"][0]

    @pytest.mark.asyncio
    async def test_pending_session_expires_in_an_hour(self, auth_flow, make_request, set_cookies):
        response = await auth_flow.initiate(make_request("/login"))

        cookies = set_cookies(response)
        assert cookies[DB_COOKIE]["max-age"] == "3600"
        assert CLIENT_COOKIE not in cookies

    @pytest.mark.asyncio
    async def test_state_is_random(self, auth_flow, make_request):
        first = await auth_flow.initiate(make_request("/login"))
        second = await auth_flow.initiate(make_request("/login"))
        assert _state_from(first) != _state_from(second)

    @pytest.mark.asyncio
    async def test_remembers_local_return_path(self, auth_flow, make_request, set_cookies, test_db):
        session_id, _ = await _start_login(auth_flow, make_request, set_cookies, "/dashboard")
        data = json.loads(test_db.read_session(session_id)["data"])
        assert data["redirectTo"] == "/dashboard"

    @pytest.mark.asyncio
    async def test_drops_foreign_return_path(self, auth_flow, make_request, set_cookies, test_db):
        session_id, _ = await _start_login(
            auth_flow, make_request, set_cookies, "https://evil.example"
        )
        data = json.loads(test_db.read_session(session_id)["data"])
        assert data["redirectTo"] == "/"


class TestComplete:
    """Tests for the OAuth callback."""

    @pytest.mark.asyncio
    async def test_successful_login(self, auth_flow, make_request, set_cookies, test_db, mock_oauth):
        response, cookies = await _log_in(auth_flow, make_request, set_cookies)

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        mock_oauth.fetch_token.assert_awaited_once_with("the-code", "http://testserver/discord-oauth")

        user = test_db.get_user_by_external_id(DISCORD_USER_ID)
        assert user["email"] == "nelly@example.com"

        # Cookie session holds the user id and nothing else
        payload = jwt.decode(cookies[CLIENT_COOKIE], "test-secret", algorithms=["HS256"])
        assert payload["data"] == {"userId": user["id"]}

        # Database session holds the token and no pending state
        data = json.loads(test_db.read_session(cookies[DB_COOKIE])["data"])
        assert "state" not in data
        assert json.loads(data["discordToken"])["access_token"] == "access-1"

    @pytest.mark.asyncio
    async def test_user_cookie_lasts_a_week(self, auth_flow, make_request, set_cookies):
        session_id, state = await _start_login(auth_flow, make_request, set_cookies)
        response = await auth_flow.complete(make_request(
            "/discord-oauth",
            query=f"code=c&state={state}",
            cookies={DB_COOKIE: session_id},
        ))
        assert set_cookies(response)[CLIENT_COOKIE]["max-age"] == "604800"

    @pytest.mark.asyncio
    async def test_redirects_to_remembered_path(self, auth_flow, make_request, set_cookies):
        response, _ = await _log_in(auth_flow, make_request, set_cookies, return_to="/dashboard")
        assert response.headers["location"] == "/dashboard"

    @pytest.mark.asyncio
    async def test_existing_user_is_reused(self, auth_flow, make_request, set_cookies, test_db):
        existing = test_db.create_user("nelly@example.com", DISCORD_USER_ID)

        _, cookies = await _log_in(auth_flow, make_request, set_cookies)
        await _log_in(auth_flow, make_request, set_cookies)

        payload = jwt.decode(cookies[CLIENT_COOKIE], "test-secret", algorithms=["HS256"])
        assert payload["data"]["userId"] == existing
        assert test_db.count_users() == 1

    @pytest.mark.asyncio
    async def test_state_mismatch_is_unauthorized(
        self, auth_flow, make_request, set_cookies, test_db, mock_oauth
    ):
        session_id, _ = await _start_login(auth_flow, make_request, set_cookies)

        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.complete(make_request(
                "/discord-oauth",
                query="code=c&state=forged",
                cookies={DB_COOKIE: session_id},
            ))

        response = exc_info.value.response
        assert response.status_code == 401
        assert response.headers["location"] == "/login"
        assert set_cookies(response) == {}
        mock_oauth.fetch_token.assert_not_awaited()
        assert test_db.count_users() == 0

    @pytest.mark.asyncio
    async def test_callback_without_pending_login(self, auth_flow, make_request, test_db):
        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.complete(make_request("/discord-oauth", query="code=c&state=s"))

        assert exc_info.value.response.status_code == 401
        assert test_db.count_users() == 0

    @pytest.mark.asyncio
    async def test_callback_without_code(self, auth_flow, make_request, set_cookies, mock_oauth):
        session_id, state = await _start_login(auth_flow, make_request, set_cookies)

        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.complete(make_request(
                "/discord-oauth",
                query=f"error=access_denied&state={state}",
                cookies={DB_COOKIE: session_id},
            ))

        assert exc_info.value.response.status_code == 401
        mock_oauth.fetch_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_discord_failure(self, auth_flow, make_request, set_cookies, mock_oauth):
        mock_oauth.fetch_token.side_effect = OAuthError("Discord returned 400", status=400)

        with pytest.raises(APIError) as exc_info:
            await _log_in(auth_flow, make_request, set_cookies)

        assert exc_info.value.error_code == ErrorCode.AUTH_OAUTH_FAILED
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_user_resolution_failure(
        self, auth_flow, make_request, set_cookies, test_db, monkeypatch
    ):
        monkeypatch.setattr(test_db, "create_user", lambda email, external_id: None)

        with pytest.raises(APIError) as exc_info:
            await _log_in(auth_flow, make_request, set_cookies)

        assert exc_info.value.error_code == ErrorCode.USER_RESOLUTION_FAILED
        assert exc_info.value.status_code == 500
        assert exc_info.value.error_message == "Couldn't find a user or create a new user"


class TestRefresh:
    """Tests for refreshing the stored Discord token."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_token(
        self, auth_flow, make_request, set_cookies, test_db, mock_oauth
    ):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)

        response = await auth_flow.refresh(make_request(
            "/refresh", cookies={DB_COOKIE: cookies[DB_COOKIE]},
        ))

        assert response.status_code == 200
        assert response.body == b"OK"
        old_token = mock_oauth.refresh_token.await_args.args[0]
        assert old_token.refresh_token == "refresh-1"

        data = json.loads(test_db.read_session(cookies[DB_COOKIE])["data"])
        assert json.loads(data["discordToken"])["access_token"] == "access-2"

    @pytest.mark.asyncio
    async def test_refresh_without_token(self, auth_flow, make_request):
        with pytest.raises(APIError) as exc_info:
            await auth_flow.refresh(make_request("/refresh"))

        assert exc_info.value.error_code == ErrorCode.AUTH_MISSING_TOKEN

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, auth_flow, make_request, set_cookies, mock_oauth):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)
        mock_oauth.refresh_token.side_effect = OAuthError("Discord returned 400", status=400)

        with pytest.raises(APIError) as exc_info:
            await auth_flow.refresh(make_request(
                "/refresh", cookies={DB_COOKIE: cookies[DB_COOKIE]},
            ))

        assert exc_info.value.error_code == ErrorCode.AUTH_OAUTH_FAILED


class TestLogout:
    """Tests for logging out."""

    @pytest.mark.asyncio
    async def test_logout_clears_both_sessions(self, auth_flow, make_request, set_cookies, test_db):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)

        response = await auth_flow.logout(make_request("/logout", cookies=cookies))

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        cleared = set_cookies(response)
        assert cleared[CLIENT_COOKIE]["max-age"] == "0"
        assert cleared[DB_COOKIE]["max-age"] == "0"
        assert test_db.read_session(cookies[DB_COOKIE]) is None

    @pytest.mark.asyncio
    async def test_logout_twice(self, auth_flow, make_request, set_cookies):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)

        first = await auth_flow.logout(make_request("/logout", cookies=cookies))
        second = await auth_flow.logout(make_request("/logout", cookies=cookies))

        assert first.status_code == second.status_code == 302
        assert first.headers["location"] == second.headers["location"] == "/"
        assert set(set_cookies(first)) == set(set_cookies(second))

    @pytest.mark.asyncio
    async def test_logout_when_anonymous(self, auth_flow, make_request):
        response = await auth_flow.logout(make_request("/logout"))
        assert response.headers["location"] == "/"


class TestSessionResolution:
    """Tests for require_user_id, require_user and resolve_session."""

    @pytest.mark.asyncio
    async def test_require_user_id_redirects_to_login(self, auth_flow, make_request):
        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.require_user_id(make_request("/dashboard/settings"))

        response = exc_info.value.response
        assert response.status_code == 302
        assert response.headers["location"] == "/login?redirectTo=%2Fdashboard%2Fsettings"

    @pytest.mark.asyncio
    async def test_require_user_id_explicit_target(self, auth_flow, make_request):
        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.require_user_id(make_request("/api"), redirect_to="/home")

        assert exc_info.value.response.headers["location"] == "/login?redirectTo=%2Fhome"

    @pytest.mark.asyncio
    async def test_require_user_id_when_logged_in(self, auth_flow, make_request, set_cookies, test_db):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)

        user_id = await auth_flow.require_user_id(make_request("/", cookies=cookies))
        assert user_id == test_db.get_user_by_external_id(DISCORD_USER_ID)["id"]

    @pytest.mark.asyncio
    async def test_resolve_anonymous(self, auth_flow, make_request):
        assert await auth_flow.resolve_session(make_request("/")) == Anonymous()

    @pytest.mark.asyncio
    async def test_resolve_authenticated(self, auth_flow, make_request, set_cookies):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)

        state = await auth_flow.resolve_session(make_request("/", cookies=cookies))
        assert isinstance(state, Authenticated)
        assert state.user["external_id"] == DISCORD_USER_ID

    @pytest.mark.asyncio
    async def test_resolve_stale(self, auth_flow, make_request, set_cookies, test_db):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)
        user_id = test_db.get_user_by_external_id(DISCORD_USER_ID)["id"]
        test_db.execute("DELETE FROM users WHERE id = ?", (user_id,))

        state = await auth_flow.resolve_session(make_request("/", cookies=cookies))
        assert state == Stale(user_id)

    @pytest.mark.asyncio
    async def test_require_user_logs_out_stale_session(
        self, auth_flow, make_request, set_cookies, test_db
    ):
        _, cookies = await _log_in(auth_flow, make_request, set_cookies)
        test_db.execute("DELETE FROM users")

        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.require_user(make_request("/me", cookies=cookies))

        response = exc_info.value.response
        assert response.headers["location"] == "/"
        assert set_cookies(response)[CLIENT_COOKIE]["max-age"] == "0"
        assert test_db.read_session(cookies[DB_COOKIE]) is None

    @pytest.mark.asyncio
    async def test_require_user_anonymous(self, auth_flow, make_request):
        with pytest.raises(RedirectRequired) as exc_info:
            await auth_flow.require_user(make_request("/me"))

        assert exc_info.value.response.headers["location"] == "/login?redirectTo=%2Fme"
