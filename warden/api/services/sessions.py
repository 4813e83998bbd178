"""
Warden - Session Storage
========================

Cookie-backed and database-backed session storages.

DESIGN:
    Both storages expose the same three coroutines:

        get_session(cookies)               -> Session
        commit_session(session, max_age)   -> SetCookie
        destroy_session(session)           -> SetCookie

    CookieSessionStorage keeps the whole session in the cookie, signed as
    an HS256 JWT. DatabaseSessionStorage keeps only the row id in the
    cookie and the data in the sessions table.

    Storages are built once at startup (see warden.api.app) and handed to
    the request handlers through app.state.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from starlette.responses import Response

from warden.core.logger import logger
from warden.core.database import DatabaseManager


# =============================================================================
# Session
# =============================================================================

class Session:
    """Mutable key/value session loaded from one of the storages."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, id: Optional[str] = None) -> None:
        self.id = id
        self._data: Dict[str, Any] = dict(data or {})

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self._data)

    def has(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def unset(self, key: str) -> None:
        self._data.pop(key, None)

    def __repr__(self) -> str:
        return f"Session(id={self.id!r}, keys={sorted(self._data)})"


# =============================================================================
# Cookies
# =============================================================================

@dataclass(frozen=True)
class CookieOptions:
    """Attributes shared by every Set-Cookie a storage emits."""

    name: str
    path: str = "/"
    httponly: bool = True
    samesite: str = "lax"
    secure: bool = False


@dataclass(frozen=True)
class SetCookie:
    """A pending Set-Cookie header, applied to a response with apply()."""

    options: CookieOptions
    value: str = ""
    max_age: Optional[int] = None
    delete: bool = False

    def apply(self, response: Response) -> None:
        """Write this cookie onto a Starlette response."""
        if self.delete:
            response.delete_cookie(
                self.options.name,
                path=self.options.path,
                secure=self.options.secure,
                httponly=self.options.httponly,
                samesite=self.options.samesite,
            )
            return

        response.set_cookie(
            self.options.name,
            self.value,
            max_age=self.max_age,
            path=self.options.path,
            secure=self.options.secure,
            httponly=self.options.httponly,
            samesite=self.options.samesite,
        )


# =============================================================================
# Cookie Session Storage
# =============================================================================

class CookieSessionStorage:
    """
    Session stored entirely in a signed cookie.

    DESIGN:
        The cookie value is a JWT whose "data" claim is the session dict.
        The first secret signs; every secret is tried when verifying so a
        new secret can be put in front without logging everybody out.
        A tampered, expired or unreadable cookie gives an empty session.
    """

    ALGORITHM = "HS256"

    def __init__(self, options: CookieOptions, secrets: List[str]) -> None:
        if not secrets:
            raise ValueError("CookieSessionStorage requires at least one secret")
        self.options = options
        self._secrets = list(secrets)

    async def get_session(self, cookies: Mapping[str, str]) -> Session:
        value = cookies.get(self.options.name)
        if not value:
            return Session()

        for secret in self._secrets:
            try:
                payload = jwt.decode(value, secret, algorithms=[self.ALGORITHM])
            except ExpiredSignatureError:
                logger.debug("Cookie Session Expired", [("Cookie", self.options.name)])
                return Session()
            except InvalidTokenError:
                continue
            data = payload.get("data")
            return Session(data if isinstance(data, dict) else {})

        logger.warning("Cookie Session Signature Invalid", [
            ("Cookie", self.options.name),
        ])
        return Session()

    async def commit_session(self, session: Session, max_age: Optional[int] = None) -> SetCookie:
        payload: Dict[str, Any] = {"data": session.data}
        if max_age:
            payload["exp"] = int(time.time()) + max_age
        value = jwt.encode(payload, self._secrets[0], algorithm=self.ALGORITHM)
        return SetCookie(self.options, value=value, max_age=max_age)

    async def destroy_session(self, session: Session) -> SetCookie:
        return SetCookie(self.options, delete=True)


# =============================================================================
# Database Session Storage
# =============================================================================

class DatabaseSessionStorage:
    """
    Session stored in the sessions table, referenced by id from a cookie.

    DESIGN:
        The first commit of a session creates its row; later commits
        update it. Reading does not check the stored expiry.
    """

    def __init__(self, options: CookieOptions, db: DatabaseManager) -> None:
        self.options = options
        self._db = db

    async def get_session(self, cookies: Mapping[str, str]) -> Session:
        session_id = cookies.get(self.options.name)
        if not session_id:
            return Session()

        record = self._db.read_session(session_id)
        if record is None:
            return Session()

        try:
            data = json.loads(record["data"]) if record["data"] else {}
        except json.JSONDecodeError:
            logger.warning("Corrupted Session Data", [
                ("Session ID", session_id),
            ])
            data = {}

        return Session(data if isinstance(data, dict) else {}, id=session_id)

    async def commit_session(self, session: Session, max_age: Optional[int] = None) -> SetCookie:
        expires = None
        if max_age:
            expires = datetime.now(timezone.utc) + timedelta(seconds=max_age)

        if session.id:
            self._db.update_session(session.id, session.data, expires)
        else:
            session.id = self._db.create_session(session.data, expires)

        return SetCookie(self.options, value=session.id, max_age=max_age)

    async def destroy_session(self, session: Session) -> SetCookie:
        if session.id:
            self._db.delete_session(session.id)
        return SetCookie(self.options, delete=True)


__all__ = [
    "Session",
    "CookieOptions",
    "SetCookie",
    "CookieSessionStorage",
    "DatabaseSessionStorage",
]
