# src/taskdesk/auth/session.py

"""
Auth session holder.

Owns the one piece of process-wide state: the bearer token.
- restore() reads the persisted token once at startup,
- login()/register() replace it only after the server accepted the request,
- logout() clears memory and storage and never raises.

The API client reads the token through current_token() on every request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.errors import AuthError
from ..core.ports import AuthApi, TokenStorage

logger = logging.getLogger(__name__)


def _extract_token(data: Any) -> str:
    token = data.get("token") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise AuthError("Server reply did not contain a session token")
    return token


class SessionHolder:
    def __init__(self, api: AuthApi, storage: TokenStorage) -> None:
        self._api = api
        self._storage = storage
        self._token: str | None = None

    def restore(self) -> str | None:
        """Load a previously persisted session (call once, at startup)."""
        try:
            self._token = self._storage.load()
        except OSError:
            logger.exception("Failed to read the persisted session.")
            self._token = None
        logger.info("Session %s.", "restored" if self._token else "not found; login required")
        return self._token

    def current_token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    async def login(self, credentials: Mapping[str, Any]) -> str:
        """
        Exchange credentials for a token.

        Raises AuthError / NetworkError / ServerError; an existing session is
        left untouched on failure.
        """
        data = await self._api.login(credentials)
        token = _extract_token(data)
        self._set_token(token)
        logger.info("Logged in.")
        return token

    async def register(self, user_data: Mapping[str, Any]) -> str:
        """Create an account; same contract as login()."""
        data = await self._api.register(user_data)
        token = _extract_token(data)
        self._set_token(token)
        logger.info("Registered and logged in.")
        return token

    def logout(self) -> None:
        self._token = None
        try:
            self._storage.clear()
        except OSError:
            logger.exception("Failed to remove the persisted session.")
        logger.info("Logged out.")

    def _set_token(self, token: str) -> None:
        self._token = token
        try:
            self._storage.save(token)
        except OSError:
            # Session still works for this run; it just won't survive a restart.
            logger.exception("Failed to persist the session token.")
