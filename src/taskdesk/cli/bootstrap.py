# src/taskdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the API client, session holder and router into AppState,
- restores a persisted session before the first route is resolved.
"""

from __future__ import annotations

import logging

import httpx

from ..api.client import TaskApiClient
from ..auth.session import SessionHolder
from ..auth.storage import FileTokenStorage
from ..config import get_settings
from ..core.navigation import Router
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easier
    to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    api = TaskApiClient.from_settings(settings, transport=transport)
    session = SessionHolder(api, FileTokenStorage(settings.session_path))
    api.token_provider = session.current_token

    session.restore()

    state = AppState(
        settings=settings,
        api=api,
        session=session,
        router=Router(session.current_token),
    )
    logger.debug("State ready (api=%s, session file=%s)", settings.api_base_url, settings.session_path)
    return state


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if state.task_list is not None:
        state.task_list.unmount()
        state.task_list = None
    try:
        await state.api.aclose()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)
