# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdesk.auth.session import SessionHolder
from taskdesk.cli.bootstrap import create_initial_state
from taskdesk.core.state import AppState
from taskdesk.tasks.task_models import Task

from .fakes import FakeServer, FakeTaskApi, MemoryTokenStorage


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdesk-test",
        log_level="DEBUG",
        api_base_url="http://testserver/api",
        http_connect_timeout=1.0,
        http_read_timeout=1.0,
        data_dir=tmp_path / "data",
        session_path=tmp_path / "data" / "session.json",
    )


@pytest.fixture()
def fake_api() -> FakeTaskApi:
    return FakeTaskApi(
        [
            Task(id="a1", title="Write report", description="Q3 numbers"),
            Task(id="b2", title="Call plumber", completed=True),
            Task(id="c3", title="Buy stamps"),
        ]
    )


@pytest.fixture()
def token_storage() -> MemoryTokenStorage:
    return MemoryTokenStorage()


@pytest.fixture()
def session(fake_api: FakeTaskApi, token_storage: MemoryTokenStorage) -> SessionHolder:
    return SessionHolder(fake_api, token_storage)


@pytest.fixture()
def server() -> FakeServer:
    srv = FakeServer()
    srv.add_user("ann", "ann@example.com", "secret")
    return srv


@pytest.fixture()
def state(settings: SimpleNamespace, server: FakeServer) -> AppState:
    """
    AppState wired exactly like production, with the HTTP layer served by FakeServer.

    NOTE: We keep the real API client, session holder and file storage here
    because their wiring is part of what we want to test.
    """
    return create_initial_state(settings=settings, transport=server.transport())
