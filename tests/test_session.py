# tests/test_session.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskdesk.auth.session import SessionHolder
from taskdesk.auth.storage import FileTokenStorage
from taskdesk.core.errors import AuthError, NetworkError

from .fakes import FakeTaskApi, MemoryTokenStorage

GOOD = {"email": "ann@example.com", "password": "secret"}


@pytest.mark.asyncio
async def test_login_stores_and_persists_token(session: SessionHolder, token_storage: MemoryTokenStorage) -> None:
    assert session.current_token() is None

    token = await session.login(GOOD)

    assert token == "tok-ann"
    assert session.current_token() == "tok-ann"
    assert token_storage.token == "tok-ann"


@pytest.mark.asyncio
async def test_failed_login_keeps_existing_session(
    fake_api: FakeTaskApi, token_storage: MemoryTokenStorage
) -> None:
    token_storage.token = "old"
    session = SessionHolder(fake_api, token_storage)
    session.restore()

    with pytest.raises(AuthError):
        await session.login({"email": "ann@example.com", "password": "wrong"})
    assert session.current_token() == "old"
    assert token_storage.token == "old"

    fake_api.fail["login"] = NetworkError("unreachable")
    with pytest.raises(NetworkError):
        await session.login(GOOD)
    assert session.current_token() == "old"


@pytest.mark.asyncio
async def test_reply_without_token_is_auth_error(session: SessionHolder, fake_api: FakeTaskApi) -> None:
    async def tokenless(credentials):
        return {"user": "ann"}

    fake_api.login = tokenless  # type: ignore[method-assign]
    with pytest.raises(AuthError):
        await session.login(GOOD)
    assert session.current_token() is None


@pytest.mark.asyncio
async def test_register_logs_in(session: SessionHolder, token_storage: MemoryTokenStorage) -> None:
    token = await session.register({"username": "bob", "email": "bob@example.com", "password": "pw"})
    assert token == "tok-bob"
    assert session.is_authenticated
    assert token_storage.token == "tok-bob"


@pytest.mark.asyncio
async def test_logout_clears_memory_and_storage(session: SessionHolder, token_storage: MemoryTokenStorage) -> None:
    await session.login(GOOD)
    session.logout()
    assert session.current_token() is None
    assert token_storage.token is None


@pytest.mark.asyncio
async def test_storage_failures_never_break_the_session(
    session: SessionHolder, token_storage: MemoryTokenStorage
) -> None:
    token_storage.fail_writes = True

    await session.login(GOOD)
    assert session.current_token() == "tok-ann"

    session.logout()
    assert session.current_token() is None


def test_restore_reads_storage_once(fake_api: FakeTaskApi) -> None:
    storage = MemoryTokenStorage("saved")
    session = SessionHolder(fake_api, storage)
    assert session.restore() == "saved"
    assert session.current_token() == "saved"
    assert session.current_token() == "saved"
    assert storage.loads == 1


def test_file_storage_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "session.json"
    storage = FileTokenStorage(path)
    assert storage.load() is None

    storage.save("abc")
    assert json.loads(path.read_text("utf-8")) == {"token": "abc"}
    assert FileTokenStorage(path).load() == "abc"

    storage.clear()
    assert not path.exists()
    assert storage.load() is None


def test_file_storage_clear_keeps_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"token": "abc", "theme": "dark"}), "utf-8")

    FileTokenStorage(path).clear()

    assert json.loads(path.read_text("utf-8")) == {"theme": "dark"}


def test_file_storage_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", "utf-8")
    assert FileTokenStorage(path).load() is None
