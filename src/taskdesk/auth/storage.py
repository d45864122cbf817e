# src/taskdesk/auth/storage.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class FileTokenStorage:
    """
    Session token persisted in a small JSON file, under a fixed key.

    The file behaves like browser local storage: other keys are preserved,
    and removing the token leaves them in place (the file is deleted once empty).
    Writes are atomic (tmp file + os.replace) and the file is kept private.
    """

    def __init__(self, path: str | Path, *, key: str = TOKEN_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Session file %s is unreadable; ignoring it.", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # The token is a credential: keep the file private on disk.
            os.chmod(self._path, 0o600)

    def load(self) -> str | None:
        token = self._read().get(self._key)
        if isinstance(token, str) and token.strip():
            return token
        return None

    def save(self, token: str) -> None:
        data = self._read()
        data[self._key] = token
        self._write(data)
        logger.debug("Session token saved to %s", self._path)

    def clear(self) -> None:
        data = self._read()
        if self._key not in data:
            return
        data.pop(self._key, None)
        if data:
            self._write(data)
        else:
            self._path.unlink(missing_ok=True)
        logger.debug("Session token removed from %s", self._path)
