# src/taskdesk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the session holder and the task list.

Both depend on Protocols instead of the concrete HTTP client.
This keeps the transport swappable and makes testing easier.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from ..tasks.task_models import Task


class AuthApi(Protocol):
    """Account endpoints. Replies are the decoded JSON bodies."""

    async def login(self, credentials: Mapping[str, Any]) -> dict[str, Any]: ...
    async def register(self, user_data: Mapping[str, Any]) -> dict[str, Any]: ...
    async def get_profile(self) -> dict[str, Any]: ...


class TaskApi(Protocol):
    """
    Task endpoints.

    `completed=None` lists every task; True/False scope the list.
    """

    async def list_tasks(self, *, completed: bool | None = None) -> list[Task]: ...
    async def create_task(self, *, title: str, description: str = "") -> Task | None: ...
    async def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Task | None: ...
    async def delete_task(self, task_id: str) -> None: ...


class TokenStorage(Protocol):
    """Durable client-side storage for the session token."""

    def load(self) -> str | None: ...
    def save(self, token: str) -> None: ...
    def clear(self) -> None: ...
