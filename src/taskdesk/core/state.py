# src/taskdesk/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..api.client import TaskApiClient
from ..auth.session import SessionHolder
from ..tasks.task_list import TaskListController
from .navigation import Router


@dataclass
class AppState:
    """
    Everything the console needs, wired once by the composition root.

    `session` is the only process-wide mutable state that outlives a view;
    `task_list` exists only while the /tasks route is mounted.
    """

    settings: Any
    api: TaskApiClient
    session: SessionHolder
    router: Router

    location: str = "/"
    task_list: TaskListController | None = None
