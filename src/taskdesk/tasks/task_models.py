# src/taskdesk/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.errors import ServerError, ValidationError


class TaskFilter(StrEnum):
    """Which subset of tasks the list shows. Client-local, never persisted."""

    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"

    @property
    def completed_param(self) -> bool | None:
        """Value of the `completed` query parameter; None means "omit it"."""
        if self is TaskFilter.ALL:
            return None
        return self is TaskFilter.COMPLETED

    @classmethod
    def parse(cls, raw: str | TaskFilter) -> TaskFilter:
        if isinstance(raw, TaskFilter):
            return raw
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValidationError(f"Unknown filter {raw!r}. Use one of: {choices}.") from None


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    description: str = ""
    completed: bool = False

    @classmethod
    def from_api(cls, data: Any) -> Task:
        """
        Build a Task from an API payload.

        The backend sends its primary key as `_id`; `id` is accepted too.
        """
        if not isinstance(data, dict):
            raise ServerError(f"Unexpected task payload: {type(data).__name__}")

        raw_id = data.get("_id", data.get("id"))
        if raw_id is None or str(raw_id) == "":
            raise ServerError("Task payload has no id")

        description = data.get("description")
        return cls(
            id=str(raw_id),
            title=str(data.get("title") or ""),
            description="" if description is None else str(description),
            completed=_parse_completed(data.get("completed")),
        )


def _parse_completed(raw: Any) -> bool:
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ServerError(f"Task payload has an unusable 'completed' value: {raw!r}")


@dataclass(slots=True)
class TaskDraft:
    """Fields of the "new task" form."""

    title: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class EditDraft:
    """Working copy of a task being edited, separate from the list entry."""

    id: str
    title: str
    description: str

    @classmethod
    def from_task(cls, task: Task) -> EditDraft:
        return cls(id=task.id, title=task.title, description=task.description)

    def fields(self) -> dict[str, str]:
        return {"title": self.title, "description": self.description}
