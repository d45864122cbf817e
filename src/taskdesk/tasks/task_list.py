# src/taskdesk/tasks/task_list.py

"""
Task list controller: the state behind the /tasks view.

Key invariants:
- the server is the source of truth: every successful mutation is followed by
  a full refresh, and no mutation edits the local task sequence directly,
- failures are caught here, logged, stored in `last_error` and never raised;
  the list (and any draft) stays as it was before the failed call,
- at most one task is in edit mode; begin_edit() replaces any previous draft,
- after unmount(), late refresh replies are discarded.

Overlapping calls are not serialized: the last refresh to complete wins.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable

from ..core.errors import TaskClientError, ValidationError
from ..core.ports import TaskApi
from .task_models import EditDraft, Task, TaskDraft, TaskFilter

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[TaskClientError], None]


def _unique_by_id(tasks: Iterable[Task]) -> list[Task]:
    seen: set[str] = set()
    out: list[Task] = []
    for t in tasks:
        if t.id in seen:
            logger.warning("Server returned task id=%s more than once; keeping the first.", t.id)
            continue
        seen.add(t.id)
        out.append(t)
    return out


class TaskListController:
    def __init__(
        self,
        api: TaskApi,
        *,
        task_filter: TaskFilter | str = TaskFilter.ALL,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._api = api
        self._on_error = on_error
        self._tasks: list[Task] = []
        self._detached = False

        self.filter = TaskFilter.parse(task_filter)
        self.new_task_draft = TaskDraft()
        self.editing_task: EditDraft | None = None
        self.last_error: TaskClientError | None = None

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def find(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    # ---- lifecycle ----

    async def mount(self) -> bool:
        self._detached = False
        return await self.refresh()

    def unmount(self) -> None:
        self._detached = True
        self.editing_task = None

    # ---- sync ----

    async def refresh(self, task_filter: TaskFilter | str | None = None) -> bool:
        """Replace the local list with the server's list for the current filter."""
        if task_filter is not None:
            try:
                self.filter = TaskFilter.parse(task_filter)
            except ValidationError as e:
                self._report("refresh", e)
                return False

        requested = self.filter
        try:
            tasks = await self._api.list_tasks(completed=requested.completed_param)
        except TaskClientError as e:
            if self._detached:
                logger.debug("Dropping refresh error for a closed view: %s", e)
                return False
            self._report("refresh", e)
            return False

        if self._detached:
            logger.debug("Discarding task list reply for a closed view (filter=%s).", requested)
            return False

        self._tasks = _unique_by_id(tasks)
        self.last_error = None
        logger.debug("Task list refreshed: %d tasks (filter=%s).", len(self._tasks), requested)
        return True

    async def set_filter(self, task_filter: TaskFilter | str) -> bool:
        try:
            new_filter = TaskFilter.parse(task_filter)
        except ValidationError as e:
            self._report("filter", e)
            return False
        if new_filter == self.filter:
            return True
        return await self.refresh(new_filter)

    # ---- mutations ----

    async def create_task(self, draft: TaskDraft | None = None) -> bool:
        if draft is not None:
            self.new_task_draft = draft

        draft = self.new_task_draft
        if not draft.title.strip():
            self._report("create", ValidationError("Task title is required."))
            return False

        # sent as typed; whitespace only matters for the emptiness check
        try:
            await self._api.create_task(title=draft.title, description=draft.description)
        except TaskClientError as e:
            self._report("create", e)
            return False

        self.new_task_draft = TaskDraft()
        await self.refresh()
        return True

    async def toggle_complete(self, task: Task) -> bool:
        try:
            await self._api.update_task(task.id, {"completed": not task.completed})
        except TaskClientError as e:
            self._report("toggle", e)
            return False

        await self.refresh()
        return True

    async def delete_task(self, task_id: str) -> bool:
        try:
            await self._api.delete_task(task_id)
        except TaskClientError as e:
            self._report("delete", e)
            return False

        await self.refresh()
        return True

    # ---- edit mode ----

    def begin_edit(self, task: Task) -> EditDraft:
        if self.editing_task is not None and self.editing_task.id != task.id:
            logger.debug("Discarding unsaved edit of task id=%s.", self.editing_task.id)
        self.editing_task = EditDraft.from_task(task)
        return self.editing_task

    def update_edit(self, *, title: str | None = None, description: str | None = None) -> EditDraft:
        if self.editing_task is None:
            raise ValidationError("No task is being edited.")
        changes = {}
        if title is not None:
            changes["title"] = title
        if description is not None:
            changes["description"] = description
        self.editing_task = dataclasses.replace(self.editing_task, **changes)
        return self.editing_task

    async def save_edit(self, task: Task | None = None) -> bool:
        draft = self.editing_task
        if draft is None:
            self._report("save", ValidationError("No task is being edited."))
            return False
        if not draft.title.strip():
            self._report("save", ValidationError("Task title is required."))
            return False

        task_id = task.id if task is not None else draft.id
        try:
            await self._api.update_task(task_id, draft.fields())
        except TaskClientError as e:
            self._report("save", e)
            return False

        self.editing_task = None
        await self.refresh()
        return True

    def cancel_edit(self) -> None:
        self.editing_task = None

    # ---- errors ----

    def _report(self, action: str, err: TaskClientError) -> None:
        self.last_error = err
        if isinstance(err, ValidationError):
            logger.info("Task %s rejected: %s", action, err)
        else:
            logger.warning("Task %s failed: %s", action, err)
        if self._on_error is not None:
            self._on_error(err)
