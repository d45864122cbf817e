# src/taskdesk/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, cast

from ..core.errors import TaskClientError, friendly_error_message
from ..core.navigation import LOGIN_PATH, TASKS_PATH, navigate
from ..core.state import AppState
from ..tasks.task_list import TaskListController
from ..tasks.task_models import Task, TaskDraft

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

LOGIN_HINT = "Please log in first: /login <email> <password> (or /register)."


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def render_task_list(task_list: TaskListController) -> str:
    lines = [f"Tasks (filter: {task_list.filter.value}):"]
    if not task_list.tasks:
        lines.append("  (no tasks)")
    editing = task_list.editing_task
    for i, t in enumerate(task_list.tasks, start=1):
        mark = "x" if t.completed else " "
        line = f"  {i}. [{mark}] {t.title}"
        if t.description:
            line += f" - {t.description}"
        lines.append(line)
        if editing is not None and editing.id == t.id:
            lines.append(f"     editing: title={editing.title!r} description={editing.description!r}")
    return "\n".join(lines)


def _with_error(task_list: TaskListController, ok: bool, done_text: str) -> str:
    if ok:
        out = f"{done_text}\n{render_task_list(task_list)}"
        if task_list.last_error is not None:
            # mutation went through but the reload did not
            out += f"\n(list may be stale: {friendly_error_message(task_list.last_error)})"
        return out
    err = task_list.last_error
    return friendly_error_message(err) if err is not None else "Operation failed."


def _pick_task(task_list: TaskListController, ref: str) -> Task | None:
    """`ref` is a 1-based position in the displayed list or a task id."""
    if ref.isdigit():
        n = int(ref)
        if 1 <= n <= len(task_list.tasks):
            return task_list.tasks[n - 1]
    return task_list.find(ref)


async def _task_view(state: AppState) -> TaskListController | None:
    """Return the mounted task list, navigating to /tasks (through the gate) if needed."""
    if state.task_list is not None and state.location == TASKS_PATH:
        return state.task_list
    route = await navigate(state, TASKS_PATH)
    if route.path != TASKS_PATH:
        return None
    return state.task_list


# ---- general ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    session = "logged in" if state.session.is_authenticated else "not logged in"
    lines = [
        "Status:",
        f"  Session: {session}",
        f"  Location: {state.location}",
        f"  API: {getattr(state.settings, 'api_base_url', '?')}",
    ]
    if state.task_list is not None:
        lines.append(f"  Filter: {state.task_list.filter.value}")
    return "\n".join(lines)


# ---- auth ----


async def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /login <email> <password>
    """
    if len(args) < 2:
        return "Usage: /login <email> <password>"

    if emit:
        emit("[AUTH] Logging in...")

    try:
        await state.session.login({"email": args[0], "password": args[1]})
    except TaskClientError as e:
        logger.info("Login failed: %s", e)
        return friendly_error_message(e)

    await navigate(state, TASKS_PATH)
    if state.task_list is None:
        return "Logged in."
    return f"Logged in.\n{render_task_list(state.task_list)}"


async def cmd_register(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /register <username> <email> <password>
    """
    if len(args) < 3:
        return "Usage: /register <username> <email> <password>"

    if emit:
        emit("[AUTH] Creating account...")

    try:
        await state.session.register({"username": args[0], "email": args[1], "password": args[2]})
    except TaskClientError as e:
        logger.info("Registration failed: %s", e)
        return friendly_error_message(e)

    await navigate(state, TASKS_PATH)
    if state.task_list is None:
        return "Account created."
    return f"Account created.\n{render_task_list(state.task_list)}"


async def cmd_logout(state: AppState, args: list[str]) -> str:
    state.session.logout()
    await navigate(state, LOGIN_PATH)
    return "Logged out."


async def cmd_profile(state: AppState, args: list[str]) -> str:
    if not state.session.is_authenticated:
        return LOGIN_HINT
    try:
        profile: dict[str, Any] = await state.api.get_profile()
    except TaskClientError as e:
        logger.info("Profile request failed: %s", e)
        return friendly_error_message(e)

    lines = ["Profile:"]
    for key, value in profile.items():
        if key in ("password", "token", "__v"):
            continue
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)


# ---- tasks ----


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    # Always navigates, so an open list is reloaded.
    route = await navigate(state, TASKS_PATH)
    task_list = state.task_list
    if route.path != TASKS_PATH or task_list is None:
        return LOGIN_HINT
    if task_list.last_error is not None:
        return f"{friendly_error_message(task_list.last_error)}\n{render_task_list(task_list)}"
    return render_task_list(task_list)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [| description]
    """
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT

    title, _, description = " ".join(args).partition("|")
    ok = await task_list.create_task(TaskDraft(title=title.strip(), description=description.strip()))
    return _with_error(task_list, ok, "Task added.")


async def cmd_done(state: AppState, args: list[str]) -> str:
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    if not args:
        return "Usage: /done <n>"
    task = _pick_task(task_list, args[0])
    if task is None:
        return f"No task {args[0]!r} in the list."

    ok = await task_list.toggle_complete(task)
    state_text = "reopened" if task.completed else "completed"
    return _with_error(task_list, ok, f"Task {state_text}.")


async def cmd_edit(state: AppState, args: list[str]) -> str:
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    if not args:
        return "Usage: /edit <n>"
    task = _pick_task(task_list, args[0])
    if task is None:
        return f"No task {args[0]!r} in the list."

    task_list.begin_edit(task)
    return (
        f"Editing {task.title!r}. Use /title <text>, /desc <text>, then /save or /cancel.\n"
        f"{render_task_list(task_list)}"
    )


async def _edit_field(state: AppState, field_name: str, value: str) -> str:
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    try:
        draft = task_list.update_edit(**{field_name: value})
    except TaskClientError as e:
        return friendly_error_message(e)
    return f"Draft: title={draft.title!r} description={draft.description!r}"


async def cmd_title(state: AppState, args: list[str]) -> str:
    return await _edit_field(state, "title", " ".join(args))


async def cmd_desc(state: AppState, args: list[str]) -> str:
    return await _edit_field(state, "description", " ".join(args))


async def cmd_save(state: AppState, args: list[str]) -> str:
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    draft = task_list.editing_task
    task = task_list.find(draft.id) if draft is not None else None
    ok = await task_list.save_edit(task)
    return _with_error(task_list, ok, "Task saved.")


async def cmd_cancel(state: AppState, args: list[str]) -> str:
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    task_list.cancel_edit()
    return "Edit cancelled."


async def cmd_delete(state: AppState, args: list[str]) -> str:
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    if not args:
        return "Usage: /delete <n>"
    task = _pick_task(task_list, args[0])
    task_id = task.id if task is not None else args[0]

    ok = await task_list.delete_task(task_id)
    return _with_error(task_list, ok, "Task deleted.")


async def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter                          -> show current filter
    /filter all|completed|incomplete -> switch and reload
    """
    task_list = await _task_view(state)
    if task_list is None:
        return LOGIN_HINT
    if not args:
        return f"Filter is {task_list.filter.value}. Use /filter all|completed|incomplete."

    ok = await task_list.set_filter(args[0])
    return _with_error(task_list, ok, f"Filter set to {task_list.filter.value}.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session, location and filter.")
registry.register("login", cmd_login, help_text="Log in: /login <email> <password>.")
registry.register("register", cmd_register, help_text="Create an account: /register <username> <email> <password>.")
registry.register("logout", cmd_logout, help_text="Log out and forget the saved session.")
registry.register("profile", cmd_profile, help_text="Show your user profile.", aliases=["me"])
registry.register("tasks", cmd_tasks, help_text="Open or reload the task list.", aliases=["ls", "list"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [| description].")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Start editing a task: /edit <n>.")
registry.register("title", cmd_title, help_text="Set the edited task's title.")
registry.register("desc", cmd_desc, help_text="Set the edited task's description.")
registry.register("save", cmd_save, help_text="Save the task being edited.")
registry.register("cancel", cmd_cancel, help_text="Discard the task being edited.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <n>.", aliases=["rm"])
registry.register("filter", cmd_filter, help_text="Filter tasks: /filter all|completed|incomplete.")
