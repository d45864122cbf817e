# tests/fakes.py

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import unquote

import httpx

from taskdesk.core.errors import AuthError, ServerError, TaskClientError
from taskdesk.tasks.task_models import Task


class MemoryTokenStorage:
    """In-memory TokenStorage; `fail_writes` simulates an unwritable disk."""

    def __init__(self, token: str | None = None) -> None:
        self.token = token
        self.fail_writes = False
        self.loads = 0

    def load(self) -> str | None:
        self.loads += 1
        return self.token

    def save(self, token: str) -> None:
        if self.fail_writes:
            raise OSError("read-only")
        self.token = token

    def clear(self) -> None:
        if self.fail_writes:
            raise OSError("read-only")
        self.token = None


class FakeTaskApi:
    """
    In-process AuthApi + TaskApi used by unit tests.

    - Captures calls for assertions
    - `fail[method_name] = error` makes that method raise until removed
    - Unknown ids raise ServerError(404), like the real backend
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks: dict[str, Task] = {t.id: t for t in tasks or []}
        self.calls: list[tuple[str, Any]] = []
        self.fail: dict[str, TaskClientError] = {}
        self.valid_credentials = {"email": "ann@example.com", "password": "secret"}
        self.token = "tok-ann"
        self._next_id = 100

    def _enter(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        err = self.fail.get(name)
        if err is not None:
            raise err

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    # ---- auth ----

    async def login(self, credentials: Mapping[str, Any]) -> dict[str, Any]:
        self._enter("login", dict(credentials))
        if dict(credentials) != self.valid_credentials:
            raise AuthError("Invalid credentials", status_code=401)
        return {"token": self.token}

    async def register(self, user_data: Mapping[str, Any]) -> dict[str, Any]:
        self._enter("register", dict(user_data))
        return {"token": f"tok-{user_data.get('username', 'new')}"}

    async def get_profile(self) -> dict[str, Any]:
        self._enter("get_profile")
        return {"username": "ann", "email": "ann@example.com"}

    # ---- tasks ----

    async def list_tasks(self, *, completed: bool | None = None) -> list[Task]:
        self._enter("list_tasks", completed)
        return [t for t in self.tasks.values() if completed is None or t.completed == completed]

    async def create_task(self, *, title: str, description: str = "") -> Task:
        self._enter("create_task", {"title": title, "description": description})
        self._next_id += 1
        task = Task(id=f"t{self._next_id}", title=title, description=description)
        self.tasks[task.id] = task
        return task

    async def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Task:
        self._enter("update_task", (task_id, dict(fields)))
        if task_id not in self.tasks:
            raise ServerError("Task not found", status_code=404)
        task = replace(self.tasks[task_id], **dict(fields))
        self.tasks[task_id] = task
        return task

    async def delete_task(self, task_id: str) -> None:
        self._enter("delete_task", task_id)
        if task_id not in self.tasks:
            raise ServerError("Task not found", status_code=404)
        del self.tasks[task_id]


@dataclass(slots=True)
class FakeServer:
    """
    In-memory HTTP backend behind httpx.MockTransport.

    Mirrors the real API under /api: users/register, users/login,
    users/profile and the /tasks CRUD routes, with bearer-token auth.
    """

    users: dict[str, dict[str, str]] = field(default_factory=dict)
    sessions: dict[str, str] = field(default_factory=dict)
    tasks: dict[str, dict[str, Any]] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)
    _seq: int = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add_user(self, username: str, email: str, password: str) -> None:
        self.users[email] = {"username": username, "email": email, "password": password}

    def paths(self, method: str | None = None) -> list[str]:
        return [r.url.path for r in self.requests if method is None or r.method == method]

    # ---- helpers ----

    def _issue_token(self, email: str) -> str:
        self._seq += 1
        token = f"token-{self._seq}"
        self.sessions[token] = email
        return token

    def _user(self, request: httpx.Request) -> str | None:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.sessions.get(header[len("Bearer "):])

    @staticmethod
    def _json(status: int, body: Any) -> httpx.Response:
        return httpx.Response(status, json=body)

    # ---- routing ----

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        body = json.loads(request.content) if request.content else {}

        if path == "/api/users/register" and request.method == "POST":
            email = body.get("email", "")
            if not email or not body.get("password") or email in self.users:
                return self._json(400, {"message": "User already exists or data is invalid"})
            self.add_user(body.get("username", ""), email, body["password"])
            return self._json(201, {"token": self._issue_token(email), "email": email})

        if path == "/api/users/login" and request.method == "POST":
            user = self.users.get(body.get("email", ""))
            if user is None or user["password"] != body.get("password"):
                return self._json(401, {"message": "Invalid credentials"})
            return self._json(200, {"token": self._issue_token(user["email"])})

        owner = self._user(request)
        if owner is None:
            return self._json(401, {"message": "Not authorized, no token"})

        if path == "/api/users/profile" and request.method == "GET":
            user = self.users[owner]
            return self._json(200, {"username": user["username"], "email": user["email"]})

        if path == "/api/tasks":
            if request.method == "GET":
                completed = request.url.params.get("completed")
                items = [t for t in self.tasks.values() if t["owner"] == owner]
                if completed is not None:
                    items = [t for t in items if t["completed"] == (completed == "true")]
                return self._json(200, [self._public(t) for t in items])
            if request.method == "POST":
                if not str(body.get("title", "")).strip():
                    return self._json(400, {"message": "Title is required"})
                self._seq += 1
                task = {
                    "_id": f"64f{self._seq:05d}",
                    "title": body["title"],
                    "description": body.get("description", ""),
                    "completed": False,
                    "owner": owner,
                }
                self.tasks[task["_id"]] = task
                return self._json(201, self._public(task))

        if path.startswith("/api/tasks/"):
            task_id = unquote(path[len("/api/tasks/"):])
            task = self.tasks.get(task_id)
            if task is None or task["owner"] != owner:
                return self._json(404, {"message": "Task not found"})
            if request.method == "PATCH":
                for key in ("title", "description", "completed"):
                    if key in body:
                        task[key] = body[key]
                return self._json(200, self._public(task))
            if request.method == "DELETE":
                del self.tasks[task_id]
                return self._json(200, {"message": "Task removed"})

        return self._json(404, {"message": f"No route for {request.method} {path}"})

    @staticmethod
    def _public(task: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in task.items() if k != "owner"}
