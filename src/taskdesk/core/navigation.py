# src/taskdesk/core/navigation.py

"""
Console routes and the auth gate.

Routes mirror the web client: /login and /register are public, /tasks is
private, / redirects to /tasks. The gate is evaluated on every resolve()
call against the live session token; nothing is cached.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..tasks.task_list import TaskListController

if TYPE_CHECKING:
    from .state import AppState

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
TASKS_PATH = "/tasks"
HOME_PATH = "/"


@dataclass(frozen=True, slots=True)
class Route:
    path: str
    view: str
    private: bool = False
    redirect_to: str | None = None


DEFAULT_ROUTES: dict[str, Route] = {
    LOGIN_PATH: Route(LOGIN_PATH, "login"),
    REGISTER_PATH: Route(REGISTER_PATH, "register"),
    TASKS_PATH: Route(TASKS_PATH, "tasks", private=True),
    HOME_PATH: Route(HOME_PATH, "home", redirect_to=TASKS_PATH),
}


class Router:
    def __init__(
        self,
        token_provider: Callable[[], str | None],
        routes: Mapping[str, Route] | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._routes = dict(routes or DEFAULT_ROUTES)

    def resolve(self, path: str) -> Route:
        """Follow redirects and apply the auth gate; returns the route to show."""
        route = self._routes.get(path) or self._routes[HOME_PATH]
        seen: set[str] = set()
        while True:
            if route.path in seen:
                raise RuntimeError(f"Redirect loop at {route.path}")
            seen.add(route.path)

            if route.redirect_to is not None:
                route = self._routes[route.redirect_to]
                continue
            if route.private and not self._token_provider():
                logger.debug("Route %s requires login; redirecting to %s.", route.path, LOGIN_PATH)
                route = self._routes[LOGIN_PATH]
                continue
            return route


async def navigate(state: AppState, path: str) -> Route:
    """
    Move the console to `path`, mounting/unmounting the task list view.

    Entering /tasks mounts a fresh controller (which refreshes); leaving it
    unmounts the controller so late replies are dropped.
    """
    route = state.router.resolve(path)

    if route.view != "tasks" and state.task_list is not None:
        state.task_list.unmount()
        state.task_list = None

    if route.view == "tasks":
        if state.task_list is None:
            state.task_list = TaskListController(state.api)
            await state.task_list.mount()
        else:
            await state.task_list.refresh()

    if route.path != path:
        logger.info("Navigation %s -> %s", path, route.path)
    state.location = route.path
    return route
