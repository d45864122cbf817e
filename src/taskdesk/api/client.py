# src/taskdesk/api/client.py

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import AuthError, NetworkError, ServerError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


class BearerTokenAuth(httpx.Auth):
    """
    Attach `Authorization: Bearer <token>` to every request when a token is present.

    The token is read through the provider on each request, so login/logout
    take effect immediately without rebuilding the client.
    """

    def __init__(self, token_provider: TokenProvider | None) -> None:
        self.token_provider = token_provider

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self.token_provider() if self.token_provider is not None else None
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort human message from an error reply."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    text = response.text.strip()
    if text and len(text) <= 200:
        return text
    return response.reason_phrase or "request failed"


def _task_or_none(data: Any) -> Task | None:
    """Mutation replies echo the task; the mutation itself succeeded either way."""
    if isinstance(data, dict) and ("_id" in data or "id" in data):
        return Task.from_api(data)
    logger.debug("API mutation reply carried no task payload")
    return None


class TaskApiClient:
    """
    Async client for the task API (`/users/*`, `/tasks*`).

    - one httpx.AsyncClient per process; close it with aclose()
    - no automatic retries anywhere
    - every failure is raised as a TaskClientError subclass
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider | None = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth = BearerTokenAuth(token_provider)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=self._auth,
            timeout=_make_timeout(connect_timeout, read_timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings, **kwargs: Any) -> TaskApiClient:
        return cls(
            str(settings.api_base_url),
            connect_timeout=float(getattr(settings, "http_connect_timeout", 5.0)),
            read_timeout=float(getattr(settings, "http_read_timeout", 15.0)),
            **kwargs,
        )

    @property
    def token_provider(self) -> TokenProvider | None:
        return self._auth.token_provider

    @token_provider.setter
    def token_provider(self, provider: TokenProvider | None) -> None:
        self._auth.token_provider = provider

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level ----

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, str] | None = None,
        auth_endpoint: bool = False,
    ) -> Any:
        logger.debug("API %s %s params=%s", method, path, dict(params or {}))
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.DecodingError as e:
            logger.debug("API %s %s undecodable body", method, path, exc_info=True)
            raise ServerError(f"{method} {path}: response body could not be decoded") from e
        except httpx.RequestError as e:
            # TransportError, TooManyRedirects, ...
            logger.debug("API %s %s request error", method, path, exc_info=True)
            raise NetworkError(f"{method} {path}: {e.__class__.__name__}") from e

        status = response.status_code
        if status == 401 or (auth_endpoint and 400 <= status < 500):
            raise AuthError(_error_detail(response), status_code=status)
        if not response.is_success:
            raise ServerError(_error_detail(response), status_code=status)

        logger.debug("API %s %s -> %s", method, path, status)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Plain-text acks ("OK") are fine for endpoints whose body we ignore.
            return response.text

    # ---- users ----

    async def register(self, user_data: Mapping[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "/users/register", json=dict(user_data), auth_endpoint=True)
        return data if isinstance(data, dict) else {}

    async def login(self, credentials: Mapping[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "/users/login", json=dict(credentials), auth_endpoint=True)
        return data if isinstance(data, dict) else {}

    async def get_profile(self) -> dict[str, Any]:
        data = await self._request("GET", "/users/profile")
        if not isinstance(data, dict):
            raise ServerError("Unexpected profile payload")
        return data

    # ---- tasks ----

    async def list_tasks(self, *, completed: bool | None = None) -> list[Task]:
        params = {} if completed is None else {"completed": "true" if completed else "false"}
        data = await self._request("GET", "/tasks", params=params)

        if isinstance(data, dict) and isinstance(data.get("tasks"), list):
            data = data["tasks"]
        if not isinstance(data, list):
            raise ServerError("Unexpected task list payload")
        return [Task.from_api(item) for item in data]

    async def create_task(self, *, title: str, description: str = "") -> Task | None:
        data = await self._request("POST", "/tasks", json={"title": title, "description": description})
        return _task_or_none(data)

    async def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Task | None:
        data = await self._request("PATCH", f"/tasks/{quote(str(task_id), safe='')}", json=dict(fields))
        return _task_or_none(data)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{quote(str(task_id), safe='')}")
