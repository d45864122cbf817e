# src/taskdesk/core/errors.py

"""
Error taxonomy shared by the API client, the session holder and the task list.

Callers catch TaskClientError at the call site; the subclasses tell them why:
- NetworkError: the request never completed (connect failure, timeout)
- AuthError: 401, rejected credentials, or a login reply without a token
- ValidationError: rejected locally before any request was sent
- ServerError: any other non-2xx reply, or a reply we could not use
"""

from __future__ import annotations


class TaskClientError(Exception):
    """Base class for every error surfaced to the console."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class NetworkError(TaskClientError):
    pass


class AuthError(TaskClientError):
    pass


class ValidationError(TaskClientError):
    pass


class ServerError(TaskClientError):
    pass


def friendly_error_message(err: Exception) -> str:
    """One-line text for the console; the full error goes to the log."""
    if isinstance(err, NetworkError):
        return f"Server unreachable: {err.message}. Check TASKDESK_API_BASE_URL."
    if isinstance(err, AuthError):
        return f"Authentication failed: {err.message}"
    if isinstance(err, ValidationError):
        return err.message
    if isinstance(err, ServerError):
        return f"Server error: {err}"
    return str(err).strip() or err.__class__.__name__
