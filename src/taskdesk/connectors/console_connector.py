# src/taskdesk/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import LOGIN_HINT, render_task_list
from ..cli.commands import registry as command_registry
from ..core.errors import TaskClientError, friendly_error_message
from ..core.navigation import HOME_PATH, navigate
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Task manager. Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        # Immediate user-visible feedback while a request is in flight.
        print(f"[{_ts_local()}] {text}", flush=True)

    # Landing page: "/" redirects to /tasks, or to /login without a session.
    await navigate(state, HOME_PATH)
    if state.task_list is not None:
        _print_ts(render_task_list(state.task_list))
    else:
        _print_ts(LOGIN_HINT)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, f"{state.location} > ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] {state.location} > {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a shortcut for /add on the task list.
            user_input = f"/add {user_input}" if state.location == "/tasks" else "/help"

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=emit)
        except TaskClientError as e:
            cmd_response = friendly_error_message(e)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            print(f"[{_ts_local()}] {cmd_response}\n")

    logger.info("Console connector finished.")
