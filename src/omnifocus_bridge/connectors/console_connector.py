# src/omnifocus_bridge/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import BridgeError
from ..server.mcp_server import sanitize_error_message

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (version=%s).", state.provider.version.value)
    _print_ts("[CONSOLE] Manage OmniFocus tasks. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
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

        try:
            reply = command_registry.handle(state, user_input)
        except (BridgeError, ValidationError, ValueError) as e:
            logger.info("Command failed: %s", e)
            reply = f"Error: {sanitize_error_message(e)}"
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list available commands."
        _print_ts(reply)

    logger.info("Console connector finished.")
