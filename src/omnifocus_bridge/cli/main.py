# src/omnifocus_bridge/cli/main.py

"""
CLI entrypoint.

Initializes logging, selects the OmniFocus provider once, then starts a front end:
- MCP server over stdio (default),
- interactive console (OFB_FRONTEND=console).
"""

from __future__ import annotations

import asyncio
import logging

from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..providers.selection import resolve_provider
from ..server.mcp_server import build_server

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("mcp").setLevel(logging.WARNING)

    logger.info("Starting %s (frontend=%s)...", settings.app_name, settings.frontend)

    if settings.frontend == "console":
        runner = asyncio.Runner()
        try:
            provider = runner.run(resolve_provider(settings))
            state = AppState(settings=settings, provider=provider, runner=runner)
            run_console_loop(state)
        finally:
            runner.close()
        logger.info("Bye.")
        return

    provider = asyncio.run(resolve_provider(settings))
    server = build_server(provider)
    logger.info("Serving MCP over stdio")
    server.run()


if __name__ == "__main__":
    main()
