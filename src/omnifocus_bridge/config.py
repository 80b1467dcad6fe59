# src/omnifocus_bridge/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing touches OmniFocus at import time.
- Bad values fall back to defaults instead of failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import DEFAULT_TASK_LIMIT, MAX_TASK_LIMIT, MIN_TASK_LIMIT

ENV_PREFIX = "OFB"

DEFAULT_DATABASE_PATH = Path(
    "~/Library/Group Containers/34YW5XSRB7.com.omnigroup.OmniFocus/"
    "com.omnigroup.OmniFocus4/com.omnigroup.OmniFocusModel/OmniFocusDatabase.db"
)

FRONTENDS = {"mcp", "console"}
PROVIDER_CHOICES = {"auto", "pro", "standard"}

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_choice(name: str, default: str, choices: set[str]) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default.expanduser()
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Front end ----
    frontend: str

    # ---- OmniFocus access ----
    provider: str
    osascript_bin: str
    open_bin: str
    database_path: Path
    detection_timeout_seconds: float

    # ---- Initial provider config (Standard edition) ----
    direct_sql_access: bool
    task_limit: int

    @staticmethod
    def from_env() -> "Settings":
        task_limit = _env_int(_k("TASK_LIMIT"), DEFAULT_TASK_LIMIT)
        task_limit = max(MIN_TASK_LIMIT, min(MAX_TASK_LIMIT, task_limit))

        return Settings(
            app_name=_env(_k("APP_NAME"), "omnifocus-bridge") or "omnifocus-bridge",
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=_env_path(_k("DATA_DIR"), Path(".local/omnifocus-bridge")),
            frontend=_env_choice(_k("FRONTEND"), "mcp", FRONTENDS),
            provider=_env_choice(_k("PROVIDER"), "auto", PROVIDER_CHOICES),
            osascript_bin=_env(_k("OSASCRIPT_BIN"), "osascript") or "osascript",
            open_bin=_env(_k("OPEN_BIN"), "open") or "open",
            database_path=_env_path(_k("DATABASE_PATH"), DEFAULT_DATABASE_PATH),
            detection_timeout_seconds=max(0.1, _env_float(_k("DETECTION_TIMEOUT_SECONDS"), 5.0)),
            direct_sql_access=_env_bool(_k("DIRECT_SQL_ACCESS"), True),
            task_limit=task_limit,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
