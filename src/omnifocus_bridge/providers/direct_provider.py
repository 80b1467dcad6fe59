# src/omnifocus_bridge/providers/direct_provider.py

"""
OmniFocus Standard provider (no AppleScript).

- create: `omnifocus:///add?...` URL handed to the OS; OmniFocus validates and saves it
- read/update/complete: direct SQLite access to the OmniFocus database

Writes to the database are gated by ProviderConfig.direct_sql_access. OmniFocus keeps its
model in memory and does not watch the file, so direct writes only become visible after
OmniFocus restarts.

Thread-safety:
- each call opens its own SQLite connection and closes it on every exit path
- SQLite work runs in a worker thread so the event loop is never blocked
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode

from ..core.ports import UrlOpener
from ..errors import DatabaseUnavailableError, TaskNotFoundError
from ..tasks.epoch import datetime_to_storage, local_day_bounds, parse_due_date, storage_to_datetime
from ..tasks.task_models import (
    CreateResult,
    CreateTaskInput,
    ProviderConfig,
    ProviderVersion,
    Task,
    TaskFilter,
    UpdateTaskInput,
    WriteResult,
)

logger = logging.getLogger(__name__)

URL_SCHEME_ADD = "omnifocus:///add"

CREATE_WARNING = "Task created via URL scheme. It will sync automatically."
RESTART_WARNING = (
    "Task {action} via SQLite. Changes won't sync until OmniFocus is restarted. "
    "Consider using OmniFocus Pro for full sync support."
)
ACCESS_DISABLED_WARNING = (
    "Direct SQLite write access is disabled. Enable it with omnifocus_set_config "
    "(directSqlAccess=true), or use OmniFocus Pro for AppleScript-based updates."
)

# Task row -> containing project's display name goes through ProjectInfo.
_SELECT_TASKS = """
    SELECT
        t.persistentIdentifier AS id,
        t.name AS name,
        t.plainTextNote AS note,
        t.flagged AS flagged,
        t.dateDue AS due,
        p.name AS project
    FROM Task t
    LEFT JOIN ProjectInfo pi ON t.containingProjectInfo = pi.pk
    LEFT JOIN Task p ON pi.task = p.persistentIdentifier
    WHERE {where}
    ORDER BY t.dateDue IS NULL, t.dateDue ASC, t.flagged DESC
    LIMIT ?
"""

_SELECT_PROJECTS = """
    SELECT t.name AS name
    FROM Task t
    JOIN ProjectInfo pi ON t.persistentIdentifier = pi.task
    ORDER BY t.name
"""

# field in UpdateTaskInput.changes() -> column
_UPDATE_COLUMNS = {
    "name": "name",
    "note": "plainTextNote",
    "flagged": "flagged",
    "due_date": "dateDue",
}


def build_task_filter(task_filter: TaskFilter | None, today: date) -> tuple[str, list[Any]]:
    """WHERE predicate + params for open tasks matching `task_filter` on local day `today`."""
    start, end = local_day_bounds(today)
    clauses = ["t.dateCompleted IS NULL"]
    params: list[Any] = []

    if task_filter == TaskFilter.FLAGGED:
        clauses.append("t.flagged = 1")
    elif task_filter == TaskFilter.DUE_TODAY:
        clauses.append("t.dateDue >= ? AND t.dateDue < ?")
        params.extend([start, end])
    else:
        clauses.append("(t.flagged = 1 OR t.dateDue < ?)")
        params.append(end)

    return " AND ".join(clauses), params


def build_update_statement(data: UpdateTaskInput) -> tuple[str, list[Any]] | None:
    """One SET clause per present field; None when there is nothing to change."""
    fields: list[str] = []
    params: list[Any] = []

    for key, value in data.changes().items():
        fields.append(f"{_UPDATE_COLUMNS[key]} = ?")
        if key == "flagged":
            params.append(1 if value else 0)
        elif key == "due_date":
            params.append(datetime_to_storage(parse_due_date(value)))
        else:
            params.append(value)

    if not fields:
        return None

    params.append(data.task_id)
    return f"UPDATE Task SET {', '.join(fields)} WHERE persistentIdentifier = ?", params


def build_add_url(data: CreateTaskInput) -> str:
    params: dict[str, str] = {"name": data.name, "autosave": "true"}
    if data.note:
        params["note"] = data.note
    if data.flagged:
        params["flag"] = "true"
    if data.due_date:
        params["due"] = data.due_date
    if data.project:
        params["project"] = data.project
    return f"{URL_SCHEME_ADD}?{urlencode(params, quote_via=quote)}"


class DirectAccessProvider:
    """Restricted provider: URL scheme for creation, SQLite for everything else."""

    def __init__(
        self,
        db_path: str | Path,
        opener: UrlOpener,
        config: ProviderConfig | None = None,
    ) -> None:
        self._db_path = Path(db_path).expanduser()
        self._opener = opener
        self._config = config or ProviderConfig()
        self._config_lock = threading.Lock()

    @property
    def version(self) -> ProviderVersion:
        return ProviderVersion.STANDARD

    @property
    def config(self) -> ProviderConfig:
        with self._config_lock:
            return self._config

    def set_config(
        self,
        *,
        direct_sql_access: bool | None = None,
        task_limit: int | None = None,
    ) -> ProviderConfig:
        with self._config_lock:
            self._config = self._config.with_updates(
                direct_sql_access=direct_sql_access, task_limit=task_limit
            )
            logger.info(
                "Config updated direct_sql_access=%s task_limit=%s",
                self._config.direct_sql_access,
                self._config.task_limit,
            )
            return self._config

    # ---- low-level helpers ----

    def _get_conn(self, *, readonly: bool) -> sqlite3.Connection:
        if not self._db_path.exists():
            raise DatabaseUnavailableError(f"OmniFocus database not found at {self._db_path}")
        mode = "ro" if readonly else "rw"
        conn = sqlite3.connect(f"{self._db_path.resolve().as_uri()}?mode={mode}", uri=True, timeout=30.0)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        due = row["due"]
        return Task(
            id=str(row["id"]),
            name=str(row["name"] or ""),
            note=row["note"] or None,
            project=row["project"] or None,
            flagged=bool(row["flagged"]),
            due_date=storage_to_datetime(due).isoformat(timespec="seconds") if due is not None else None,
            completed=False,
        )

    def _query_tasks(self, task_filter: TaskFilter | None, limit: int, today: date) -> list[Task]:
        where, params = build_task_filter(task_filter, today)
        conn = self._get_conn(readonly=True)
        try:
            cur = conn.cursor()
            cur.execute(_SELECT_TASKS.format(where=where), (*params, int(limit)))
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def _query_projects(self) -> list[str]:
        conn = self._get_conn(readonly=True)
        try:
            cur = conn.cursor()
            cur.execute(_SELECT_PROJECTS)
            return [str(r["name"]) for r in cur.fetchall()]
        finally:
            conn.close()

    def _execute_write(self, sql: str, params: list[Any], task_id: str) -> None:
        conn = self._get_conn(readonly=False)
        try:
            cur = conn.execute(sql, params)
            if cur.rowcount == 0:
                conn.rollback()
                raise TaskNotFoundError(task_id)
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    async def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        limit = self.config.task_limit
        logger.debug("get_tasks filter=%s limit=%s db=%s", task_filter, limit, self._db_path)
        return await asyncio.to_thread(self._query_tasks, task_filter, limit, date.today())

    async def create_task(self, data: CreateTaskInput) -> CreateResult:
        await self._opener.open_url(build_add_url(data))
        logger.info("Task handed to OmniFocus via URL scheme project=%s", data.project or "<inbox>")
        return CreateResult(success=True, warning=CREATE_WARNING)

    async def update_task(self, data: UpdateTaskInput) -> WriteResult:
        if not self.config.direct_sql_access:
            logger.info("update_task rejected: direct SQL access disabled id=%s", data.task_id)
            return WriteResult(success=False, warning=ACCESS_DISABLED_WARNING)

        statement = build_update_statement(data)
        if statement is None:
            return WriteResult(success=True)

        sql, params = statement
        await asyncio.to_thread(self._execute_write, sql, params, data.task_id)
        logger.info("Task updated via SQLite id=%s fields=%s", data.task_id, ",".join(data.changes()))
        return WriteResult(success=True, warning=RESTART_WARNING.format(action="updated"))

    async def complete_task(self, task_id: str) -> WriteResult:
        if not self.config.direct_sql_access:
            logger.info("complete_task rejected: direct SQL access disabled id=%s", task_id)
            return WriteResult(success=False, warning=ACCESS_DISABLED_WARNING)

        completed_at = datetime_to_storage(datetime.now().astimezone())
        await asyncio.to_thread(
            self._execute_write,
            "UPDATE Task SET dateCompleted = ? WHERE persistentIdentifier = ?",
            [completed_at, task_id],
            task_id,
        )
        logger.info("Task completed via SQLite id=%s", task_id)
        return WriteResult(success=True, warning=RESTART_WARNING.format(action="marked complete"))

    async def get_projects(self) -> list[str]:
        return await asyncio.to_thread(self._query_projects)
