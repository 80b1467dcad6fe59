# src/omnifocus_bridge/providers/applescript_provider.py

"""
OmniFocus Pro provider: every operation is a small generated AppleScript program.

Script construction rules:
- caller-supplied text only enters a script through `quote_applescript`
- list output uses sentinel delimiters instead of AppleScript's ", " list coercion,
  so commas inside task names cannot split records
"""

from __future__ import annotations

import logging
import threading

from ..core.ports import ScriptRunner
from ..tasks.escaping import quote_applescript
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

FIELD_DELIMITER = "<<<FLD>>>"
RECORD_DELIMITER = "<<<REC>>>"
FIELDS_PER_RECORD = 6

_TASK_CONDITIONS: dict[TaskFilter | None, str] = {
    TaskFilter.FLAGGED: " and flagged is true",
    TaskFilter.DUE_TODAY: " and due date >= todayStart and due date < tomorrowStart",
    TaskFilter.ALL: " and (flagged is true or due date < tomorrowStart)",
    None: " and (flagged is true or due date < tomorrowStart)",
}


def _wrap(body: str) -> str:
    lines = ["    " + line if line else "" for line in body.strip("\n").splitlines()]
    return (
        'tell application "OmniFocus"\n'
        "  tell default document\n" + "\n".join(lines) + "\n  end tell\nend tell\n"
    )


def _join_records(list_var: str) -> str:
    return (
        f"set AppleScript's text item delimiters to {quote_applescript(RECORD_DELIMITER)}\n"
        f"set output to {list_var} as text\n"
        'set AppleScript\'s text item delimiters to ""\n'
        "return output\n"
    )


def build_get_tasks_script(task_filter: TaskFilter | None, limit: int) -> str:
    condition = _TASK_CONDITIONS[task_filter]
    sep = quote_applescript(FIELD_DELIMITER)
    body = (
        "set todayStart to current date\n"
        "set time of todayStart to 0\n"
        "set tomorrowStart to todayStart + 1 * days\n"
        "set taskList to {}\n"
        f"set theTasks to flattened tasks whose completed is false{condition}\n"
        "repeat with t in theTasks\n"
        f"  if (count of taskList) >= {int(limit)} then exit repeat\n"
        "  set taskDue to \"\"\n"
        "  if due date of t is not missing value then\n"
        "    set taskDue to (due date of t) as «class isot» as string\n"
        "  end if\n"
        "  set projectName to \"\"\n"
        "  try\n"
        "    set projectName to name of containing project of t\n"
        "  end try\n"
        f"  set end of taskList to (id of t) & {sep} & (name of t) & {sep} & (note of t) & {sep} "
        f"& (flagged of t) & {sep} & taskDue & {sep} & projectName\n"
        "end repeat\n"
    ) + _join_records("taskList")
    return _wrap(body)


def build_create_task_script(data: CreateTaskInput) -> str:
    props = [f"name:{quote_applescript(data.name)}"]
    if data.note:
        props.append(f"note:{quote_applescript(data.note)}")
    if data.flagged:
        props.append("flagged:true")
    if data.due_date:
        props.append(f"due date:date {quote_applescript(data.due_date)}")
    prop_list = "{" + ", ".join(props) + "}"

    if data.project:
        body = (
            f"set theProject to first flattened project whose name is {quote_applescript(data.project)}\n"
            f"set newTask to make new task with properties {prop_list} at end of tasks of theProject\n"
            "return id of newTask\n"
        )
    else:
        body = (
            f"set newTask to make new inbox task with properties {prop_list}\n"
            "return id of newTask\n"
        )
    return _wrap(body)


def _find_task(task_id: str) -> str:
    return f"set theTask to first flattened task whose id is {quote_applescript(task_id)}\n"


def build_update_task_script(data: UpdateTaskInput) -> str:
    statements: list[str] = []
    changes = data.changes()
    if "name" in changes:
        statements.append(f"set name of theTask to {quote_applescript(changes['name'])}")
    if "note" in changes:
        statements.append(f"set note of theTask to {quote_applescript(changes['note'])}")
    if "flagged" in changes:
        statements.append(f"set flagged of theTask to {'true' if changes['flagged'] else 'false'}")
    if "due_date" in changes:
        statements.append(f"set due date of theTask to date {quote_applescript(changes['due_date'])}")

    body = _find_task(data.task_id) + "".join(s + "\n" for s in statements)
    return _wrap(body)


def build_complete_task_script(task_id: str) -> str:
    return _wrap(_find_task(task_id) + "set completed of theTask to true\n")


def build_get_projects_script() -> str:
    body = (
        "set projectNames to {}\n"
        "repeat with p in flattened projects\n"
        "  set s to status of p\n"
        "  if s is not dropped status and s is not done status then\n"
        "    set end of projectNames to name of p\n"
        "  end if\n"
        "end repeat\n"
    ) + _join_records("projectNames")
    return _wrap(body)


def parse_task_records(output: str) -> list[Task]:
    if not output:
        return []

    tasks: list[Task] = []
    for record in output.split(RECORD_DELIMITER):
        parts = record.split(FIELD_DELIMITER)
        if len(parts) != FIELDS_PER_RECORD:
            logger.warning("Skipping malformed task record (%d fields)", len(parts))
            continue
        task_id, name, note, flagged, due, project = parts
        tasks.append(
            Task(
                id=task_id,
                name=name,
                note=note or None,
                project=project or None,
                flagged=flagged == "true",
                due_date=due or None,
                completed=False,
            )
        )
    return tasks


class AppleScriptProvider:
    """Full-automation provider (OmniFocus Pro). Ignores direct_sql_access."""

    def __init__(self, runner: ScriptRunner, config: ProviderConfig | None = None) -> None:
        self._runner = runner
        self._config = config or ProviderConfig(direct_sql_access=False)
        self._config_lock = threading.Lock()

    @property
    def version(self) -> ProviderVersion:
        return ProviderVersion.PRO

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
            return self._config

    async def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]:
        limit = self.config.task_limit
        logger.debug("get_tasks filter=%s limit=%s", task_filter, limit)
        output = await self._runner.run(build_get_tasks_script(task_filter, limit))
        return parse_task_records(output)[:limit]

    async def create_task(self, data: CreateTaskInput) -> CreateResult:
        task_id = await self._runner.run(build_create_task_script(data))
        logger.info("Task created id=%s project=%s", task_id, data.project or "<inbox>")
        return CreateResult(success=True, task_id=task_id)

    async def update_task(self, data: UpdateTaskInput) -> WriteResult:
        await self._runner.run(build_update_task_script(data))
        logger.info("Task updated id=%s fields=%s", data.task_id, ",".join(data.changes()) or "-")
        return WriteResult(success=True)

    async def complete_task(self, task_id: str) -> WriteResult:
        await self._runner.run(build_complete_task_script(task_id))
        logger.info("Task completed id=%s", task_id)
        return WriteResult(success=True)

    async def get_projects(self) -> list[str]:
        output = await self._runner.run(build_get_projects_script())
        if not output:
            return []
        return output.split(RECORD_DELIMITER)
