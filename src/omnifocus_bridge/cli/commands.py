# src/omnifocus_bridge/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.task_models import Task, TaskFilter
from ..validation import (
    CompleteTaskRequest,
    CreateTaskRequest,
    GetTasksRequest,
    SetConfigRequest,
    UpdateTaskRequest,
)

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_ON = {"on", "1", "true", "yes"}
_OFF = {"off", "0", "false", "no"}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_task(t: Task) -> str:
    flag = "*" if t.flagged else " "
    due = f" due {t.due_on.isoformat()}" if t.due_on else ""
    project = f" [{t.project}]" if t.project else ""
    return f"{flag} {t.name}{project}{due}  ({t.id})"


def _format_write(result_success: bool, warning: str | None, ok_text: str) -> str:
    if not result_success:
        return f"Rejected: {warning}" if warning else "Rejected."
    return f"{ok_text}\n  Note: {warning}" if warning else ok_text


def _parse_switch(raw: str) -> bool | None:
    v = raw.lower()
    if v in _ON:
        return True
    if v in _OFF:
        return False
    return None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    cfg = state.provider.config
    return (
        "Status:\n"
        f"  OmniFocus version: {state.provider.version.value}\n"
        f"  Direct SQL access: {'ON' if cfg.direct_sql_access else 'OFF'}\n"
        f"  Task limit: {cfg.task_limit}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks             -> flagged or due today
    /tasks flagged     -> flagged only
    /tasks due_today   -> due today only
    /tasks all         -> same as no filter
    """
    req = GetTasksRequest.model_validate({"filter": args[0].lower() if args else None})
    tasks = state.run(state.provider.get_tasks(req.filter))
    if not tasks:
        return "No matching tasks."
    label = (req.filter or TaskFilter.ALL).value
    lines = [f"Tasks ({label}, {len(tasks)}):"]
    lines.extend(_format_task(t) for t in tasks)
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /add <task name>"
    req = CreateTaskRequest.model_validate({"name": " ".join(args)})
    result = state.run(state.provider.create_task(req.to_input()))
    created = f"Created task {result.task_id}." if result.task_id else "Task sent to OmniFocus."
    return _format_write(result.success, result.warning, created)


def cmd_done(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /done <task id>"
    req = CompleteTaskRequest.model_validate({"taskId": args[0]})
    result = state.run(state.provider.complete_task(req.task_id))
    return _format_write(result.success, result.warning, f"Completed {req.task_id}.")


def _update(state: AppState, payload: dict[str, object]) -> str:
    req = UpdateTaskRequest.model_validate(payload)
    result = state.run(state.provider.update_task(req.to_input()))
    return _format_write(result.success, result.warning, f"Updated {req.task_id}.")


def cmd_flag(state: AppState, args: list[str]) -> str:
    flagged = _parse_switch(args[1]) if len(args) == 2 else None
    if flagged is None:
        return "Usage: /flag <task id> on|off"
    return _update(state, {"taskId": args[0], "flagged": flagged})


def cmd_due(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /due <task id> YYYY-MM-DD"
    return _update(state, {"taskId": args[0], "dueDate": args[1]})


def cmd_rename(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /rename <task id> <new name>"
    return _update(state, {"taskId": args[0], "name": " ".join(args[1:])})


def cmd_note(state: AppState, args: list[str]) -> str:
    """/note <id> text... sets the note; /note <id> alone clears it."""
    if not args:
        return "Usage: /note <task id> [text]"
    return _update(state, {"taskId": args[0], "note": " ".join(args[1:])})


def cmd_projects(state: AppState, args: list[str]) -> str:
    projects = state.run(state.provider.get_projects())
    if not projects:
        return "No active projects."
    return "Projects:\n" + "\n".join(f"  {p}" for p in projects)


def cmd_config(state: AppState, args: list[str]) -> str:
    """
    /config                -> show config
    /config sql on|off     -> toggle direct SQLite writes
    /config limit N        -> set task limit
    """
    if not args:
        return cmd_status(state, args)

    if len(args) != 2:
        return "Usage: /config sql on|off | /config limit N"

    key, value = args[0].lower(), args[1]
    if key == "sql":
        switch = _parse_switch(value)
        if switch is None:
            return "Usage: /config sql on|off"
        req = SetConfigRequest.model_validate({"directSqlAccess": switch})
    elif key == "limit":
        req = SetConfigRequest.model_validate({"taskLimit": value})
    else:
        return "Usage: /config sql on|off | /config limit N"

    cfg = state.provider.set_config(
        direct_sql_access=req.direct_sql_access,
        task_limit=req.task_limit,
    )
    logger.debug("Config changed from console: %s", cfg)
    return f"Config: direct SQL access {'ON' if cfg.direct_sql_access else 'OFF'}, task limit {cfg.task_limit}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show OmniFocus version and config.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [flagged|due_today|all].")
registry.register("add", cmd_add, help_text="Create a task in the inbox: /add <name>.")
registry.register("done", cmd_done, help_text="Complete a task: /done <id>.")
registry.register("flag", cmd_flag, help_text="Flag/unflag a task: /flag <id> on|off.")
registry.register("due", cmd_due, help_text="Set due date: /due <id> YYYY-MM-DD.")
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <id> <name>.")
registry.register("note", cmd_note, help_text="Set or clear a note: /note <id> [text].")
registry.register("projects", cmd_projects, help_text="List active projects.")
registry.register("config", cmd_config, help_text="Show/change config: /config [sql on|off | limit N].")
