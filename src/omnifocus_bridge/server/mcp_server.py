# src/omnifocus_bridge/server/mcp_server.py

"""
MCP stdio front end.

Tool arguments are validated with the request schemas, dispatched to the selected
provider, and answered as JSON text. Failures are logged in full and reported to
the agent as a sanitized tool error.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import ValidationError

from .. import __version__
from ..core.ports import TaskProvider
from ..tasks.task_models import ProviderVersion
from ..validation import (
    CompleteTaskRequest,
    CreateTaskRequest,
    GetTasksRequest,
    SetConfigRequest,
    UpdateTaskRequest,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "omnifocus-bridge"

_HOME_DIR_PATTERNS = (
    (re.compile(r"/Users/[^/\s]+"), "/Users/***"),
    (re.compile(r"/home/[^/\s]+"), "/home/***"),
)
_TRACEBACK_FRAME = re.compile(r'File "[^"]+", line \d+(, in \S+)?')


def sanitize_error_message(exc: BaseException) -> str:
    """Turn an exception into a message safe to show to the calling agent."""
    if isinstance(exc, ValidationError):
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
        return "; ".join(parts)

    msg = str(exc)
    if not msg:
        return "An unexpected error occurred"
    for pattern, repl in _HOME_DIR_PATTERNS:
        msg = pattern.sub(repl, msg)
    msg = _TRACEBACK_FRAME.sub("", msg)
    return msg.strip() or "An unexpected error occurred"


def _dump(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


class TaskTools:
    """Transport-independent tool handlers; each returns the JSON payload as a dict."""

    def __init__(self, provider: TaskProvider) -> None:
        self.provider = provider

    async def get_tasks(self, args: dict[str, Any]) -> dict[str, Any]:
        req = GetTasksRequest.model_validate(args)
        tasks = await self.provider.get_tasks(req.filter)
        return {"version": self.provider.version.value, "tasks": [t.to_dict() for t in tasks]}

    async def create_task(self, args: dict[str, Any]) -> dict[str, Any]:
        req = CreateTaskRequest.model_validate(args)
        result = await self.provider.create_task(req.to_input())
        return {"version": self.provider.version.value, **result.to_dict()}

    async def update_task(self, args: dict[str, Any]) -> dict[str, Any]:
        req = UpdateTaskRequest.model_validate(args)
        result = await self.provider.update_task(req.to_input())
        return {"version": self.provider.version.value, **result.to_dict()}

    async def complete_task(self, args: dict[str, Any]) -> dict[str, Any]:
        req = CompleteTaskRequest.model_validate(args)
        result = await self.provider.complete_task(req.task_id)
        return {"version": self.provider.version.value, **result.to_dict()}

    async def get_projects(self, args: dict[str, Any]) -> dict[str, Any]:
        projects = await self.provider.get_projects()
        return {"version": self.provider.version.value, "projects": projects}

    async def get_config(self, args: dict[str, Any]) -> dict[str, Any]:
        return {"version": self.provider.version.value, "config": self.provider.config.to_dict()}

    async def set_config(self, args: dict[str, Any]) -> dict[str, Any]:
        req = SetConfigRequest.model_validate(args)
        config = self.provider.set_config(
            direct_sql_access=req.direct_sql_access,
            task_limit=req.task_limit,
        )
        return {"success": True, "version": self.provider.version.value, "config": config.to_dict()}

    async def call(self, name: str, handler_name: str, args: dict[str, Any]) -> str:
        handler = getattr(self, handler_name)
        try:
            payload = await handler({k: v for k, v in args.items() if v is not None})
        except Exception as e:
            logger.exception("Tool %s failed", name)
            raise ToolError(sanitize_error_message(e)) from e
        return _dump(payload)


def build_server(provider: TaskProvider) -> FastMCP:
    tools = TaskTools(provider)
    version = provider.version.value
    write_warning = (
        " (Standard version: changes via SQLite won't sync until OmniFocus restart)"
        if provider.version == ProviderVersion.STANDARD
        else ""
    )

    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(
        name="omnifocus_get_tasks",
        description=(
            "Get tasks from OmniFocus. Filter by flagged, due_today, or all "
            f"(default: flagged + due today). Detected version: {version}"
        ),
    )
    async def omnifocus_get_tasks(filter: Optional[str] = None) -> str:
        return await tools.call("omnifocus_get_tasks", "get_tasks", {"filter": filter})

    @mcp.tool(
        name="omnifocus_create_task",
        description=(
            "Create a new task in OmniFocus (inbox unless a project name is given). "
            f"dueDate uses YYYY-MM-DD. Detected version: {version}"
        ),
    )
    async def omnifocus_create_task(
        name: str,
        note: Optional[str] = None,
        project: Optional[str] = None,
        flagged: Optional[bool] = None,
        dueDate: Optional[str] = None,
    ) -> str:
        return await tools.call(
            "omnifocus_create_task",
            "create_task",
            {"name": name, "note": note, "project": project, "flagged": flagged, "dueDate": dueDate},
        )

    @mcp.tool(
        name="omnifocus_update_task",
        description=f"Update an existing task in OmniFocus.{write_warning}",
    )
    async def omnifocus_update_task(
        taskId: str,
        name: Optional[str] = None,
        note: Optional[str] = None,
        flagged: Optional[bool] = None,
        dueDate: Optional[str] = None,
    ) -> str:
        return await tools.call(
            "omnifocus_update_task",
            "update_task",
            {"taskId": taskId, "name": name, "note": note, "flagged": flagged, "dueDate": dueDate},
        )

    @mcp.tool(
        name="omnifocus_complete_task",
        description=f"Mark a task as complete.{write_warning}",
    )
    async def omnifocus_complete_task(taskId: str) -> str:
        return await tools.call("omnifocus_complete_task", "complete_task", {"taskId": taskId})

    @mcp.tool(
        name="omnifocus_get_projects",
        description=f"Get list of active projects from OmniFocus. Detected version: {version}",
    )
    async def omnifocus_get_projects() -> str:
        return await tools.call("omnifocus_get_projects", "get_projects", {})

    @mcp.tool(name="omnifocus_get_config", description="Get current configuration settings")
    async def omnifocus_get_config() -> str:
        return await tools.call("omnifocus_get_config", "get_config", {})

    @mcp.tool(
        name="omnifocus_set_config",
        description=(
            "Update configuration settings. directSqlAccess (Standard version only) enables "
            "direct SQLite writes for update/complete (requires OmniFocus restart to sync). "
            "taskLimit caps getTasks results (default 500, max 10000)."
        ),
    )
    async def omnifocus_set_config(
        directSqlAccess: Optional[bool] = None,
        taskLimit: Optional[int] = None,
    ) -> str:
        return await tools.call(
            "omnifocus_set_config",
            "set_config",
            {"directSqlAccess": directSqlAccess, "taskLimit": taskLimit},
        )

    logger.debug("MCP server %s %s built for %s provider", SERVER_NAME, __version__, version)
    return mcp
