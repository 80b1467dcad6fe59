# src/omnifocus_bridge/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Any

MIN_TASK_LIMIT = 1
MAX_TASK_LIMIT = 10_000
DEFAULT_TASK_LIMIT = 500


class TaskFilter(StrEnum):
    """
    Which open tasks get_tasks returns.

    No filter at all means the same as ALL: flagged OR due on/before today.
    """

    FLAGGED = "flagged"
    DUE_TODAY = "due_today"
    ALL = "all"


class ProviderVersion(StrEnum):
    """
    Provider identity, fixed for the lifetime of a process.

    PRO      -> AppleScript automation is available (full automation)
    STANDARD -> restricted: URL scheme + direct database access
    """

    PRO = "pro"
    STANDARD = "standard"


@dataclass(slots=True)
class Task:
    id: str
    name: str
    note: str | None = None
    project: str | None = None
    flagged: bool | None = None
    # Local ISO-8601 date-time, e.g. "2026-10-19T17:00:00".
    due_date: str | None = None
    completed: bool | None = None

    @property
    def due_on(self) -> date | None:
        if not self.due_date:
            return None
        return date.fromisoformat(self.due_date[:10])

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.note is not None:
            out["note"] = self.note
        if self.project is not None:
            out["project"] = self.project
        if self.flagged is not None:
            out["flagged"] = self.flagged
        if self.due_date is not None:
            out["dueDate"] = self.due_date
        if self.completed is not None:
            out["completed"] = self.completed
        return out


@dataclass(slots=True, frozen=True)
class CreateTaskInput:
    name: str
    note: str | None = None
    project: str | None = None
    flagged: bool | None = None
    due_date: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name is required")


@dataclass(slots=True, frozen=True)
class UpdateTaskInput:
    """
    Patch for an existing task.

    None means "leave unchanged". An empty note ("") is a real value: it clears the note.
    """

    task_id: str
    name: str | None = None
    note: str | None = None
    flagged: bool | None = None
    due_date: str | None = None

    def __post_init__(self) -> None:
        if not self.task_id:
            raise ValueError("task_id is required")

    def changes(self) -> dict[str, Any]:
        """Present fields only, in the order they are applied (name, note, flagged, due_date)."""
        out: dict[str, Any] = {}
        if self.name is not None:
            out["name"] = self.name
        if self.note is not None:
            out["note"] = self.note
        if self.flagged is not None:
            out["flagged"] = self.flagged
        if self.due_date is not None:
            out["due_date"] = self.due_date
        return out


@dataclass(slots=True, frozen=True)
class ProviderConfig:
    direct_sql_access: bool = True
    task_limit: int = DEFAULT_TASK_LIMIT

    def __post_init__(self) -> None:
        if not MIN_TASK_LIMIT <= int(self.task_limit) <= MAX_TASK_LIMIT:
            raise ValueError(
                f"task_limit must be between {MIN_TASK_LIMIT} and {MAX_TASK_LIMIT}, got {self.task_limit}"
            )

    def with_updates(
        self,
        *,
        direct_sql_access: bool | None = None,
        task_limit: int | None = None,
    ) -> ProviderConfig:
        return replace(
            self,
            direct_sql_access=self.direct_sql_access if direct_sql_access is None else bool(direct_sql_access),
            task_limit=self.task_limit if task_limit is None else int(task_limit),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"directSqlAccess": self.direct_sql_access, "taskLimit": self.task_limit}


@dataclass(slots=True, frozen=True)
class CreateResult:
    success: bool
    task_id: str | None = None
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.task_id is not None:
            out["taskId"] = self.task_id
        if self.warning is not None:
            out["warning"] = self.warning
        return out


@dataclass(slots=True, frozen=True)
class WriteResult:
    """Outcome of update/complete. success=False is a policy rejection, not an error."""

    success: bool
    warning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.warning is not None:
            out["warning"] = self.warning
        return out
