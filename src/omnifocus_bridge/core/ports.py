# src/omnifocus_bridge/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the front ends and providers.

Front ends depend on the TaskProvider Protocol, never on a concrete backend.
Process-spawning collaborators are Protocols too, so tests can swap in fakes.
"""

from dataclasses import dataclass
from typing import Protocol

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


@dataclass(slots=True, frozen=True)
class ScriptResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ScriptRunner(Protocol):
    """Runs an AppleScript program (read from stdin by the interpreter)."""

    async def check(self, script: str) -> ScriptResult: ...

    async def run(self, script: str) -> str: ...


class UrlOpener(Protocol):
    async def open_url(self, url: str) -> None: ...


class TaskProvider(Protocol):
    @property
    def version(self) -> ProviderVersion: ...

    @property
    def config(self) -> ProviderConfig: ...

    def set_config(
        self,
        *,
        direct_sql_access: bool | None = None,
        task_limit: int | None = None,
    ) -> ProviderConfig: ...

    async def get_tasks(self, task_filter: TaskFilter | None = None) -> list[Task]: ...

    async def create_task(self, data: CreateTaskInput) -> CreateResult: ...

    async def update_task(self, data: UpdateTaskInput) -> WriteResult: ...

    async def complete_task(self, task_id: str) -> WriteResult: ...

    async def get_projects(self) -> list[str]: ...
