# src/omnifocus_bridge/validation.py

"""
Request schemas for the front ends.

Providers assume their inputs already passed through these models: names are
non-empty, task ids are plain identifiers, dates are real YYYY-MM-DD dates.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .tasks.task_models import (
    MAX_TASK_LIMIT,
    MIN_TASK_LIMIT,
    CreateTaskInput,
    TaskFilter,
    UpdateTaskInput,
)

MAX_NAME_LENGTH = 1000
MAX_NOTE_LENGTH = 10000
MAX_PROJECT_LENGTH = 500
MAX_TASK_ID_LENGTH = 100

ISO_DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TASK_ID_PATTERN = r"^[a-zA-Z0-9_-]+$"


def _check_due_date(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not ISO_DATE_REGEX.match(v):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    try:
        date.fromisoformat(v)
    except ValueError:
        raise ValueError("Invalid date value") from None
    return v


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CreateTaskRequest(_Request):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    note: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)
    project: Optional[str] = Field(None, max_length=MAX_PROJECT_LENGTH)
    flagged: Optional[bool] = None
    due_date: Optional[str] = Field(None, alias="dueDate")

    @field_validator("due_date")
    @classmethod
    def due_date_is_iso(cls, v: Optional[str]) -> Optional[str]:
        return _check_due_date(v)

    def to_input(self) -> CreateTaskInput:
        return CreateTaskInput(
            name=self.name,
            note=self.note,
            project=self.project,
            flagged=self.flagged,
            due_date=self.due_date,
        )


class UpdateTaskRequest(_Request):
    task_id: str = Field(
        ..., alias="taskId", min_length=1, max_length=MAX_TASK_ID_LENGTH, pattern=TASK_ID_PATTERN
    )
    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    note: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)
    flagged: Optional[bool] = None
    due_date: Optional[str] = Field(None, alias="dueDate")

    @field_validator("due_date")
    @classmethod
    def due_date_is_iso(cls, v: Optional[str]) -> Optional[str]:
        return _check_due_date(v)

    def to_input(self) -> UpdateTaskInput:
        return UpdateTaskInput(
            task_id=self.task_id,
            name=self.name,
            note=self.note,
            flagged=self.flagged,
            due_date=self.due_date,
        )


class CompleteTaskRequest(_Request):
    task_id: str = Field(
        ..., alias="taskId", min_length=1, max_length=MAX_TASK_ID_LENGTH, pattern=TASK_ID_PATTERN
    )


class GetTasksRequest(_Request):
    filter: Optional[TaskFilter] = None


class SetConfigRequest(_Request):
    direct_sql_access: Optional[bool] = Field(None, alias="directSqlAccess")
    task_limit: Optional[int] = Field(None, alias="taskLimit", ge=MIN_TASK_LIMIT, le=MAX_TASK_LIMIT)
