# tests/conftest.py

from __future__ import annotations

import sqlite3
from datetime import date, datetime, time, timedelta
from pathlib import Path

import pytest

from omnifocus_bridge.config import Settings
from omnifocus_bridge.tasks.epoch import datetime_to_storage

_SCHEMA = """
CREATE TABLE Task (
    persistentIdentifier TEXT PRIMARY KEY,
    name TEXT,
    plainTextNote TEXT,
    flagged INTEGER NOT NULL DEFAULT 0,
    dateDue REAL,
    dateCompleted REAL,
    containingProjectInfo TEXT
);
CREATE TABLE ProjectInfo (
    pk TEXT PRIMARY KEY,
    task TEXT
);
"""


def _noon(day: date) -> float:
    return datetime_to_storage(datetime.combine(day, time(12, 0)))


@pytest.fixture()
def today() -> date:
    return date.today()


@pytest.fixture()
def omnifocus_db(tmp_path: Path, today: date) -> Path:
    """
    OmniFocus-shaped SQLite database.

    Open tasks:
      flag1   flagged, no due date, in project "Errands"
      today1  due today (noon), not flagged
      over1   due yesterday, not flagged
      later1  due in 3 days, not flagged
      flagfut flagged, due in 5 days
      plain1  not flagged, no due date
    Completed:
      done1   flagged + due today, completed
    Projects: "Errands", "Alpha" (project rows are Task rows referenced by ProjectInfo.task)
    """
    db = tmp_path / "OmniFocusDatabase.db"
    conn = sqlite3.connect(str(db))
    try:
        conn.executescript(_SCHEMA)
        conn.executemany(
            "INSERT INTO ProjectInfo(pk, task) VALUES (?, ?)",
            [("pi-errands", "proj-errands"), ("pi-alpha", "proj-alpha")],
        )
        completed = datetime_to_storage(datetime.now()) - 60
        rows = [
            ("proj-errands", "Errands", None, 0, None, None, None),
            ("proj-alpha", "Alpha", None, 0, None, None, None),
            ("flag1", "Call mom", "about sunday", 1, None, None, "pi-errands"),
            ("today1", "Pay rent", None, 0, _noon(today), None, None),
            ("over1", "File taxes", None, 0, _noon(today - timedelta(days=1)), None, None),
            ("later1", "Plan trip", None, 0, _noon(today + timedelta(days=3)), None, None),
            ("flagfut", "Dentist", None, 1, _noon(today + timedelta(days=5)), None, "pi-alpha"),
            ("plain1", "Someday", None, 0, None, None, None),
            ("done1", "Old flagged", None, 1, _noon(today), completed, None),
        ]
        conn.executemany(
            "INSERT INTO Task(persistentIdentifier, name, plainTextNote, flagged, dateDue, "
            "dateCompleted, containingProjectInfo) VALUES (?, ?, ?, ?, ?, ?, ?)",
            rows,
        )
        conn.commit()
    finally:
        conn.close()
    return db


@pytest.fixture()
def read_task(omnifocus_db: Path):
    """Read a raw Task row straight from the seeded database."""

    def _read(task_id: str) -> sqlite3.Row | None:
        conn = sqlite3.connect(str(omnifocus_db))
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute("SELECT * FROM Task WHERE persistentIdentifier = ?", (task_id,)).fetchone()
        finally:
            conn.close()

    return _read


@pytest.fixture()
def settings(tmp_path: Path, omnifocus_db: Path) -> Settings:
    """Settings built directly (no env reads) so tests stay deterministic."""
    return Settings(
        app_name="omnifocus-bridge-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        frontend="console",
        provider="auto",
        osascript_bin="osascript",
        open_bin="open",
        database_path=omnifocus_db,
        detection_timeout_seconds=0.2,
        direct_sql_access=True,
        task_limit=500,
    )
