# tests/test_direct_provider.py

from __future__ import annotations

import sqlite3
import time
from datetime import date, datetime
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pytest

from omnifocus_bridge.errors import DatabaseUnavailableError, TaskNotFoundError
from omnifocus_bridge.providers.direct_provider import (
    ACCESS_DISABLED_WARNING,
    CREATE_WARNING,
    DirectAccessProvider,
    build_update_statement,
)
from omnifocus_bridge.tasks.epoch import datetime_to_storage, to_storage
from omnifocus_bridge.tasks.task_models import (
    CreateTaskInput,
    ProviderConfig,
    ProviderVersion,
    TaskFilter,
    UpdateTaskInput,
)

from .fakes import FakeUrlOpener


@pytest.fixture()
def opener() -> FakeUrlOpener:
    return FakeUrlOpener()


@pytest.fixture()
def provider(omnifocus_db: Path, opener: FakeUrlOpener) -> DirectAccessProvider:
    return DirectAccessProvider(omnifocus_db, opener)


def test_defaults(provider: DirectAccessProvider) -> None:
    assert provider.version == ProviderVersion.STANDARD
    assert provider.config == ProviderConfig(direct_sql_access=True, task_limit=500)


@pytest.mark.asyncio
async def test_flagged_filter_excludes_completed(provider: DirectAccessProvider) -> None:
    tasks = await provider.get_tasks(TaskFilter.FLAGGED)
    assert {t.id for t in tasks} == {"flag1", "flagfut"}
    assert all(t.flagged for t in tasks)


@pytest.mark.asyncio
async def test_due_today_returns_todays_task(provider: DirectAccessProvider, today: date) -> None:
    tasks = await provider.get_tasks(TaskFilter.DUE_TODAY)

    assert [t.id for t in tasks] == ["today1"]
    assert tasks[0].due_on == today
    assert tasks[0].due_date == f"{today.isoformat()}T12:00:00"
    assert tasks[0].completed is False


@pytest.mark.asyncio
@pytest.mark.parametrize("task_filter", [None, TaskFilter.ALL])
async def test_default_filter_is_flagged_or_due_by_today(
    provider: DirectAccessProvider, task_filter
) -> None:
    tasks = await provider.get_tasks(task_filter)

    # due date ascending (dateless last), flagged first on ties
    assert [t.id for t in tasks] == ["over1", "today1", "flagfut", "flag1"]


@pytest.mark.asyncio
async def test_project_name_resolved_through_project_info(provider: DirectAccessProvider) -> None:
    tasks = {t.id: t for t in await provider.get_tasks(TaskFilter.FLAGGED)}
    assert tasks["flag1"].project == "Errands"
    assert tasks["flag1"].note == "about sunday"
    assert tasks["flagfut"].project == "Alpha"


@pytest.mark.asyncio
async def test_task_limit_caps_rows(provider: DirectAccessProvider) -> None:
    provider.set_config(task_limit=1)
    tasks = await provider.get_tasks()
    assert [t.id for t in tasks] == ["over1"]


@pytest.mark.asyncio
async def test_get_projects_sorted(provider: DirectAccessProvider) -> None:
    assert await provider.get_projects() == ["Alpha", "Errands"]


@pytest.mark.asyncio
async def test_create_task_opens_url_scheme(provider: DirectAccessProvider, opener: FakeUrlOpener) -> None:
    result = await provider.create_task(
        CreateTaskInput(name="Buy milk & eggs", note="2%", project="Errands", flagged=True, due_date="2026-10-20")
    )

    assert result.success is True
    assert result.task_id is None
    assert result.warning == CREATE_WARNING
    assert len(opener.opened) == 1

    url = opener.opened[0]
    assert url.startswith("omnifocus:///add?name=Buy%20milk%20%26%20eggs&autosave=true")
    query = parse_qs(urlsplit(url).query)
    assert query == {
        "name": ["Buy milk & eggs"],
        "autosave": ["true"],
        "note": ["2%"],
        "flag": ["true"],
        "due": ["2026-10-20"],
        "project": ["Errands"],
    }


@pytest.mark.asyncio
async def test_create_task_minimal_url(provider: DirectAccessProvider, opener: FakeUrlOpener) -> None:
    await provider.create_task(CreateTaskInput(name="Buy milk"))
    assert opener.opened == ["omnifocus:///add?name=Buy%20milk&autosave=true"]


@pytest.mark.asyncio
async def test_writes_rejected_when_access_disabled(provider: DirectAccessProvider, read_task) -> None:
    provider.set_config(direct_sql_access=False)

    update = await provider.update_task(UpdateTaskInput(task_id="today1", name="Changed"))
    complete = await provider.complete_task("today1")

    assert update.success is False
    assert update.warning == ACCESS_DISABLED_WARNING
    assert complete.success is False
    row = read_task("today1")
    assert row["name"] == "Pay rent"
    assert row["dateCompleted"] is None


@pytest.mark.asyncio
async def test_update_changes_present_fields_only(provider: DirectAccessProvider, read_task) -> None:
    result = await provider.update_task(UpdateTaskInput(task_id="flag1", name="Call dad", flagged=False))

    assert result.success is True
    assert "restarted" in (result.warning or "")
    row = read_task("flag1")
    assert row["name"] == "Call dad"
    assert row["flagged"] == 0
    assert row["plainTextNote"] == "about sunday"
    assert row["dateDue"] is None


@pytest.mark.asyncio
async def test_update_empty_note_clears_it(provider: DirectAccessProvider, read_task) -> None:
    await provider.update_task(UpdateTaskInput(task_id="flag1", note=""))
    assert read_task("flag1")["plainTextNote"] == ""


@pytest.mark.asyncio
async def test_update_due_date_uses_storage_epoch(provider: DirectAccessProvider, read_task) -> None:
    await provider.update_task(UpdateTaskInput(task_id="plain1", due_date="2026-01-02"))
    assert read_task("plain1")["dateDue"] == pytest.approx(datetime_to_storage(datetime(2026, 1, 2)))


@pytest.mark.asyncio
async def test_update_without_fields_is_a_noop(provider: DirectAccessProvider) -> None:
    result = await provider.update_task(UpdateTaskInput(task_id="does-not-matter"))
    assert result.success is True
    assert result.warning is None


@pytest.mark.asyncio
async def test_update_unknown_task_raises(provider: DirectAccessProvider) -> None:
    with pytest.raises(TaskNotFoundError, match="missing"):
        await provider.update_task(UpdateTaskInput(task_id="missing", name="x"))


@pytest.mark.asyncio
async def test_complete_sets_completion_timestamp(provider: DirectAccessProvider, read_task) -> None:
    before = to_storage(time.time() * 1000)
    result = await provider.complete_task("flag1")
    after = to_storage(time.time() * 1000)

    assert result.success is True
    assert "restarted" in (result.warning or "")
    assert before - 1 <= read_task("flag1")["dateCompleted"] <= after + 1
    assert {t.id for t in await provider.get_tasks(TaskFilter.FLAGGED)} == {"flagfut"}


@pytest.mark.asyncio
async def test_complete_unknown_task_raises(provider: DirectAccessProvider) -> None:
    with pytest.raises(TaskNotFoundError):
        await provider.complete_task("missing")


@pytest.mark.asyncio
async def test_missing_database(tmp_path: Path, opener: FakeUrlOpener) -> None:
    provider = DirectAccessProvider(tmp_path / "nope.db", opener)
    with pytest.raises(DatabaseUnavailableError):
        await provider.get_tasks()


def test_update_statement_builder() -> None:
    sql, params = build_update_statement(UpdateTaskInput(task_id="t1", note="", flagged=True))
    assert sql == "UPDATE Task SET plainTextNote = ?, flagged = ? WHERE persistentIdentifier = ?"
    assert params == ["", 1, "t1"]
    assert build_update_statement(UpdateTaskInput(task_id="t1")) is None


def _assert_db_unlocked(db: Path) -> None:
    conn = sqlite3.connect(str(db), timeout=0.1)
    try:
        conn.execute("BEGIN EXCLUSIVE")
        conn.rollback()
    finally:
        conn.close()


@pytest.mark.asyncio
async def test_connection_released_after_not_found(provider: DirectAccessProvider, omnifocus_db: Path) -> None:
    with pytest.raises(TaskNotFoundError):
        await provider.update_task(UpdateTaskInput(task_id="missing", flagged=True))
    _assert_db_unlocked(omnifocus_db)

    with pytest.raises(TaskNotFoundError):
        await provider.complete_task("missing")
    _assert_db_unlocked(omnifocus_db)


@pytest.mark.asyncio
async def test_connection_released_after_query_error(provider: DirectAccessProvider, omnifocus_db: Path) -> None:
    conn = sqlite3.connect(str(omnifocus_db))
    try:
        conn.execute("DROP TABLE ProjectInfo")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(sqlite3.OperationalError):
        await provider.get_tasks()
    _assert_db_unlocked(omnifocus_db)
