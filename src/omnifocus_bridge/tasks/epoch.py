# src/omnifocus_bridge/tasks/epoch.py

"""
Conversion between Unix time and the OmniFocus storage epoch.

The OmniFocus database stores timestamps as seconds since 2001-01-01T00:00:00Z
(the Core Data reference date), i.e. 978_307_200 seconds after the Unix epoch.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

EPOCH_OFFSET_SECONDS = 978_307_200
EPOCH_OFFSET_MILLIS = EPOCH_OFFSET_SECONDS * 1000


def to_storage(standard_millis: int | float) -> float:
    """Unix milliseconds -> storage seconds."""
    return (standard_millis - EPOCH_OFFSET_MILLIS) / 1000


def to_standard(stored_seconds: int | float) -> int:
    """Storage seconds -> Unix milliseconds."""
    return round(stored_seconds * 1000) + EPOCH_OFFSET_MILLIS


def datetime_to_storage(dt: datetime) -> float:
    """Aware or naive (local time) datetime -> storage seconds."""
    return to_storage(dt.timestamp() * 1000)


def storage_to_datetime(stored_seconds: int | float) -> datetime:
    """Storage seconds -> naive local datetime."""
    return datetime.fromtimestamp(to_standard(stored_seconds) / 1000)


def local_day_bounds(day: date) -> tuple[float, float]:
    """Storage seconds for [local midnight of `day`, local midnight of the next day)."""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    return datetime_to_storage(start), datetime_to_storage(end)


def parse_due_date(raw: str) -> datetime:
    """
    Parse a due date as given by callers.

    "YYYY-MM-DD" means local midnight of that day; full ISO date-times are accepted too
    (naive ones are local time).
    """
    s = raw.strip()
    if len(s) == 10:
        return datetime.combine(date.fromisoformat(s), time.min)
    return datetime.fromisoformat(s)
