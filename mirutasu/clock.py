"""Time helpers.

The database stores naive UTC datetimes. "Today" and "this week" are judged
in the configured local timezone and converted back to naive UTC bounds.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def iso_utc(value: datetime) -> str:
    """ISO 8601 with a ``Z`` suffix, e.g. ``2026-10-20T12:00:00Z``."""
    return to_utc_naive(value).isoformat() + "Z"


def local_today(tz_name: str, now: Optional[datetime] = None) -> date:
    now = now or utcnow()
    return now.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name)).date()


def local_date_of(value: datetime, tz_name: str) -> date:
    """Local calendar date of a naive UTC datetime."""
    return value.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name)).date()


def local_to_utc(day: date, at: time, tz_name: str) -> datetime:
    local = datetime.combine(day, at).replace(tzinfo=ZoneInfo(tz_name))
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day: date, tz_name: str) -> Tuple[datetime, datetime]:
    """Half-open [start, end) of a local day, in naive UTC."""
    return (
        local_to_utc(day, time.min, tz_name),
        local_to_utc(day + timedelta(days=1), time.min, tz_name),
    )


def week_bounds(day: date, tz_name: str) -> Tuple[datetime, datetime]:
    """Half-open bounds of the Sunday-started week containing ``day``."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return (
        local_to_utc(start, time.min, tz_name),
        local_to_utc(start + timedelta(days=7), time.min, tz_name),
    )


def completion_rate(completed: int, total: int) -> int:
    """Percentage rounded half up; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return int(completed * 100 / total + 0.5)
