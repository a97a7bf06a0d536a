"""Date-stepping primitives shared by the scheduling engine."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo

DAY = timedelta(days=1)


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def local_date(value: datetime | date, tz: tzinfo = UTC) -> date:
    """Strip the time of day in the given calendar timezone."""
    if isinstance(value, datetime):
        return as_utc(value).astimezone(tz).date()
    return value


def day_count(start: date, end: date) -> int:
    """Number of calendar days from ``start`` to ``end`` (negative if before)."""
    return (end - start).days


def whole_days_between(start: datetime, end: datetime, tz: tzinfo = UTC) -> int:
    """Elapsed whole days between two instants, truncated toward zero.

    The difference is taken on the local wall clock so that a DST shift does
    not turn "yesterday at the same time" into 0 days.
    """
    local_start = as_utc(start).astimezone(tz).replace(tzinfo=None)
    local_end = as_utc(end).astimezone(tz).replace(tzinfo=None)
    return int((local_end - local_start) / DAY)


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def add_hours(moment: datetime, hours: int) -> datetime:
    """Step an instant forward by absolute hours."""
    return as_utc(moment) + timedelta(hours=hours)


def at_local_time(day: date, hour: int, minute: int, tz: tzinfo = UTC) -> datetime:
    """Combine a calendar day with a wall-clock time, returned in UTC."""
    return datetime.combine(day, time(hour, minute), tzinfo=tz).astimezone(UTC)


def start_of_day(day: date, tz: tzinfo = UTC) -> datetime:
    return at_local_time(day, 0, 0, tz)


def day_bounds(day: date, tz: tzinfo = UTC) -> tuple[datetime, datetime]:
    """Return UTC-aware start/end bounds for the given local date."""
    local_start = datetime.combine(day, time.min, tzinfo=tz)
    local_end = local_start + DAY
    return local_start.astimezone(UTC), local_end.astimezone(UTC)


def sunday_first_weekday(day: date) -> int:
    """Weekday number with 1=Sunday .. 7=Saturday."""
    return day.isoweekday() % 7 + 1


__all__ = [
    "DAY",
    "add_days",
    "add_hours",
    "as_utc",
    "at_local_time",
    "day_bounds",
    "day_count",
    "local_date",
    "start_of_day",
    "sunday_first_weekday",
    "whole_days_between",
]
