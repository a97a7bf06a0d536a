"""Feeding recurrence rules and occurrence enumeration."""

from __future__ import annotations

import enum
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, tzinfo
from typing import assert_never

from scalekeeper.engine import dates

logger = logging.getLogger(__name__)

NEXT_OCCURRENCE_SCAN_DAYS = 30
DEFAULT_UPCOMING_DAYS = 7


class RoutineType(str, enum.Enum):
    """Supported feeding recurrence rules."""

    DAILY = "daily"
    EVERY_OTHER_DAY = "every_other_day"
    WEEKLY = "weekly"
    EVERY_N_DAYS = "every_n_days"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return _ROUTINE_LABELS[self]


_ROUTINE_LABELS = {
    RoutineType.DAILY: "Daily",
    RoutineType.EVERY_OTHER_DAY: "Every Other Day",
    RoutineType.WEEKLY: "Weekly",
    RoutineType.EVERY_N_DAYS: "Every N Days",
    RoutineType.CUSTOM: "Custom",
}

WEEKDAY_NAMES = {
    1: "Sunday",
    2: "Monday",
    3: "Tuesday",
    4: "Wednesday",
    5: "Thursday",
    6: "Friday",
    7: "Saturday",
}


@dataclass(frozen=True, slots=True)
class Daily:
    pass


@dataclass(frozen=True, slots=True)
class EveryOtherDay:
    pass


@dataclass(frozen=True, slots=True)
class Weekly:
    weekdays: frozenset[int]


@dataclass(frozen=True, slots=True)
class EveryNDays:
    interval_days: int


@dataclass(frozen=True, slots=True)
class Custom:
    """Display-only variant of :class:`Weekly`; due on the same weekdays."""

    weekdays: frozenset[int]


RecurrenceRule = Daily | EveryOtherDay | Weekly | EveryNDays | Custom


@dataclass(frozen=True, slots=True, order=True)
class FeedingSlot:
    """Time of day a feeding is offered. Orders by hour, then minute."""

    hour: int
    minute: int = 0
    label: str = field(default="Feeding", compare=False)

    @property
    def display_time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True, slots=True)
class RoutineSnapshot:
    """Immutable view of a stored feeding routine."""

    name: str
    rule: RecurrenceRule
    start_date: date
    end_date: date | None = None
    slots: tuple[FeedingSlot, ...] = ()
    animal_ids: tuple[uuid.UUID, ...] = ()
    routine_id: uuid.UUID | None = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class ScheduledFeeding:
    """A concrete feeding occurrence for display."""

    routine_id: uuid.UUID | None
    routine_name: str
    scheduled_at: datetime
    animal_ids: tuple[uuid.UUID, ...]
    slot_label: str

    @property
    def animal_count(self) -> int:
        return len(self.animal_ids)


def build_rule(
    routine_type: RoutineType,
    *,
    weekdays: Iterable[int] = (),
    interval_days: int | None = None,
) -> RecurrenceRule:
    """Validate rule fields and return the matching rule variant."""
    days = frozenset(weekdays)
    if any(day < 1 or day > 7 for day in days):
        raise ValueError("Weekdays must be between 1 (Sunday) and 7 (Saturday)")
    if routine_type is RoutineType.DAILY:
        return Daily()
    if routine_type is RoutineType.EVERY_OTHER_DAY:
        return EveryOtherDay()
    if routine_type is RoutineType.EVERY_N_DAYS:
        if interval_days is None or interval_days < 1:
            raise ValueError("Every-N-days routines require an interval of at least 1 day")
        return EveryNDays(interval_days)
    if not days:
        raise ValueError(f"{routine_type.display_name} routines require at least one weekday")
    if routine_type is RoutineType.WEEKLY:
        return Weekly(days)
    return Custom(days)


def rule_type(rule: RecurrenceRule) -> RoutineType:
    match rule:
        case Daily():
            return RoutineType.DAILY
        case EveryOtherDay():
            return RoutineType.EVERY_OTHER_DAY
        case Weekly():
            return RoutineType.WEEKLY
        case EveryNDays():
            return RoutineType.EVERY_N_DAYS
        case Custom():
            return RoutineType.CUSTOM
        case _:
            assert_never(rule)


def _daily_due(_rule: Daily, _elapsed: int, _day: date) -> bool:
    return True


def _every_other_day_due(_rule: EveryOtherDay, elapsed: int, _day: date) -> bool:
    return elapsed % 2 == 0


def _weekday_due(rule: Weekly | Custom, _elapsed: int, day: date) -> bool:
    return dates.sunday_first_weekday(day) in rule.weekdays


def _every_n_days_due(rule: EveryNDays, elapsed: int, _day: date) -> bool:
    if rule.interval_days < 1:
        return False
    return elapsed % rule.interval_days == 0


def _rule_matches(rule: RecurrenceRule, elapsed: int, day: date) -> bool:
    match rule:
        case Daily():
            return _daily_due(rule, elapsed, day)
        case EveryOtherDay():
            return _every_other_day_due(rule, elapsed, day)
        case Weekly() | Custom():
            return _weekday_due(rule, elapsed, day)
        case EveryNDays():
            return _every_n_days_due(rule, elapsed, day)
        case _:
            assert_never(rule)


def is_due(routine: RoutineSnapshot, when: datetime | date, *, tz: tzinfo = UTC) -> bool:
    """Return True when the routine calls for a feeding on ``when``'s day."""
    day = dates.local_date(when, tz)
    if day < routine.start_date:
        return False
    if routine.end_date is not None and day > routine.end_date:
        return False
    try:
        return _rule_matches(routine.rule, dates.day_count(routine.start_date, day), day)
    except (AttributeError, TypeError, ValueError):
        logger.warning("Malformed recurrence rule on routine %s", routine.name)
        return False


def _ordered_slots(routine: RoutineSnapshot) -> list[FeedingSlot]:
    return sorted(routine.slots)


def next_occurrence(
    routine: RoutineSnapshot,
    from_when: datetime | date,
    *,
    tz: tzinfo = UTC,
) -> datetime | date | None:
    """Return the next feeding at or after ``from_when``.

    Scans up to 30 days starting with ``from_when``'s own day. Slots that
    already passed on that first day are ignored. Routines without time slots
    yield the bare due date.
    """
    first_day = dates.local_date(from_when, tz)
    cutoff = dates.as_utc(from_when) if isinstance(from_when, datetime) else None
    slots = _ordered_slots(routine)

    for offset in range(NEXT_OCCURRENCE_SCAN_DAYS):
        day = dates.add_days(first_day, offset)
        if not is_due(routine, day, tz=tz):
            continue
        if not slots:
            return day
        for slot in slots:
            moment = dates.at_local_time(day, slot.hour, slot.minute, tz)
            if offset == 0 and cutoff is not None and moment < cutoff:
                continue
            return moment
    return None


def upcoming_occurrences(
    routine: RoutineSnapshot,
    from_when: datetime | date,
    days: int = DEFAULT_UPCOMING_DAYS,
    *,
    tz: tzinfo = UTC,
) -> list[ScheduledFeeding]:
    """Expand the routine over ``days`` calendar days starting today."""
    first_day = dates.local_date(from_when, tz)
    feedings: list[ScheduledFeeding] = []
    for offset in range(max(days, 0)):
        day = dates.add_days(first_day, offset)
        if not is_due(routine, day, tz=tz):
            continue
        for slot in routine.slots:
            feedings.append(
                ScheduledFeeding(
                    routine_id=routine.routine_id,
                    routine_name=routine.name,
                    scheduled_at=dates.at_local_time(day, slot.hour, slot.minute, tz),
                    animal_ids=routine.animal_ids,
                    slot_label=slot.label,
                )
            )
    return sorted(feedings, key=lambda item: item.scheduled_at)


def merge_upcoming(
    routines: Iterable[RoutineSnapshot],
    from_when: datetime | date,
    days: int = DEFAULT_UPCOMING_DAYS,
    *,
    tz: tzinfo = UTC,
) -> list[ScheduledFeeding]:
    """Upcoming feedings across several routines, sorted by time."""
    merged: list[ScheduledFeeding] = []
    for routine in routines:
        merged.extend(upcoming_occurrences(routine, from_when, days, tz=tz))
    return sorted(merged, key=lambda item: (item.scheduled_at, item.routine_name))


__all__ = [
    "Custom",
    "Daily",
    "EveryNDays",
    "EveryOtherDay",
    "FeedingSlot",
    "RecurrenceRule",
    "RoutineSnapshot",
    "RoutineType",
    "ScheduledFeeding",
    "WEEKDAY_NAMES",
    "Weekly",
    "build_rule",
    "is_due",
    "merge_upcoming",
    "next_occurrence",
    "rule_type",
    "upcoming_occurrences",
]
