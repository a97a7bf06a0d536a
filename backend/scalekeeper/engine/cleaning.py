"""Enclosure cleaning urgency calculations."""

from __future__ import annotations

import enum
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, tzinfo

from scalekeeper.engine import dates

DUE_SOON_RATIO = 0.8


class CleaningType(str, enum.Enum):
    """Maintenance tasks tracked per enclosure."""

    SPOT_CLEAN = "spot_clean"
    SUBSTRATE_CHANGE = "substrate_change"
    DEEP_CLEAN = "deep_clean"
    WATER_CHANGE = "water_change"
    BIOACTIVE_MAINTENANCE = "bioactive_maintenance"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def default_interval_days(self) -> int:
        return _DEFAULT_INTERVALS[self]


_DEFAULT_INTERVALS = {
    CleaningType.SPOT_CLEAN: 3,
    CleaningType.SUBSTRATE_CHANGE: 30,
    CleaningType.DEEP_CLEAN: 90,
    CleaningType.WATER_CHANGE: 7,
    CleaningType.BIOACTIVE_MAINTENANCE: 14,
    CleaningType.CUSTOM: 30,
}


class CleaningUrgency(str, enum.Enum):
    ON_TRACK = "on_track"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"


@dataclass(frozen=True, slots=True)
class CleaningStatus:
    """Derived status of one cleaning type in one enclosure."""

    cleaning_type: CleaningType
    last_cleaned: datetime | None
    interval_days: int
    enclosure_name: str
    days_since_last_clean: int | None
    days_until_due: int | None
    urgency: CleaningUrgency
    enclosure_id: uuid.UUID | None = None

    @property
    def never_cleaned(self) -> bool:
        return self.last_cleaned is None

    @property
    def display_days_until_due(self) -> int:
        return self.days_until_due if self.days_until_due is not None else 0


def classify(days_since_last_clean: int | None, interval_days: int) -> CleaningUrgency:
    if days_since_last_clean is None or interval_days <= 0:
        return CleaningUrgency.OVERDUE
    ratio = days_since_last_clean / interval_days
    if ratio >= 1.0:
        return CleaningUrgency.OVERDUE
    if ratio >= DUE_SOON_RATIO:
        return CleaningUrgency.DUE_SOON
    return CleaningUrgency.ON_TRACK


def evaluate(
    cleaning_type: CleaningType,
    last_cleaned: datetime | None,
    interval_days: int,
    *,
    now: datetime,
    enclosure_name: str = "",
    enclosure_id: uuid.UUID | None = None,
    tz: tzinfo = UTC,
) -> CleaningStatus:
    days_since = (
        dates.whole_days_between(last_cleaned, now, tz) if last_cleaned is not None else None
    )
    return CleaningStatus(
        cleaning_type=cleaning_type,
        last_cleaned=dates.as_utc(last_cleaned) if last_cleaned is not None else None,
        interval_days=interval_days,
        enclosure_name=enclosure_name,
        days_since_last_clean=days_since,
        days_until_due=interval_days - days_since if days_since is not None else None,
        urgency=classify(days_since, interval_days),
        enclosure_id=enclosure_id,
    )


def sort_by_due(statuses: Iterable[CleaningStatus]) -> list[CleaningStatus]:
    return sorted(statuses, key=lambda status: status.display_days_until_due)


def partition_attention(
    statuses: Iterable[CleaningStatus],
) -> tuple[list[CleaningStatus], list[CleaningStatus]]:
    """Split statuses into (overdue, due soon); on-track entries are dropped.

    Overdue entries are ordered by the longest time since cleaning, with
    never-cleaned entries first.
    """
    overdue: list[CleaningStatus] = []
    due_soon: list[CleaningStatus] = []
    for status in statuses:
        if status.urgency is CleaningUrgency.OVERDUE:
            overdue.append(status)
        elif status.urgency is CleaningUrgency.DUE_SOON:
            due_soon.append(status)
    overdue.sort(
        key=lambda status: (
            status.days_since_last_clean is not None,
            -(status.days_since_last_clean or 0),
        )
    )
    return overdue, sort_by_due(due_soon)


def reminder_fire_at(
    last_cleaned: datetime | None,
    interval_days: int,
    lead_days: int,
    *,
    now: datetime,
) -> datetime | None:
    """When to remind about the next cleaning, or None if that moment has passed."""
    reference = dates.as_utc(last_cleaned if last_cleaned is not None else now)
    fire_at = reference + timedelta(days=interval_days - lead_days)
    if fire_at <= dates.as_utc(now):
        return None
    return fire_at


def default_schedule_types(*, bioactive: bool) -> list[CleaningType]:
    types = [
        CleaningType.SPOT_CLEAN,
        CleaningType.WATER_CHANGE,
        CleaningType.SUBSTRATE_CHANGE,
        CleaningType.DEEP_CLEAN,
    ]
    if bioactive:
        types.append(CleaningType.BIOACTIVE_MAINTENANCE)
    return types


__all__ = [
    "CleaningStatus",
    "CleaningType",
    "CleaningUrgency",
    "classify",
    "default_schedule_types",
    "evaluate",
    "partition_attention",
    "reminder_fire_at",
    "sort_by_due",
]
