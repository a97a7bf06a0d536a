"""Treatment plan dose timelines and lifecycle rules."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, TypeVar

from scalekeeper.engine import dates


class DoseStatus(str, enum.Enum):
    """Lifecycle of a single medication dose."""

    SCHEDULED = "scheduled"
    ADMINISTERED = "administered"
    SKIPPED = "skipped"
    MISSED = "missed"


class PlanStatus(str, enum.Enum):
    """Lifecycle of a treatment plan."""

    ACTIVE = "active"
    PAUSED = "paused"
    DISCONTINUED = "discontinued"
    COMPLETED = "completed"


class InvalidTransitionError(ValueError):
    """Raised when a dose or plan is asked to move to a disallowed state."""


TERMINAL_PLAN_STATUSES = frozenset({PlanStatus.DISCONTINUED, PlanStatus.COMPLETED})

_PLAN_TRANSITIONS: dict[PlanStatus, frozenset[PlanStatus]] = {
    PlanStatus.ACTIVE: frozenset({PlanStatus.PAUSED, PlanStatus.DISCONTINUED}),
    PlanStatus.PAUSED: frozenset({PlanStatus.ACTIVE, PlanStatus.DISCONTINUED}),
    PlanStatus.DISCONTINUED: frozenset(),
    PlanStatus.COMPLETED: frozenset(),
}


class DoseLike(Protocol):
    status: DoseStatus
    scheduled_at: datetime
    sequence: int


DoseT = TypeVar("DoseT", bound=DoseLike)


def _validate_cadence(frequency_hours: int, total_doses: int) -> None:
    if frequency_hours < 1:
        raise ValueError("Dose frequency must be at least 1 hour")
    if total_doses < 1:
        raise ValueError("Dose count must be at least 1")


def generate_dose_times(
    start_at: datetime, frequency_hours: int, total_doses: int
) -> list[datetime]:
    """Return ``total_doses`` times at ``start + k * frequency_hours``."""
    _validate_cadence(frequency_hours, total_doses)
    start = dates.as_utc(start_at)
    return [dates.add_hours(start, k * frequency_hours) for k in range(total_doses)]


def doses_within(frequency_hours: int, horizon_hours: int) -> int:
    """How many doses fit in a horizon, counting the dose at hour zero."""
    if frequency_hours < 1:
        raise ValueError("Dose frequency must be at least 1 hour")
    return max(horizon_hours, 0) // frequency_hours + 1


def extend_dose_times(
    last_scheduled_at: datetime,
    frequency_hours: int,
    until: datetime,
) -> list[datetime]:
    """Continue an open-ended timeline after its last dose up to ``until``."""
    if frequency_hours < 1:
        raise ValueError("Dose frequency must be at least 1 hour")
    limit = dates.as_utc(until)
    times: list[datetime] = []
    moment = dates.add_hours(last_scheduled_at, frequency_hours)
    while moment <= limit:
        times.append(moment)
        moment = dates.add_hours(moment, frequency_hours)
    return times


def transition_dose(current: DoseStatus, target: DoseStatus) -> DoseStatus:
    """A dose leaves ``scheduled`` exactly once and never returns."""
    if target is DoseStatus.SCHEDULED:
        raise InvalidTransitionError("Doses cannot be rescheduled")
    if current is not DoseStatus.SCHEDULED:
        raise InvalidTransitionError(f"Dose is already {current.value}")
    return target


def ensure_plan_accepts_dose(plan_status: PlanStatus, target: DoseStatus) -> None:
    """Administration needs an active plan; skip and miss only need a scheduled dose."""
    if target is DoseStatus.ADMINISTERED and plan_status is not PlanStatus.ACTIVE:
        raise InvalidTransitionError(
            f"Doses cannot be administered while the plan is {plan_status.value}"
        )


def transition_plan(current: PlanStatus, target: PlanStatus) -> PlanStatus:
    """Apply a user-initiated plan transition.

    ``completed`` is reached only through :func:`status_after_administration`.
    """
    if target is PlanStatus.COMPLETED:
        raise InvalidTransitionError("Plans complete automatically")
    if target not in _PLAN_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot move plan from {current.value} to {target.value}"
        )
    return target


def status_after_administration(
    current: PlanStatus, administered_count: int, total_doses: int | None
) -> PlanStatus:
    if current is not PlanStatus.ACTIVE or total_doses is None:
        return current
    if administered_count >= total_doses:
        return PlanStatus.COMPLETED
    return current


def is_overdue(status: DoseStatus, scheduled_at: datetime, now: datetime) -> bool:
    return status is DoseStatus.SCHEDULED and dates.as_utc(scheduled_at) < dates.as_utc(now)


def hours_overdue(status: DoseStatus, scheduled_at: datetime, now: datetime) -> int | None:
    if not is_overdue(status, scheduled_at, now):
        return None
    elapsed = dates.as_utc(now) - dates.as_utc(scheduled_at)
    return int(elapsed.total_seconds() // 3600)


def next_scheduled_dose(doses: Iterable[DoseT]) -> DoseT | None:
    """Earliest still-scheduled dose; ties break by sequence."""
    pending = [dose for dose in doses if dose.status is DoseStatus.SCHEDULED]
    if not pending:
        return None
    return min(pending, key=lambda dose: (dates.as_utc(dose.scheduled_at), dose.sequence))


def administered_count(doses: Iterable[DoseLike]) -> int:
    return sum(1 for dose in doses if dose.status is DoseStatus.ADMINISTERED)


def progress_percentage(administered: int, total_doses: int | None) -> float:
    if not total_doses:
        return 0.0
    return administered / total_doses * 100


__all__ = [
    "DoseStatus",
    "InvalidTransitionError",
    "PlanStatus",
    "TERMINAL_PLAN_STATUSES",
    "administered_count",
    "doses_within",
    "ensure_plan_accepts_dose",
    "extend_dose_times",
    "generate_dose_times",
    "hours_overdue",
    "is_overdue",
    "next_scheduled_dose",
    "progress_percentage",
    "status_after_administration",
    "transition_dose",
    "transition_plan",
]
