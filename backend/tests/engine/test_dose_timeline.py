"""Dose timeline and treatment lifecycle tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from scalekeeper.engine.doses import (
    DoseStatus,
    InvalidTransitionError,
    PlanStatus,
    administered_count,
    doses_within,
    ensure_plan_accepts_dose,
    extend_dose_times,
    generate_dose_times,
    hours_overdue,
    is_overdue,
    next_scheduled_dose,
    progress_percentage,
    status_after_administration,
    transition_dose,
    transition_plan,
)

START = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


@dataclass
class _Dose:
    sequence: int
    scheduled_at: datetime
    status: DoseStatus = DoseStatus.SCHEDULED


def test_generate_dose_times_steps_by_frequency() -> None:
    assert generate_dose_times(START, 12, 3) == [
        START,
        START + timedelta(hours=12),
        START + timedelta(hours=24),
    ]


@pytest.mark.parametrize(("frequency", "count"), [(0, 3), (12, 0), (-6, 2)])
def test_generate_dose_times_rejects_bad_cadence(frequency: int, count: int) -> None:
    with pytest.raises(ValueError):
        generate_dose_times(START, frequency, count)


def test_doses_within_counts_the_first_dose() -> None:
    assert doses_within(12, 14 * 24) == 29
    assert doses_within(24, 0) == 1


def test_extend_dose_times_stops_at_limit() -> None:
    times = extend_dose_times(START, 24, START + timedelta(hours=72))

    assert times == [START + timedelta(days=offset) for offset in (1, 2, 3)]


def test_dose_leaves_scheduled_once() -> None:
    assert transition_dose(DoseStatus.SCHEDULED, DoseStatus.ADMINISTERED) is DoseStatus.ADMINISTERED
    with pytest.raises(InvalidTransitionError):
        transition_dose(DoseStatus.ADMINISTERED, DoseStatus.SKIPPED)
    with pytest.raises(InvalidTransitionError):
        transition_dose(DoseStatus.MISSED, DoseStatus.SCHEDULED)


def test_plan_transitions() -> None:
    assert transition_plan(PlanStatus.ACTIVE, PlanStatus.PAUSED) is PlanStatus.PAUSED
    assert transition_plan(PlanStatus.PAUSED, PlanStatus.ACTIVE) is PlanStatus.ACTIVE
    assert transition_plan(PlanStatus.PAUSED, PlanStatus.DISCONTINUED) is PlanStatus.DISCONTINUED
    with pytest.raises(InvalidTransitionError):
        transition_plan(PlanStatus.ACTIVE, PlanStatus.COMPLETED)
    with pytest.raises(InvalidTransitionError):
        transition_plan(PlanStatus.DISCONTINUED, PlanStatus.ACTIVE)
    with pytest.raises(InvalidTransitionError):
        transition_plan(PlanStatus.COMPLETED, PlanStatus.PAUSED)


def test_only_active_plans_accept_administration() -> None:
    ensure_plan_accepts_dose(PlanStatus.ACTIVE, DoseStatus.ADMINISTERED)
    for status in (PlanStatus.PAUSED, PlanStatus.DISCONTINUED, PlanStatus.COMPLETED):
        with pytest.raises(InvalidTransitionError):
            ensure_plan_accepts_dose(status, DoseStatus.ADMINISTERED)


@pytest.mark.parametrize("status", list(PlanStatus))
@pytest.mark.parametrize("target", [DoseStatus.SKIPPED, DoseStatus.MISSED])
def test_skip_and_miss_ignore_plan_status(status: PlanStatus, target: DoseStatus) -> None:
    ensure_plan_accepts_dose(status, target)


def test_plan_completes_when_all_doses_administered() -> None:
    assert status_after_administration(PlanStatus.ACTIVE, 2, 3) is PlanStatus.ACTIVE
    assert status_after_administration(PlanStatus.ACTIVE, 3, 3) is PlanStatus.COMPLETED
    assert status_after_administration(PlanStatus.ACTIVE, 40, None) is PlanStatus.ACTIVE


def test_next_scheduled_dose_ignores_recorded_doses() -> None:
    doses = [
        _Dose(0, START, DoseStatus.ADMINISTERED),
        _Dose(2, START + timedelta(hours=24)),
        _Dose(1, START + timedelta(hours=12), DoseStatus.SKIPPED),
    ]

    assert next_scheduled_dose(doses) is doses[1]
    assert administered_count(doses) == 1
    assert next_scheduled_dose([doses[0]]) is None


def test_overdue_only_applies_to_scheduled_doses() -> None:
    now = START + timedelta(hours=5, minutes=30)

    assert is_overdue(DoseStatus.SCHEDULED, START, now)
    assert hours_overdue(DoseStatus.SCHEDULED, START, now) == 5
    assert not is_overdue(DoseStatus.ADMINISTERED, START, now)
    assert hours_overdue(DoseStatus.SCHEDULED, now + timedelta(hours=1), now) is None


def test_progress_percentage() -> None:
    assert progress_percentage(1, 4) == 25.0
    assert progress_percentage(3, None) == 0.0


def test_bounded_plan_generates_exactly_the_target() -> None:
    times = generate_dose_times(START, 8, 10)

    assert len(times) == 10
    assert all(later - earlier == timedelta(hours=8) for earlier, later in zip(times, times[1:]))
