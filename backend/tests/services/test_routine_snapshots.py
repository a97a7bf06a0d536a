"""Tests for turning stored routines into engine snapshots."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime

import pytest

from scalekeeper.core.clock import FixedClock, resolve_timezone
from scalekeeper.engine.recurrence import EveryNDays, FeedingSlot, RoutineType, Weekly
from scalekeeper.models import Animal, FeedingRoutine
from scalekeeper.services.feeding_routine_service import snapshot, upcoming_for_routine


def _routine(**fields) -> FeedingRoutine:
    values = {
        "id": uuid.uuid4(),
        "name": "Crickets",
        "routine_type": RoutineType.WEEKLY,
        "time_slots": [{"label": "Evening", "hour": 19, "minute": 30}, {"hour": 7}],
        "weekdays": [2, 5],
        "interval_days": None,
        "start_date": date(2024, 1, 1),
        "end_date": None,
        "is_active": True,
    }
    values.update(fields)
    routine = FeedingRoutine(**values)
    routine.animals = [Animal(id=uuid.uuid4(), name="Mango")]
    return routine


def test_snapshot_copies_rule_and_slots() -> None:
    routine = _routine()

    view = snapshot(routine)

    assert view.rule == Weekly(frozenset({2, 5}))
    assert sorted(view.slots) == [
        FeedingSlot(hour=7, minute=0, label="Feeding"),
        FeedingSlot(hour=19, minute=30, label="Evening"),
    ]
    assert view.animal_ids == tuple(routine.animal_ids)
    assert view.routine_id == routine.id


def test_snapshot_of_interval_routine() -> None:
    view = snapshot(_routine(routine_type=RoutineType.EVERY_N_DAYS, weekdays=[], interval_days=4))

    assert view.rule == EveryNDays(4)


def test_invalid_stored_rule_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    routine = _routine(weekdays=[])
    clock = FixedClock(datetime(2024, 3, 1, tzinfo=UTC))

    with caplog.at_level(logging.WARNING):
        assert upcoming_for_routine(routine, clock=clock, days=7) == []
    assert "invalid rule" in caplog.text


def test_unknown_timezone_falls_back_to_utc() -> None:
    assert resolve_timezone("Mars/Olympus_Mons").key == "UTC"
    assert resolve_timezone("America/Chicago").key == "America/Chicago"
