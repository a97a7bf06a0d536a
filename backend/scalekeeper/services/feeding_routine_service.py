"""Feeding routine services."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import recurrence
from scalekeeper.engine.recurrence import (
    FeedingSlot,
    RoutineSnapshot,
    RoutineType,
    ScheduledFeeding,
)
from scalekeeper.models import Animal, FeedingRoutine, feeding_routine_animals
from scalekeeper.schemas.feeding import FeedingRoutineCreate, FeedingRoutineUpdate, TimeSlot
from scalekeeper.services import reminder_service
from scalekeeper.services.reminder_service import ReminderPort

logger = logging.getLogger(__name__)

# Explicit nulls clear optional fields; these ignore them.
_NON_NULLABLE_UPDATES = frozenset(
    {"name", "routine_type", "weekdays", "start_date", "is_active", "time_slots", "animal_ids"}
)


def _validate_rule(
    routine_type: RoutineType,
    weekdays: list[int],
    interval_days: int | None,
    start_date: date,
    end_date: date | None,
) -> None:
    recurrence.build_rule(routine_type, weekdays=weekdays, interval_days=interval_days)
    if end_date is not None and end_date < start_date:
        raise ValueError("End date must not precede start date")


def _slot_dicts(slots: list[TimeSlot]) -> list[dict[str, Any]]:
    return [slot.model_dump() for slot in slots]


async def _load_animals(session: AsyncSession, animal_ids: list[uuid.UUID]) -> list[Animal]:
    if not animal_ids:
        return []
    unique_ids = set(animal_ids)
    result = await session.execute(select(Animal).where(Animal.id.in_(unique_ids)))
    animals = list(result.scalars().all())
    if len(animals) != len(unique_ids):
        raise ValueError("Animal not found")
    return animals


def snapshot(routine: FeedingRoutine) -> RoutineSnapshot:
    """Immutable engine view of a stored routine."""
    return RoutineSnapshot(
        name=routine.name,
        rule=recurrence.build_rule(
            routine.routine_type,
            weekdays=routine.weekdays or (),
            interval_days=routine.interval_days,
        ),
        start_date=routine.start_date,
        end_date=routine.end_date,
        slots=tuple(
            FeedingSlot(
                hour=int(slot["hour"]),
                minute=int(slot.get("minute", 0)),
                label=str(slot.get("label", "Feeding")),
            )
            for slot in routine.time_slots or ()
        ),
        animal_ids=tuple(routine.animal_ids),
        routine_id=routine.id,
        is_active=routine.is_active,
    )


def _snapshot_or_none(routine: FeedingRoutine) -> RoutineSnapshot | None:
    try:
        return snapshot(routine)
    except ValueError:
        logger.warning("Skipping feeding routine %s with an invalid rule", routine.id)
        return None


async def _rearm(
    port: ReminderPort, routine: FeedingRoutine, *, clock: SystemClock, attempts: int
) -> None:
    view = _snapshot_or_none(routine)
    if view is None:
        return
    await reminder_service.best_effort(
        f"feeding reminder for routine {routine.id}",
        lambda: reminder_service.arm_feeding(port, view, now=clock.now(), tz=clock.tz),
        attempts=attempts,
    )


def _with_animals(stmt: Select[tuple[FeedingRoutine]]) -> Select[tuple[FeedingRoutine]]:
    return stmt.options(selectinload(FeedingRoutine.animals))


async def create_routine(
    session: AsyncSession,
    payload: FeedingRoutineCreate,
    *,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> FeedingRoutine:
    _validate_rule(
        payload.routine_type,
        payload.weekdays,
        payload.interval_days,
        payload.start_date,
        payload.end_date,
    )
    animals = await _load_animals(session, payload.animal_ids)
    routine = FeedingRoutine(
        name=payload.name,
        routine_type=payload.routine_type,
        time_slots=_slot_dicts(payload.time_slots),
        weekdays=sorted(set(payload.weekdays)),
        interval_days=payload.interval_days,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=payload.is_active,
        notes=payload.notes,
        animals=animals,
    )
    session.add(routine)
    await session.commit()
    logger.info("Created feeding routine %s (%s)", routine.id, routine.routine_type.value)
    await _rearm(reminders, routine, clock=clock, attempts=reminder_attempts)
    return routine


async def list_routines(
    session: AsyncSession,
    *,
    animal_id: uuid.UUID | None = None,
    active_only: bool = False,
) -> list[FeedingRoutine]:
    stmt = _with_animals(select(FeedingRoutine)).order_by(FeedingRoutine.name)
    if animal_id is not None:
        stmt = stmt.join(
            feeding_routine_animals,
            feeding_routine_animals.c.routine_id == FeedingRoutine.id,
        ).where(feeding_routine_animals.c.animal_id == animal_id)
    if active_only:
        stmt = stmt.where(FeedingRoutine.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_routine(
    session: AsyncSession, *, routine_id: uuid.UUID
) -> FeedingRoutine | None:
    result = await session.execute(
        _with_animals(select(FeedingRoutine)).where(FeedingRoutine.id == routine_id)
    )
    return result.scalar_one_or_none()


async def update_routine(
    session: AsyncSession,
    *,
    routine: FeedingRoutine,
    payload: FeedingRoutineUpdate,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> FeedingRoutine:
    updates = payload.model_dump(exclude_unset=True)
    updates = {
        field: value
        for field, value in updates.items()
        if value is not None or field not in _NON_NULLABLE_UPDATES
    }
    if "weekdays" in updates:
        updates["weekdays"] = sorted(set(updates["weekdays"]))
    _validate_rule(
        updates.get("routine_type", routine.routine_type),
        updates.get("weekdays", routine.weekdays),
        updates.get("interval_days", routine.interval_days),
        updates.get("start_date", routine.start_date),
        updates.get("end_date", routine.end_date),
    )
    if "animal_ids" in updates:
        routine.animals = await _load_animals(session, updates.pop("animal_ids"))
    if "time_slots" in updates:
        updates.pop("time_slots")
        routine.time_slots = _slot_dicts(payload.time_slots or [])
    for field, value in updates.items():
        setattr(routine, field, value)

    await session.commit()
    await _rearm(reminders, routine, clock=clock, attempts=reminder_attempts)
    return routine


async def delete_routine(
    session: AsyncSession,
    *,
    routine: FeedingRoutine,
    reminders: ReminderPort,
    reminder_attempts: int,
) -> None:
    routine_id = routine.id
    await session.delete(routine)
    await session.commit()
    await reminder_service.best_effort(
        f"cancel feeding reminder for routine {routine_id}",
        lambda: reminders.cancel(reminder_service.feeding_identifier(routine_id)),
        attempts=reminder_attempts,
    )


def next_feeding(routine: FeedingRoutine, *, clock: SystemClock) -> datetime | date | None:
    """Next feeding for an active routine; inactive or invalid routines have none."""
    view = _snapshot_or_none(routine)
    if view is None or not view.is_active:
        return None
    return recurrence.next_occurrence(view, clock.now(), tz=clock.tz)


def upcoming_for_routine(
    routine: FeedingRoutine, *, clock: SystemClock, days: int
) -> list[ScheduledFeeding]:
    view = _snapshot_or_none(routine)
    if view is None or not view.is_active:
        return []
    return recurrence.upcoming_occurrences(view, clock.now(), days, tz=clock.tz)


async def upcoming_feedings(
    session: AsyncSession,
    *,
    clock: SystemClock,
    days: int,
    animal_id: uuid.UUID | None = None,
) -> list[ScheduledFeeding]:
    """Feedings across all active routines over the next ``days`` days."""
    routines = await list_routines(session, animal_id=animal_id, active_only=True)
    views = [view for view in map(_snapshot_or_none, routines) if view is not None]
    return recurrence.merge_upcoming(views, clock.now(), days, tz=clock.tz)
