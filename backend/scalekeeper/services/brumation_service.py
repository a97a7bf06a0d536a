"""Brumation cycle services."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import brumation
from scalekeeper.engine.brumation import BrumationPhase, BrumationTimeline
from scalekeeper.models import BrumationCycle
from scalekeeper.schemas.brumation import (
    BrumationCycleCreate,
    BrumationCycleDetail,
    BrumationCycleRead,
    BrumationCycleUpdate,
    PhaseGuidanceRead,
)
from scalekeeper.services import reminder_service
from scalekeeper.services.animal_service import require_animal
from scalekeeper.services.reminder_service import ReminderPort

_BOUNDARY_FIELDS = ("cooldown_start", "full_brumation_start", "warmup_start", "brumation_end")


def cycle_detail(cycle: BrumationCycle, *, clock: SystemClock) -> BrumationCycleDetail:
    """Serialize a cycle with its phase as of the clock's current time."""
    timeline = cycle.timeline()
    report = brumation.report(timeline, clock.now(), tz=clock.tz)
    guidance = report.guidance
    return BrumationCycleDetail(
        **BrumationCycleRead.model_validate(cycle).model_dump(),
        phase=report.phase,
        next_phase=report.next_phase,
        days_in_phase=report.days_in_phase,
        days_until_next_phase=report.days_until_next_phase,
        next_phase_not_scheduled=(
            report.phase not in (None, BrumationPhase.COMPLETE)
            and report.days_until_next_phase is None
        ),
        progress=report.progress,
        guidance=(
            PhaseGuidanceRead(
                display_name=guidance.display_name,
                description=guidance.description,
                tasks=list(guidance.tasks),
            )
            if guidance is not None
            else None
        ),
        total_days=brumation.total_brumation_days(timeline, tz=clock.tz),
        weight_change_grams=brumation.weight_change(
            cycle.pre_weight_grams, cycle.post_weight_grams
        ),
        weight_change_percentage=brumation.weight_change_percentage(
            cycle.pre_weight_grams, cycle.post_weight_grams
        ),
    )


async def _rearm(
    session: AsyncSession,
    port: ReminderPort,
    cycle: BrumationCycle,
    *,
    clock: SystemClock,
    attempts: int,
) -> None:
    animal = await require_animal(session, cycle.animal_id)
    timeline = cycle.timeline()
    await reminder_service.best_effort(
        f"brumation reminders for cycle {cycle.id}",
        lambda: reminder_service.arm_brumation(
            port,
            cycle_id=cycle.id,
            animal_id=animal.id,
            animal_name=animal.name,
            timeline=timeline,
            now=clock.now(),
        ),
        attempts=attempts,
    )


async def create_cycle(
    session: AsyncSession,
    payload: BrumationCycleCreate,
    *,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> BrumationCycle:
    await require_animal(session, payload.animal_id)
    cycle = BrumationCycle(**payload.model_dump())
    brumation.validate_boundaries(cycle.timeline())
    session.add(cycle)
    await session.commit()
    await _rearm(session, reminders, cycle, clock=clock, attempts=reminder_attempts)
    return cycle


async def list_cycles(
    session: AsyncSession, *, animal_id: uuid.UUID | None = None
) -> list[BrumationCycle]:
    stmt = select(BrumationCycle).order_by(
        BrumationCycle.year.desc(), BrumationCycle.created_at.desc()
    )
    if animal_id is not None:
        stmt = stmt.where(BrumationCycle.animal_id == animal_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_cycle(session: AsyncSession, *, cycle_id: uuid.UUID) -> BrumationCycle | None:
    return await session.get(BrumationCycle, cycle_id)


async def update_cycle(
    session: AsyncSession,
    *,
    cycle: BrumationCycle,
    payload: BrumationCycleUpdate,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> BrumationCycle:
    updates = payload.model_dump(exclude_unset=True)
    if "status" in updates and updates["status"] is None:
        del updates["status"]
    merged = {field: updates.get(field, getattr(cycle, field)) for field in _BOUNDARY_FIELDS}
    brumation.validate_boundaries(
        BrumationTimeline(status=updates.get("status", cycle.status), **merged)
    )
    for field, value in updates.items():
        setattr(cycle, field, value)
    await session.commit()
    if _reminders_affected(updates):
        await _rearm(session, reminders, cycle, clock=clock, attempts=reminder_attempts)
    return cycle


def _reminders_affected(updates: dict[str, object]) -> bool:
    return "status" in updates or any(field in updates for field in _BOUNDARY_FIELDS)
