"""Reminder scheduling through the outbox table.

Reminders are best-effort: they are written after the authoritative change
has been committed, in their own session, and a failure is retried and then
logged rather than surfaced to the caller.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, tzinfo
from typing import Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scalekeeper.engine import dates
from scalekeeper.engine.brumation import (
    PHASE_GUIDANCE,
    BrumationPhase,
    BrumationTimeline,
    pending_boundaries,
)
from scalekeeper.engine.cleaning import CleaningType
from scalekeeper.engine.doses import DoseStatus
from scalekeeper.engine.recurrence import RoutineSnapshot, next_occurrence
from scalekeeper.models import MedicationDose, Reminder, ReminderCategory, TreatmentPlan

logger = logging.getLogger(__name__)


class ReminderPort(Protocol):
    """Destination for scheduled and cancelled reminders."""

    async def schedule(
        self,
        identifier: str,
        fire_at: datetime | None,
        category: ReminderCategory,
        payload: dict[str, Any],
        *,
        title: str,
        body: str = "",
    ) -> None: ...

    async def cancel(self, identifier: str) -> None: ...

    async def cancel_for(self, category: ReminderCategory, key: str, value: str) -> None: ...


def feeding_identifier(routine_id: uuid.UUID) -> str:
    return f"feeding-{routine_id}"


def medication_identifier(dose_id: uuid.UUID) -> str:
    return f"medication-{dose_id}"


def cleaning_identifier(enclosure_id: uuid.UUID, cleaning_type: CleaningType) -> str:
    return f"cleaning-{enclosure_id}-{cleaning_type.value}"


def brumation_identifier(cycle_id: uuid.UUID, phase: BrumationPhase) -> str:
    return f"brumation-{cycle_id}-{phase.value}"


class OutboxReminderPort:
    """Stores reminders in the ``reminders`` table for a device notifier to drain.

    Each call uses its own session so a failed reminder write never touches
    the caller's transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def schedule(
        self,
        identifier: str,
        fire_at: datetime | None,
        category: ReminderCategory,
        payload: dict[str, Any],
        *,
        title: str,
        body: str = "",
    ) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Reminder).where(Reminder.identifier == identifier)
            )
            reminder = result.scalar_one_or_none()
            if reminder is None:
                reminder = Reminder(identifier=identifier)
                session.add(reminder)
            reminder.category = category
            reminder.fire_at = dates.as_utc(fire_at) if fire_at is not None else None
            reminder.title = title
            reminder.body = body
            reminder.payload = dict(payload)
            await session.commit()
        logger.debug("Scheduled reminder %s at %s", identifier, fire_at)

    async def cancel(self, identifier: str) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(Reminder).where(Reminder.identifier == identifier))
            await session.commit()
        logger.debug("Cancelled reminder %s", identifier)

    async def cancel_for(self, category: ReminderCategory, key: str, value: str) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Reminder).where(Reminder.category == category)
            )
            matches = [
                reminder
                for reminder in result.scalars().all()
                if str(reminder.payload.get(key)) == value
            ]
            for reminder in matches:
                await session.delete(reminder)
            await session.commit()
        logger.debug("Cancelled %s %s reminders for %s=%s", len(matches), category.value, key, value)


async def list_pending(
    session: AsyncSession, *, category: ReminderCategory | None = None
) -> list[Reminder]:
    stmt = select(Reminder).order_by(Reminder.fire_at.asc().nulls_first(), Reminder.identifier)
    if category is not None:
        stmt = stmt.where(Reminder.category == category)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def best_effort(
    description: str,
    operation: Callable[[], Awaitable[None]],
    *,
    attempts: int,
) -> bool:
    """Run a reminder update, retrying; the last failure is logged and swallowed."""
    attempts = max(attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            await operation()
        except Exception:
            if attempt == attempts:
                logger.exception(
                    "Reminder update failed after %s attempts: %s", attempts, description
                )
                return False
            logger.warning(
                "Reminder update attempt %s/%s failed: %s", attempt, attempts, description
            )
        else:
            return True
    return False


async def arm_feeding(
    port: ReminderPort,
    routine: RoutineSnapshot,
    *,
    now: datetime,
    tz: tzinfo,
) -> None:
    """Point the routine's reminder at its next feeding, or drop it."""
    if routine.routine_id is None:
        return
    identifier = feeding_identifier(routine.routine_id)
    upcoming = next_occurrence(routine, now, tz=tz) if routine.is_active else None
    if upcoming is None:
        await port.cancel(identifier)
        return
    fire_at = upcoming if isinstance(upcoming, datetime) else dates.start_of_day(upcoming, tz)
    await port.schedule(
        identifier,
        fire_at,
        ReminderCategory.FEEDING,
        {
            "routine_id": str(routine.routine_id),
            "animal_ids": [str(animal_id) for animal_id in routine.animal_ids],
        },
        title="Feeding Reminder",
        body=f"{routine.name} is due for feeding",
    )


async def arm_doses(
    port: ReminderPort,
    plan: TreatmentPlan,
    doses: Iterable[MedicationDose],
    *,
    animal_name: str,
    now: datetime,
) -> None:
    """Schedule a reminder for every future dose that is still scheduled."""
    moment = dates.as_utc(now)
    for dose in doses:
        if dose.status is not DoseStatus.SCHEDULED or dates.as_utc(dose.scheduled_at) <= moment:
            continue
        await port.schedule(
            medication_identifier(dose.id),
            dose.scheduled_at,
            ReminderCategory.MEDICATION,
            {"treatment_plan_id": str(plan.id), "dose_id": str(dose.id)},
            title="Medication Due",
            body=f"{animal_name}: {plan.medication_name} - {plan.dosage}",
        )


async def cancel_plan(port: ReminderPort, plan_id: uuid.UUID) -> None:
    await port.cancel_for(ReminderCategory.MEDICATION, "treatment_plan_id", str(plan_id))


async def arm_cleaning(
    port: ReminderPort,
    *,
    enclosure_id: uuid.UUID,
    enclosure_name: str,
    cleaning_type: CleaningType,
    fire_at: datetime | None,
) -> None:
    """Schedule the cleaning reminder, or cancel it when ``fire_at`` is None."""
    identifier = cleaning_identifier(enclosure_id, cleaning_type)
    if fire_at is None:
        await port.cancel(identifier)
        return
    await port.schedule(
        identifier,
        fire_at,
        ReminderCategory.CLEANING,
        {"enclosure_id": str(enclosure_id), "cleaning_type": cleaning_type.value},
        title="Cleaning Due",
        body=f"{enclosure_name}: {cleaning_type.display_name} due",
    )


async def arm_brumation(
    port: ReminderPort,
    *,
    cycle_id: uuid.UUID,
    animal_id: uuid.UUID,
    animal_name: str,
    timeline: BrumationTimeline,
    now: datetime,
) -> None:
    """Replace the cycle's phase reminders with one per boundary still ahead."""
    await cancel_brumation(port, cycle_id)
    for phase, boundary in pending_boundaries(timeline, now):
        await port.schedule(
            brumation_identifier(cycle_id, phase),
            boundary,
            ReminderCategory.BRUMATION,
            {
                "animal_id": str(animal_id),
                "brumation_cycle_id": str(cycle_id),
                "phase": phase.value,
            },
            title="Brumation Alert",
            body=f"{animal_name}: {PHASE_GUIDANCE[phase].display_name} phase starting",
        )


async def cancel_brumation(port: ReminderPort, cycle_id: uuid.UUID) -> None:
    for phase in BrumationPhase:
        await port.cancel(brumation_identifier(cycle_id, phase))


__all__ = [
    "OutboxReminderPort",
    "ReminderPort",
    "arm_brumation",
    "arm_cleaning",
    "arm_doses",
    "arm_feeding",
    "best_effort",
    "brumation_identifier",
    "cancel_brumation",
    "cancel_plan",
    "cleaning_identifier",
    "feeding_identifier",
    "list_pending",
    "medication_identifier",
]
