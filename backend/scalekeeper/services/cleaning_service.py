"""Enclosure, cleaning schedule and cleaning status services."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import cleaning, dates
from scalekeeper.engine.cleaning import CleaningStatus, CleaningType
from scalekeeper.models import CleaningEvent, CleaningSchedule, Enclosure
from scalekeeper.schemas.enclosure import (
    CleaningAttentionRead,
    CleaningEventCreate,
    CleaningScheduleUpsert,
    CleaningStatusRead,
    EnclosureCreate,
)
from scalekeeper.services import reminder_service
from scalekeeper.services.reminder_service import ReminderPort

logger = logging.getLogger(__name__)


def status_read(status: CleaningStatus) -> CleaningStatusRead:
    return CleaningStatusRead(
        enclosure_id=status.enclosure_id,
        enclosure_name=status.enclosure_name,
        cleaning_type=status.cleaning_type,
        cleaning_type_display=status.cleaning_type.display_name,
        last_cleaned=status.last_cleaned,
        never_cleaned=status.never_cleaned,
        interval_days=status.interval_days,
        days_since_last_clean=status.days_since_last_clean,
        days_until_due=status.days_until_due,
        display_days_until_due=status.display_days_until_due,
        urgency=status.urgency,
    )


async def _last_cleaned(
    session: AsyncSession, enclosure_ids: list[uuid.UUID]
) -> dict[tuple[uuid.UUID, CleaningType], datetime]:
    if not enclosure_ids:
        return {}
    result = await session.execute(
        select(
            CleaningEvent.enclosure_id,
            CleaningEvent.cleaning_type,
            func.max(CleaningEvent.cleaned_at),
        )
        .where(CleaningEvent.enclosure_id.in_(enclosure_ids))
        .group_by(CleaningEvent.enclosure_id, CleaningEvent.cleaning_type)
    )
    return {
        (enclosure_id, cleaning_type): dates.as_utc(cleaned_at)
        for enclosure_id, cleaning_type, cleaned_at in result.all()
    }


async def _arm(
    port: ReminderPort,
    enclosure: Enclosure,
    schedule: CleaningSchedule,
    last_cleaned: datetime | None,
    *,
    clock: SystemClock,
    attempts: int,
) -> None:
    fire_at = None
    if schedule.reminder_enabled:
        fire_at = cleaning.reminder_fire_at(
            last_cleaned,
            schedule.interval_days,
            schedule.reminder_lead_days,
            now=clock.now(),
        )
    await reminder_service.best_effort(
        f"cleaning reminder for {enclosure.id}/{schedule.cleaning_type.value}",
        lambda: reminder_service.arm_cleaning(
            port,
            enclosure_id=enclosure.id,
            enclosure_name=enclosure.name,
            cleaning_type=schedule.cleaning_type,
            fire_at=fire_at,
        ),
        attempts=attempts,
    )


async def create_enclosure(
    session: AsyncSession,
    payload: EnclosureCreate,
    *,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> Enclosure:
    enclosure = Enclosure(
        name=payload.name, is_bioactive=payload.is_bioactive, notes=payload.notes
    )
    schedules: list[CleaningSchedule] = []
    if payload.seed_default_schedules:
        schedules = [
            CleaningSchedule(
                cleaning_type=cleaning_type,
                interval_days=cleaning_type.default_interval_days,
                reminder_enabled=True,
                reminder_lead_days=1,
            )
            for cleaning_type in cleaning.default_schedule_types(bioactive=payload.is_bioactive)
        ]
        enclosure.cleaning_schedules = schedules
    session.add(enclosure)
    await session.commit()
    for schedule in schedules:
        await _arm(reminders, enclosure, schedule, None, clock=clock, attempts=reminder_attempts)
    return enclosure


async def list_enclosures(session: AsyncSession) -> list[Enclosure]:
    result = await session.execute(select(Enclosure).order_by(Enclosure.name))
    return list(result.scalars().all())


async def get_enclosure(session: AsyncSession, *, enclosure_id: uuid.UUID) -> Enclosure | None:
    return await session.get(Enclosure, enclosure_id)


async def list_schedules(
    session: AsyncSession, *, enclosure_id: uuid.UUID
) -> list[CleaningSchedule]:
    result = await session.execute(
        select(CleaningSchedule)
        .where(CleaningSchedule.enclosure_id == enclosure_id)
        .order_by(CleaningSchedule.interval_days, CleaningSchedule.cleaning_type)
    )
    return list(result.scalars().all())


async def _get_schedule(
    session: AsyncSession, enclosure_id: uuid.UUID, cleaning_type: CleaningType
) -> CleaningSchedule | None:
    result = await session.execute(
        select(CleaningSchedule).where(
            CleaningSchedule.enclosure_id == enclosure_id,
            CleaningSchedule.cleaning_type == cleaning_type,
        )
    )
    return result.scalar_one_or_none()


async def upsert_schedule(
    session: AsyncSession,
    *,
    enclosure: Enclosure,
    cleaning_type: CleaningType,
    payload: CleaningScheduleUpsert,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> CleaningSchedule:
    """Create or replace the schedule for one cleaning type."""
    schedule = await _get_schedule(session, enclosure.id, cleaning_type)
    if schedule is None:
        schedule = CleaningSchedule(enclosure_id=enclosure.id, cleaning_type=cleaning_type)
        session.add(schedule)
    schedule.interval_days = payload.interval_days or cleaning_type.default_interval_days
    schedule.reminder_enabled = payload.reminder_enabled
    schedule.reminder_lead_days = payload.reminder_lead_days
    await session.commit()

    last = (await _last_cleaned(session, [enclosure.id])).get((enclosure.id, cleaning_type))
    await _arm(reminders, enclosure, schedule, last, clock=clock, attempts=reminder_attempts)
    return schedule


async def delete_schedule(
    session: AsyncSession,
    *,
    enclosure: Enclosure,
    cleaning_type: CleaningType,
    reminders: ReminderPort,
    reminder_attempts: int,
) -> bool:
    schedule = await _get_schedule(session, enclosure.id, cleaning_type)
    if schedule is None:
        return False
    await session.delete(schedule)
    await session.commit()
    await reminder_service.best_effort(
        f"cancel cleaning reminder for {enclosure.id}/{cleaning_type.value}",
        lambda: reminders.cancel(reminder_service.cleaning_identifier(enclosure.id, cleaning_type)),
        attempts=reminder_attempts,
    )
    return True


async def log_cleaning(
    session: AsyncSession,
    *,
    enclosure: Enclosure,
    payload: CleaningEventCreate,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> CleaningEvent:
    event = CleaningEvent(
        enclosure_id=enclosure.id,
        cleaning_type=payload.cleaning_type,
        cleaned_at=dates.as_utc(payload.cleaned_at or clock.now()),
        supplies_used=list(payload.supplies_used),
        notes=payload.notes,
    )
    session.add(event)
    await session.commit()
    logger.info("Logged %s for enclosure %s", payload.cleaning_type.value, enclosure.id)

    schedule = await _get_schedule(session, enclosure.id, payload.cleaning_type)
    if schedule is not None:
        last = (await _last_cleaned(session, [enclosure.id])).get(
            (enclosure.id, payload.cleaning_type)
        )
        await _arm(reminders, enclosure, schedule, last, clock=clock, attempts=reminder_attempts)
    return event


async def cleaning_history(
    session: AsyncSession,
    *,
    enclosure_id: uuid.UUID,
    cleaning_type: CleaningType | None = None,
    limit: int | None = None,
) -> list[CleaningEvent]:
    """Cleaning events for an enclosure, newest first."""
    stmt = (
        select(CleaningEvent)
        .where(CleaningEvent.enclosure_id == enclosure_id)
        .order_by(CleaningEvent.cleaned_at.desc())
    )
    if cleaning_type is not None:
        stmt = stmt.where(CleaningEvent.cleaning_type == cleaning_type)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _statuses(
    session: AsyncSession, enclosures: list[Enclosure], *, clock: SystemClock
) -> list[CleaningStatus]:
    by_id = {enclosure.id: enclosure for enclosure in enclosures}
    last_cleaned = await _last_cleaned(session, list(by_id))
    result = await session.execute(
        select(CleaningSchedule).where(CleaningSchedule.enclosure_id.in_(list(by_id)))
    )
    now = clock.now()
    return [
        cleaning.evaluate(
            schedule.cleaning_type,
            last_cleaned.get((schedule.enclosure_id, schedule.cleaning_type)),
            schedule.interval_days,
            now=now,
            enclosure_name=by_id[schedule.enclosure_id].name,
            enclosure_id=schedule.enclosure_id,
            tz=clock.tz,
        )
        for schedule in result.scalars().all()
    ]


async def enclosure_status(
    session: AsyncSession, *, enclosure: Enclosure, clock: SystemClock
) -> list[CleaningStatusRead]:
    """Per-type statuses for one enclosure, soonest due first."""
    statuses = await _statuses(session, [enclosure], clock=clock)
    return [status_read(status) for status in cleaning.sort_by_due(statuses)]


async def attention(session: AsyncSession, *, clock: SystemClock) -> CleaningAttentionRead:
    """Overdue and due-soon cleanings across every enclosure."""
    statuses = await _statuses(session, await list_enclosures(session), clock=clock)
    overdue, due_soon = cleaning.partition_attention(statuses)
    return CleaningAttentionRead(
        overdue=[status_read(status) for status in overdue],
        due_soon=[status_read(status) for status in due_soon],
    )
