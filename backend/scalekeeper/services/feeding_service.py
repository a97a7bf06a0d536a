"""Feeding history, hunger and feeding status services."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import dates, hunger
from scalekeeper.engine.hunger import (
    FeedingRecord,
    HungerUrgency,
    WeightReading,
    WeightTrend,
)
from scalekeeper.models import Animal, FeedingEvent, WeightRecord
from scalekeeper.schemas.feeding import (
    FeedingEventCreate,
    FeedingStatsRead,
    FeedingStatusRead,
    HungerRead,
)
from scalekeeper.services.animal_service import require_animal

_EXTENDED_BANDS = frozenset(
    {HungerUrgency.EXTENDED, HungerUrgency.CONCERNING, HungerUrgency.CRITICAL}
)


def _records(events: Sequence[FeedingEvent]) -> list[FeedingRecord]:
    return [FeedingRecord(fed_at=event.fed_at, response=event.response) for event in events]


def _readings(weights: Sequence[WeightRecord]) -> list[WeightReading]:
    return [
        WeightReading(recorded_at=weight.recorded_at, grams=weight.weight_grams)
        for weight in weights
    ]


def _fasting_trend(
    readings: list[WeightReading], duration: hunger.HungerDuration
) -> WeightTrend | None:
    """Trend from the last weigh-in at the final meal to the latest one since."""
    if duration.last_successful_feeding is None:
        return hunger.trend_between(
            sorted(readings, key=lambda reading: dates.as_utc(reading.recorded_at))[-2:]
        )
    cutoff = dates.as_utc(duration.last_successful_feeding)
    before = [r for r in readings if dates.as_utc(r.recorded_at) <= cutoff]
    during = [r for r in readings if dates.as_utc(r.recorded_at) > cutoff]
    if not during:
        return None
    window = during + ([max(before, key=lambda r: dates.as_utc(r.recorded_at))] if before else [])
    return hunger.trend_between(window)


def _hunger_read(animal: Animal, *, clock: SystemClock) -> HungerRead:
    readings = _readings(animal.weights)
    duration = hunger.hunger_from_history(
        _records(animal.feedings), readings, now=clock.now(), tz=clock.tz
    )
    trend = _fasting_trend(readings, duration)
    urgency = duration.urgency
    return HungerRead(
        animal_id=animal.id,
        animal_name=animal.name,
        days_since_last_meal=duration.days_since_last_meal,
        last_successful_feeding=duration.last_successful_feeding,
        never_fed=duration.days_since_last_meal is None,
        refusal_count=duration.refusal_count,
        weight_change_during_strike=duration.weight_change_during_strike,
        significant_weight_loss=duration.significant_weight_loss,
        weight_trend=trend,
        urgency=urgency,
        urgency_advice=urgency.advice,
        advisory=hunger.advisory(duration, trend),
        display_text=duration.display_text,
    )


async def _load_with_history(session: AsyncSession, animal_id: uuid.UUID) -> Animal:
    result = await session.execute(
        select(Animal)
        .options(selectinload(Animal.feedings), selectinload(Animal.weights))
        .where(Animal.id == animal_id)
    )
    animal = result.scalar_one_or_none()
    if animal is None:
        raise ValueError("Animal not found")
    return animal


async def log_feeding(
    session: AsyncSession,
    *,
    animal_id: uuid.UUID,
    payload: FeedingEventCreate,
    clock: SystemClock,
) -> FeedingEvent:
    await require_animal(session, animal_id)
    data = payload.model_dump()
    data["fed_at"] = dates.as_utc(payload.fed_at or clock.now())
    event = FeedingEvent(animal_id=animal_id, **data)
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return event


async def list_feedings(
    session: AsyncSession, *, animal_id: uuid.UUID, limit: int | None = None
) -> list[FeedingEvent]:
    """Feeding events for an animal, newest first."""
    await require_animal(session, animal_id)
    stmt = (
        select(FeedingEvent)
        .where(FeedingEvent.animal_id == animal_id)
        .order_by(FeedingEvent.fed_at.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_hunger(
    session: AsyncSession, *, animal_id: uuid.UUID, clock: SystemClock
) -> HungerRead:
    animal = await _load_with_history(session, animal_id)
    return _hunger_read(animal, clock=clock)


async def get_feeding_stats(
    session: AsyncSession, *, animal_id: uuid.UUID, clock: SystemClock
) -> FeedingStatsRead:
    animal = await _load_with_history(session, animal_id)
    stats = hunger.feeding_stats(_records(animal.feedings), tz=clock.tz)
    return FeedingStatsRead(
        animal_id=animal.id,
        total_feedings=stats.total_feedings,
        successful_feedings=stats.successful_feedings,
        refusals=stats.refusals,
        success_rate=stats.success_rate,
        refusal_rate=stats.refusal_rate,
        average_interval_days=stats.average_interval_days,
        last_feeding_date=stats.last_feeding_date,
    )


async def get_feeding_status(
    session: AsyncSession,
    *,
    animal_id: uuid.UUID,
    clock: SystemClock,
    interval_days: int,
) -> FeedingStatusRead:
    """Status against the default interval, measured from the last successful meal."""
    animal = await _load_with_history(session, animal_id)
    successes = [event.fed_at for event in animal.feedings if event.is_successful]
    last_feeding = max(successes, key=dates.as_utc) if successes else None
    status = hunger.feeding_status(
        last_feeding, now=clock.now(), interval_days=interval_days, tz=clock.tz
    )
    return FeedingStatusRead(
        animal_id=animal.id,
        state=status.state,
        days=status.days,
        display_name=status.display_name,
        priority=status.state.priority,
        interval_days=interval_days,
        last_feeding=dates.as_utc(last_feeding) if last_feeding is not None else None,
    )


async def list_extended_hunger(
    session: AsyncSession, *, clock: SystemClock
) -> list[HungerRead]:
    """Active animals outside the normal feeding window, longest fast first."""
    result = await session.execute(
        select(Animal)
        .options(selectinload(Animal.feedings), selectinload(Animal.weights))
        .where(Animal.is_active.is_(True))
        .order_by(Animal.name)
    )
    rows = [_hunger_read(animal, clock=clock) for animal in result.scalars().all()]
    flagged = [row for row in rows if row.urgency in _EXTENDED_BANDS]
    return sorted(flagged, key=lambda row: row.days_since_last_meal or 0, reverse=True)
