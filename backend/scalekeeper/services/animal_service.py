"""Animal and weight history services."""

from __future__ import annotations

import uuid

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import dates
from scalekeeper.models import Animal, Enclosure, WeightRecord
from scalekeeper.schemas.animal import AnimalCreate, AnimalUpdate, WeightRecordCreate


async def _ensure_enclosure(session: AsyncSession, enclosure_id: uuid.UUID | None) -> None:
    if enclosure_id is not None and await session.get(Enclosure, enclosure_id) is None:
        raise ValueError("Enclosure not found")


async def require_animal(session: AsyncSession, animal_id: uuid.UUID) -> Animal:
    """Load an animal or raise ``ValueError`` when it does not exist."""
    animal = await session.get(Animal, animal_id)
    if animal is None:
        raise ValueError("Animal not found")
    return animal


async def create_animal(session: AsyncSession, payload: AnimalCreate) -> Animal:
    await _ensure_enclosure(session, payload.enclosure_id)
    animal = Animal(**payload.model_dump())
    session.add(animal)
    await session.commit()
    await session.refresh(animal)
    return animal


async def list_animals(
    session: AsyncSession, *, include_inactive: bool = False
) -> list[Animal]:
    stmt: Select[tuple[Animal]] = select(Animal).order_by(Animal.name)
    if not include_inactive:
        stmt = stmt.where(Animal.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_animal(session: AsyncSession, *, animal_id: uuid.UUID) -> Animal | None:
    return await session.get(Animal, animal_id)


async def update_animal(
    session: AsyncSession, *, animal: Animal, payload: AnimalUpdate
) -> Animal:
    updates = payload.model_dump(exclude_unset=True)
    if "enclosure_id" in updates:
        await _ensure_enclosure(session, updates["enclosure_id"])
    for field, value in updates.items():
        setattr(animal, field, value)
    await session.commit()
    await session.refresh(animal)
    return animal


async def log_weight(
    session: AsyncSession,
    *,
    animal_id: uuid.UUID,
    payload: WeightRecordCreate,
    clock: SystemClock,
) -> WeightRecord:
    await require_animal(session, animal_id)
    record = WeightRecord(
        animal_id=animal_id,
        weight_grams=payload.weight_grams,
        recorded_at=dates.as_utc(payload.recorded_at or clock.now()),
        notes=payload.notes,
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def list_weights(session: AsyncSession, *, animal_id: uuid.UUID) -> list[WeightRecord]:
    """Weigh-ins for an animal, newest first."""
    await require_animal(session, animal_id)
    result = await session.execute(
        select(WeightRecord)
        .where(WeightRecord.animal_id == animal_id)
        .order_by(WeightRecord.recorded_at.desc())
    )
    return list(result.scalars().all())
