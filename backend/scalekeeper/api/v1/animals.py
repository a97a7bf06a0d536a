"""Animal and weight endpoints."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.core.clock import SystemClock
from scalekeeper.schemas.animal import (
    AnimalCreate,
    AnimalRead,
    AnimalUpdate,
    WeightRecordCreate,
    WeightRecordRead,
)
from scalekeeper.services import animal_service

router = APIRouter()


@router.get("", response_model=list[AnimalRead], summary="List animals")
async def list_animals(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    include_inactive: bool = Query(False),
) -> list[AnimalRead]:
    animals = await animal_service.list_animals(session, include_inactive=include_inactive)
    return [AnimalRead.model_validate(animal) for animal in animals]


@router.post(
    "",
    response_model=AnimalRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create animal",
)
async def create_animal(
    payload: AnimalCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AnimalRead:
    try:
        animal = await animal_service.create_animal(session, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AnimalRead.model_validate(animal)


@router.get("/{animal_id}", response_model=AnimalRead, summary="Get animal")
async def get_animal(
    animal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AnimalRead:
    animal = await animal_service.get_animal(session, animal_id=animal_id)
    if animal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Animal not found")
    return AnimalRead.model_validate(animal)


@router.patch("/{animal_id}", response_model=AnimalRead, summary="Update animal")
async def update_animal(
    animal_id: uuid.UUID,
    payload: AnimalUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AnimalRead:
    animal = await animal_service.get_animal(session, animal_id=animal_id)
    if animal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Animal not found")
    try:
        updated = await animal_service.update_animal(session, animal=animal, payload=payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AnimalRead.model_validate(updated)


@router.get(
    "/{animal_id}/weights",
    response_model=list[WeightRecordRead],
    summary="List weigh-ins",
)
async def list_weights(
    animal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[WeightRecordRead]:
    try:
        records = await animal_service.list_weights(session, animal_id=animal_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [WeightRecordRead.model_validate(record) for record in records]


@router.post(
    "/{animal_id}/weights",
    response_model=WeightRecordRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log a weigh-in",
)
async def log_weight(
    animal_id: uuid.UUID,
    payload: WeightRecordCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> WeightRecordRead:
    try:
        record = await animal_service.log_weight(
            session, animal_id=animal_id, payload=payload, clock=clock
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return WeightRecordRead.model_validate(record)
