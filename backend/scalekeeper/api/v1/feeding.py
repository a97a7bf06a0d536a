"""Feeding history and hunger endpoints."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.core.clock import SystemClock
from scalekeeper.core.config import Settings
from scalekeeper.schemas.feeding import (
    FeedingEventCreate,
    FeedingEventRead,
    FeedingStatsRead,
    FeedingStatusRead,
    HungerRead,
)
from scalekeeper.services import feeding_service

router = APIRouter()


@router.get(
    "/animals/{animal_id}/feedings",
    response_model=list[FeedingEventRead],
    summary="List feeding events",
)
async def list_feedings(
    animal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    limit: int | None = Query(None, ge=1, le=500),
) -> list[FeedingEventRead]:
    try:
        events = await feeding_service.list_feedings(session, animal_id=animal_id, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [FeedingEventRead.model_validate(event) for event in events]


@router.post(
    "/animals/{animal_id}/feedings",
    response_model=FeedingEventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log a feeding",
)
async def log_feeding(
    animal_id: uuid.UUID,
    payload: FeedingEventCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> FeedingEventRead:
    try:
        event = await feeding_service.log_feeding(
            session, animal_id=animal_id, payload=payload, clock=clock
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return FeedingEventRead.model_validate(event)


@router.get(
    "/animals/{animal_id}/hunger",
    response_model=HungerRead,
    summary="Days since the last successful meal",
)
async def get_hunger(
    animal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> HungerRead:
    try:
        return await feeding_service.get_hunger(session, animal_id=animal_id, clock=clock)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get(
    "/animals/{animal_id}/feeding-stats",
    response_model=FeedingStatsRead,
    summary="Feeding history summary",
)
async def get_feeding_stats(
    animal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> FeedingStatsRead:
    try:
        return await feeding_service.get_feeding_stats(
            session, animal_id=animal_id, clock=clock
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get(
    "/animals/{animal_id}/feeding-status",
    response_model=FeedingStatusRead,
    summary="Feeding status against the default interval",
)
async def get_feeding_status(
    animal_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
    interval_days: int | None = Query(None, ge=1),
) -> FeedingStatusRead:
    try:
        return await feeding_service.get_feeding_status(
            session,
            animal_id=animal_id,
            clock=clock,
            interval_days=interval_days or settings.default_feeding_interval_days,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get(
    "/feeding/extended-hunger",
    response_model=list[HungerRead],
    summary="Animals outside the normal feeding window",
)
async def list_extended_hunger(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> list[HungerRead]:
    return await feeding_service.list_extended_hunger(session, clock=clock)
