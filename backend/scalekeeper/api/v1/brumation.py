"""Brumation cycle endpoints."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.core.clock import SystemClock
from scalekeeper.core.config import Settings
from scalekeeper.schemas.brumation import (
    BrumationCycleCreate,
    BrumationCycleDetail,
    BrumationCycleUpdate,
)
from scalekeeper.services import brumation_service
from scalekeeper.services.reminder_service import ReminderPort

router = APIRouter()


@router.get("", response_model=list[BrumationCycleDetail], summary="List brumation cycles")
async def list_cycles(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    animal_id: uuid.UUID | None = Query(None),
) -> list[BrumationCycleDetail]:
    cycles = await brumation_service.list_cycles(session, animal_id=animal_id)
    return [brumation_service.cycle_detail(cycle, clock=clock) for cycle in cycles]


@router.post(
    "",
    response_model=BrumationCycleDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Plan a brumation cycle",
)
async def create_cycle(
    payload: BrumationCycleCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> BrumationCycleDetail:
    try:
        cycle = await brumation_service.create_cycle(
            session,
            payload,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return brumation_service.cycle_detail(cycle, clock=clock)


@router.get(
    "/{cycle_id}", response_model=BrumationCycleDetail, summary="Get brumation cycle"
)
async def get_cycle(
    cycle_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> BrumationCycleDetail:
    cycle = await brumation_service.get_cycle(session, cycle_id=cycle_id)
    if cycle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Brumation cycle not found"
        )
    return brumation_service.cycle_detail(cycle, clock=clock)


@router.patch(
    "/{cycle_id}", response_model=BrumationCycleDetail, summary="Update brumation cycle"
)
async def update_cycle(
    cycle_id: uuid.UUID,
    payload: BrumationCycleUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> BrumationCycleDetail:
    cycle = await brumation_service.get_cycle(session, cycle_id=cycle_id)
    if cycle is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Brumation cycle not found"
        )
    try:
        updated = await brumation_service.update_cycle(
            session,
            cycle=cycle,
            payload=payload,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return brumation_service.cycle_detail(updated, clock=clock)
