"""Feeding routine endpoints."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.core.clock import SystemClock
from scalekeeper.core.config import Settings
from scalekeeper.engine.recurrence import DEFAULT_UPCOMING_DAYS
from scalekeeper.models import FeedingRoutine
from scalekeeper.schemas.feeding import (
    FeedingRoutineCreate,
    FeedingRoutineRead,
    FeedingRoutineUpdate,
    NextFeedingRead,
    ScheduledFeedingRead,
)
from scalekeeper.services import feeding_routine_service
from scalekeeper.services.reminder_service import ReminderPort

router = APIRouter()


async def _get_or_404(session: AsyncSession, routine_id: uuid.UUID) -> FeedingRoutine:
    routine = await feeding_routine_service.get_routine(session, routine_id=routine_id)
    if routine is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Feeding routine not found"
        )
    return routine


@router.get("", response_model=list[FeedingRoutineRead], summary="List feeding routines")
async def list_routines(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    animal_id: uuid.UUID | None = Query(None),
    active_only: bool = Query(False),
) -> list[FeedingRoutineRead]:
    routines = await feeding_routine_service.list_routines(
        session, animal_id=animal_id, active_only=active_only
    )
    return [FeedingRoutineRead.model_validate(routine) for routine in routines]


@router.post(
    "",
    response_model=FeedingRoutineRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create feeding routine",
)
async def create_routine(
    payload: FeedingRoutineCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> FeedingRoutineRead:
    try:
        routine = await feeding_routine_service.create_routine(
            session,
            payload,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FeedingRoutineRead.model_validate(routine)


@router.get(
    "/upcoming",
    response_model=list[ScheduledFeedingRead],
    summary="Upcoming feedings across active routines",
)
async def upcoming_feedings(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    days: int = Query(DEFAULT_UPCOMING_DAYS, ge=1, le=90),
    animal_id: uuid.UUID | None = Query(None),
) -> list[ScheduledFeedingRead]:
    feedings = await feeding_routine_service.upcoming_feedings(
        session, clock=clock, days=days, animal_id=animal_id
    )
    return [ScheduledFeedingRead.model_validate(feeding) for feeding in feedings]


@router.get(
    "/{routine_id}", response_model=FeedingRoutineRead, summary="Get feeding routine"
)
async def get_routine(
    routine_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> FeedingRoutineRead:
    return FeedingRoutineRead.model_validate(await _get_or_404(session, routine_id))


@router.patch(
    "/{routine_id}", response_model=FeedingRoutineRead, summary="Update feeding routine"
)
async def update_routine(
    routine_id: uuid.UUID,
    payload: FeedingRoutineUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> FeedingRoutineRead:
    routine = await _get_or_404(session, routine_id)
    try:
        updated = await feeding_routine_service.update_routine(
            session,
            routine=routine,
            payload=payload,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FeedingRoutineRead.model_validate(updated)


@router.delete(
    "/{routine_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete feeding routine",
)
async def delete_routine(
    routine_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> None:
    routine = await _get_or_404(session, routine_id)
    await feeding_routine_service.delete_routine(
        session,
        routine=routine,
        reminders=reminders,
        reminder_attempts=settings.reminder_retry_attempts,
    )


@router.get(
    "/{routine_id}/next",
    response_model=NextFeedingRead,
    summary="Next feeding for a routine",
)
async def next_feeding(
    routine_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> NextFeedingRead:
    routine = await _get_or_404(session, routine_id)
    upcoming = feeding_routine_service.next_feeding(routine, clock=clock)
    if isinstance(upcoming, datetime):
        return NextFeedingRead(
            routine_id=routine.id,
            next_at=upcoming,
            next_date=upcoming.astimezone(clock.tz).date(),
            not_scheduled=False,
        )
    return NextFeedingRead(
        routine_id=routine.id,
        next_date=upcoming,
        not_scheduled=upcoming is None,
    )


@router.get(
    "/{routine_id}/upcoming",
    response_model=list[ScheduledFeedingRead],
    summary="Upcoming feedings for a routine",
)
async def upcoming_for_routine(
    routine_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    days: int = Query(DEFAULT_UPCOMING_DAYS, ge=1, le=90),
) -> list[ScheduledFeedingRead]:
    routine = await _get_or_404(session, routine_id)
    feedings = feeding_routine_service.upcoming_for_routine(routine, clock=clock, days=days)
    return [ScheduledFeedingRead.model_validate(feeding) for feeding in feedings]
