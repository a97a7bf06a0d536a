"""Enclosure, cleaning schedule and cleaning status endpoints."""
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.core.clock import SystemClock
from scalekeeper.core.config import Settings
from scalekeeper.engine.cleaning import CleaningType
from scalekeeper.models import Enclosure
from scalekeeper.schemas.enclosure import (
    CleaningAttentionRead,
    CleaningEventCreate,
    CleaningEventRead,
    CleaningScheduleRead,
    CleaningScheduleUpsert,
    CleaningStatusRead,
    EnclosureCreate,
    EnclosureRead,
)
from scalekeeper.services import cleaning_service
from scalekeeper.services.reminder_service import ReminderPort

router = APIRouter()


async def _get_or_404(session: AsyncSession, enclosure_id: uuid.UUID) -> Enclosure:
    enclosure = await cleaning_service.get_enclosure(session, enclosure_id=enclosure_id)
    if enclosure is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enclosure not found")
    return enclosure


@router.get("/enclosures", response_model=list[EnclosureRead], summary="List enclosures")
async def list_enclosures(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[EnclosureRead]:
    enclosures = await cleaning_service.list_enclosures(session)
    return [EnclosureRead.model_validate(enclosure) for enclosure in enclosures]


@router.post(
    "/enclosures",
    response_model=EnclosureRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create enclosure",
)
async def create_enclosure(
    payload: EnclosureCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> EnclosureRead:
    enclosure = await cleaning_service.create_enclosure(
        session,
        payload,
        reminders=reminders,
        clock=clock,
        reminder_attempts=settings.reminder_retry_attempts,
    )
    return EnclosureRead.model_validate(enclosure)


@router.get(
    "/enclosures/{enclosure_id}", response_model=EnclosureRead, summary="Get enclosure"
)
async def get_enclosure(
    enclosure_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> EnclosureRead:
    return EnclosureRead.model_validate(await _get_or_404(session, enclosure_id))


@router.get(
    "/enclosures/{enclosure_id}/cleaning-schedules",
    response_model=list[CleaningScheduleRead],
    summary="List cleaning schedules",
)
async def list_schedules(
    enclosure_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[CleaningScheduleRead]:
    enclosure = await _get_or_404(session, enclosure_id)
    schedules = await cleaning_service.list_schedules(session, enclosure_id=enclosure.id)
    return [CleaningScheduleRead.model_validate(schedule) for schedule in schedules]


@router.put(
    "/enclosures/{enclosure_id}/cleaning-schedules/{cleaning_type}",
    response_model=CleaningScheduleRead,
    summary="Create or replace a cleaning schedule",
)
async def upsert_schedule(
    enclosure_id: uuid.UUID,
    cleaning_type: CleaningType,
    payload: CleaningScheduleUpsert,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> CleaningScheduleRead:
    enclosure = await _get_or_404(session, enclosure_id)
    schedule = await cleaning_service.upsert_schedule(
        session,
        enclosure=enclosure,
        cleaning_type=cleaning_type,
        payload=payload,
        reminders=reminders,
        clock=clock,
        reminder_attempts=settings.reminder_retry_attempts,
    )
    return CleaningScheduleRead.model_validate(schedule)


@router.delete(
    "/enclosures/{enclosure_id}/cleaning-schedules/{cleaning_type}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a cleaning schedule",
)
async def delete_schedule(
    enclosure_id: uuid.UUID,
    cleaning_type: CleaningType,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> None:
    enclosure = await _get_or_404(session, enclosure_id)
    deleted = await cleaning_service.delete_schedule(
        session,
        enclosure=enclosure,
        cleaning_type=cleaning_type,
        reminders=reminders,
        reminder_attempts=settings.reminder_retry_attempts,
    )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Cleaning schedule not found"
        )


@router.get(
    "/enclosures/{enclosure_id}/cleanings",
    response_model=list[CleaningEventRead],
    summary="Cleaning history",
)
async def cleaning_history(
    enclosure_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    cleaning_type: CleaningType | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
) -> list[CleaningEventRead]:
    enclosure = await _get_or_404(session, enclosure_id)
    events = await cleaning_service.cleaning_history(
        session, enclosure_id=enclosure.id, cleaning_type=cleaning_type, limit=limit
    )
    return [CleaningEventRead.model_validate(event) for event in events]


@router.post(
    "/enclosures/{enclosure_id}/cleanings",
    response_model=CleaningEventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log a cleaning",
)
async def log_cleaning(
    enclosure_id: uuid.UUID,
    payload: CleaningEventCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> CleaningEventRead:
    enclosure = await _get_or_404(session, enclosure_id)
    event = await cleaning_service.log_cleaning(
        session,
        enclosure=enclosure,
        payload=payload,
        reminders=reminders,
        clock=clock,
        reminder_attempts=settings.reminder_retry_attempts,
    )
    return CleaningEventRead.model_validate(event)


@router.get(
    "/enclosures/{enclosure_id}/cleaning-status",
    response_model=list[CleaningStatusRead],
    summary="Cleaning status per type, soonest due first",
)
async def cleaning_status(
    enclosure_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> list[CleaningStatusRead]:
    enclosure = await _get_or_404(session, enclosure_id)
    return await cleaning_service.enclosure_status(session, enclosure=enclosure, clock=clock)


@router.get(
    "/cleaning/attention",
    response_model=CleaningAttentionRead,
    summary="Overdue and due-soon cleanings",
)
async def cleaning_attention(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> CleaningAttentionRead:
    return await cleaning_service.attention(session, clock=clock)
