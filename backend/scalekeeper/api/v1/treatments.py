"""Treatment plan, dose and medication board endpoints."""
from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.core.clock import SystemClock
from scalekeeper.core.config import Settings
from scalekeeper.engine.doses import DoseStatus, InvalidTransitionError, PlanStatus
from scalekeeper.models import TreatmentPlan
from scalekeeper.schemas.treatment import (
    DoseAction,
    DoseRead,
    MedicationBoard,
    PlanDiscontinue,
    PlanExtend,
    TreatmentPlanCreate,
    TreatmentPlanDetail,
    TreatmentPlanRead,
)
from scalekeeper.services import medication_board_service, treatment_service
from scalekeeper.services.reminder_service import ReminderPort

router = APIRouter()


async def _get_or_404(session: AsyncSession, plan_id: uuid.UUID) -> TreatmentPlan:
    plan = await treatment_service.get_plan(session, plan_id=plan_id)
    if plan is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Treatment plan not found"
        )
    return plan


def _conflict(exc: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get(
    "/treatments", response_model=list[TreatmentPlanRead], summary="List treatment plans"
)
async def list_plans(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    animal_id: uuid.UUID | None = Query(None),
    plan_status: PlanStatus | None = Query(None, alias="status"),
) -> list[TreatmentPlanRead]:
    plans = await treatment_service.list_plans(session, animal_id=animal_id, status=plan_status)
    return [TreatmentPlanRead.model_validate(plan) for plan in plans]


@router.post(
    "/treatments",
    response_model=TreatmentPlanDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Prescribe a treatment plan",
)
async def create_plan(
    payload: TreatmentPlanCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> TreatmentPlanDetail:
    try:
        plan = await treatment_service.create_plan(
            session,
            payload,
            reminders=reminders,
            clock=clock,
            open_ended_horizon_days=settings.open_ended_dose_horizon_days,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return treatment_service.plan_detail(plan, now=clock.now())


@router.get(
    "/treatments/{plan_id}",
    response_model=TreatmentPlanDetail,
    summary="Get treatment plan with doses",
)
async def get_plan(
    plan_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
) -> TreatmentPlanDetail:
    plan = await _get_or_404(session, plan_id)
    return treatment_service.plan_detail(plan, now=clock.now())


@router.post(
    "/treatments/{plan_id}/pause",
    response_model=TreatmentPlanDetail,
    summary="Pause a treatment plan",
)
async def pause_plan(
    plan_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> TreatmentPlanDetail:
    plan = await _get_or_404(session, plan_id)
    try:
        plan = await treatment_service.pause_plan(
            session,
            plan=plan,
            reminders=reminders,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return treatment_service.plan_detail(plan, now=clock.now())


@router.post(
    "/treatments/{plan_id}/resume",
    response_model=TreatmentPlanDetail,
    summary="Resume a paused treatment plan",
)
async def resume_plan(
    plan_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> TreatmentPlanDetail:
    plan = await _get_or_404(session, plan_id)
    try:
        plan = await treatment_service.resume_plan(
            session,
            plan=plan,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return treatment_service.plan_detail(plan, now=clock.now())


@router.post(
    "/treatments/{plan_id}/discontinue",
    response_model=TreatmentPlanDetail,
    summary="Discontinue a treatment plan",
)
async def discontinue_plan(
    plan_id: uuid.UUID,
    payload: PlanDiscontinue,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> TreatmentPlanDetail:
    plan = await _get_or_404(session, plan_id)
    try:
        plan = await treatment_service.discontinue_plan(
            session,
            plan=plan,
            reason=payload.reason,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return treatment_service.plan_detail(plan, now=clock.now())


@router.post(
    "/treatments/{plan_id}/extend",
    response_model=TreatmentPlanDetail,
    summary="Extend an open-ended plan's dose timeline",
)
async def extend_plan(
    plan_id: uuid.UUID,
    payload: PlanExtend,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> TreatmentPlanDetail:
    plan = await _get_or_404(session, plan_id)
    try:
        plan = await treatment_service.extend_plan(
            session,
            plan=plan,
            days=payload.days,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return treatment_service.plan_detail(plan, now=clock.now())


async def _record_dose(
    plan_id: uuid.UUID,
    dose_id: uuid.UUID,
    target: DoseStatus,
    payload: DoseAction,
    session: AsyncSession,
    clock: SystemClock,
    reminders: ReminderPort,
    settings: Settings,
) -> DoseRead:
    dose = await treatment_service.get_dose(session, plan_id=plan_id, dose_id=dose_id)
    if dose is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dose not found")
    try:
        dose = await treatment_service.record_dose(
            session,
            dose=dose,
            target=target,
            payload=payload,
            reminders=reminders,
            clock=clock,
            reminder_attempts=settings.reminder_retry_attempts,
        )
    except InvalidTransitionError as exc:
        raise _conflict(exc) from exc
    return DoseRead.model_validate(dose)


@router.post(
    "/treatments/{plan_id}/doses/{dose_id}/administer",
    response_model=DoseRead,
    summary="Record an administered dose",
)
async def administer_dose(
    plan_id: uuid.UUID,
    dose_id: uuid.UUID,
    payload: DoseAction,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> DoseRead:
    return await _record_dose(
        plan_id, dose_id, DoseStatus.ADMINISTERED, payload, session, clock, reminders, settings
    )


@router.post(
    "/treatments/{plan_id}/doses/{dose_id}/skip",
    response_model=DoseRead,
    summary="Skip a dose",
)
async def skip_dose(
    plan_id: uuid.UUID,
    dose_id: uuid.UUID,
    payload: DoseAction,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> DoseRead:
    return await _record_dose(
        plan_id, dose_id, DoseStatus.SKIPPED, payload, session, clock, reminders, settings
    )


@router.post(
    "/treatments/{plan_id}/doses/{dose_id}/miss",
    response_model=DoseRead,
    summary="Mark a dose as missed",
)
async def miss_dose(
    plan_id: uuid.UUID,
    dose_id: uuid.UUID,
    payload: DoseAction,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    reminders: Annotated[ReminderPort, Depends(deps.get_reminder_port)],
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> DoseRead:
    return await _record_dose(
        plan_id, dose_id, DoseStatus.MISSED, payload, session, clock, reminders, settings
    )


@router.get(
    "/medication-board",
    response_model=MedicationBoard,
    summary="Active plans with today's doses",
)
async def medication_board(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    clock: Annotated[SystemClock, Depends(deps.get_clock)],
    target_date: date | None = Query(None, alias="date"),
) -> MedicationBoard:
    return await medication_board_service.medication_board(
        session, clock=clock, target_date=target_date
    )
