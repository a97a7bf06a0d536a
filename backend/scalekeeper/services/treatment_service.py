"""Treatment plan and medication dose services.

Status writes are committed first; reminder cancellation and re-arming
follow as a separate best-effort step.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import dates, doses
from scalekeeper.engine.doses import DoseStatus, InvalidTransitionError, PlanStatus
from scalekeeper.models import Animal, MedicationDose, TreatmentPlan
from scalekeeper.schemas.treatment import (
    DoseAction,
    DoseRead,
    TreatmentPlanCreate,
    TreatmentPlanDetail,
    TreatmentPlanRead,
)
from scalekeeper.services import reminder_service
from scalekeeper.services.animal_service import require_animal
from scalekeeper.services.reminder_service import ReminderPort

logger = logging.getLogger(__name__)


def plan_detail(plan: TreatmentPlan, *, now: datetime) -> TreatmentPlanDetail:
    """Serialize a plan with its doses and derived progress."""
    administered = doses.administered_count(plan.doses)
    upcoming = doses.next_scheduled_dose(plan.doses)
    return TreatmentPlanDetail(
        **TreatmentPlanRead.model_validate(plan).model_dump(),
        doses=[DoseRead.model_validate(dose) for dose in plan.doses],
        next_dose=DoseRead.model_validate(upcoming) if upcoming is not None else None,
        administered_count=administered,
        overdue_count=sum(
            1 for dose in plan.doses if doses.is_overdue(dose.status, dose.scheduled_at, now)
        ),
        progress_percentage=doses.progress_percentage(administered, plan.total_doses),
    )


async def _animal_name(session: AsyncSession, animal_id: uuid.UUID) -> str:
    animal = await session.get(Animal, animal_id)
    return animal.name if animal is not None else "Animal"


async def _arm(
    session: AsyncSession,
    port: ReminderPort,
    plan: TreatmentPlan,
    *,
    clock: SystemClock,
    attempts: int,
) -> None:
    animal_name = await _animal_name(session, plan.animal_id)
    await reminder_service.best_effort(
        f"medication reminders for plan {plan.id}",
        lambda: reminder_service.arm_doses(
            port, plan, plan.doses, animal_name=animal_name, now=clock.now()
        ),
        attempts=attempts,
    )


async def _disarm(port: ReminderPort, plan: TreatmentPlan, *, attempts: int) -> None:
    await reminder_service.best_effort(
        f"cancel medication reminders for plan {plan.id}",
        lambda: reminder_service.cancel_plan(port, plan.id),
        attempts=attempts,
    )


async def create_plan(
    session: AsyncSession,
    payload: TreatmentPlanCreate,
    *,
    reminders: ReminderPort,
    clock: SystemClock,
    open_ended_horizon_days: int,
    reminder_attempts: int,
) -> TreatmentPlan:
    """Insert the plan and its whole dose timeline in one transaction."""
    await require_animal(session, payload.animal_id)
    start_at = dates.as_utc(payload.start_at or clock.now())
    if payload.total_doses is not None:
        count = payload.total_doses
    else:
        count = doses.doses_within(payload.frequency_hours, open_ended_horizon_days * 24)
    times = doses.generate_dose_times(start_at, payload.frequency_hours, count)

    plan = TreatmentPlan(
        animal_id=payload.animal_id,
        medication_name=payload.medication_name,
        condition_treated=payload.condition_treated,
        dosage=payload.dosage,
        frequency_hours=payload.frequency_hours,
        total_doses=payload.total_doses,
        prescribed_by=payload.prescribed_by,
        notes=payload.notes,
        start_at=start_at,
        end_at=times[-1] if payload.total_doses is not None else None,
        status=PlanStatus.ACTIVE,
        doses=[
            MedicationDose(sequence=index, scheduled_at=moment, status=DoseStatus.SCHEDULED)
            for index, moment in enumerate(times)
        ],
    )
    session.add(plan)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    logger.info(
        "Created treatment plan %s with %s doses every %sh",
        plan.id,
        len(times),
        plan.frequency_hours,
    )
    await _arm(session, reminders, plan, clock=clock, attempts=reminder_attempts)
    return plan


async def list_plans(
    session: AsyncSession,
    *,
    animal_id: uuid.UUID | None = None,
    status: PlanStatus | None = None,
) -> list[TreatmentPlan]:
    stmt = select(TreatmentPlan).order_by(TreatmentPlan.start_at.desc())
    if animal_id is not None:
        stmt = stmt.where(TreatmentPlan.animal_id == animal_id)
    if status is not None:
        stmt = stmt.where(TreatmentPlan.status == status)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_plan(session: AsyncSession, *, plan_id: uuid.UUID) -> TreatmentPlan | None:
    return await session.get(TreatmentPlan, plan_id)


async def pause_plan(
    session: AsyncSession,
    *,
    plan: TreatmentPlan,
    reminders: ReminderPort,
    reminder_attempts: int,
) -> TreatmentPlan:
    plan.status = doses.transition_plan(plan.status, PlanStatus.PAUSED)
    await session.commit()
    await _disarm(reminders, plan, attempts=reminder_attempts)
    return plan


async def resume_plan(
    session: AsyncSession,
    *,
    plan: TreatmentPlan,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> TreatmentPlan:
    plan.status = doses.transition_plan(plan.status, PlanStatus.ACTIVE)
    await session.commit()
    await _arm(session, reminders, plan, clock=clock, attempts=reminder_attempts)
    return plan


async def discontinue_plan(
    session: AsyncSession,
    *,
    plan: TreatmentPlan,
    reason: str | None,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> TreatmentPlan:
    plan.status = doses.transition_plan(plan.status, PlanStatus.DISCONTINUED)
    plan.end_at = clock.now()
    if reason:
        note = f"Discontinued: {reason}"
        plan.notes = f"{plan.notes}\n{note}" if plan.notes else note
    await session.commit()
    logger.info("Discontinued treatment plan %s", plan.id)
    await _disarm(reminders, plan, attempts=reminder_attempts)
    return plan


async def extend_plan(
    session: AsyncSession,
    *,
    plan: TreatmentPlan,
    days: int,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> TreatmentPlan:
    """Append doses to an open-ended plan up to ``days`` past now or its last dose."""
    if not plan.is_open_ended:
        raise ValueError("Only open-ended plans can be extended")
    if plan.status in doses.TERMINAL_PLAN_STATUSES:
        raise InvalidTransitionError(f"Cannot extend a {plan.status.value} plan")
    last = max(plan.doses, key=lambda dose: dose.sequence)
    until = max(dates.as_utc(last.scheduled_at), clock.now()) + timedelta(days=days)
    times = doses.extend_dose_times(last.scheduled_at, plan.frequency_hours, until)
    for offset, moment in enumerate(times, start=1):
        plan.doses.append(
            MedicationDose(
                sequence=last.sequence + offset,
                scheduled_at=moment,
                status=DoseStatus.SCHEDULED,
            )
        )
    await session.commit()
    logger.info("Extended treatment plan %s by %s doses", plan.id, len(times))
    if plan.status is PlanStatus.ACTIVE:
        await _arm(session, reminders, plan, clock=clock, attempts=reminder_attempts)
    return plan


async def get_dose(
    session: AsyncSession, *, plan_id: uuid.UUID, dose_id: uuid.UUID
) -> MedicationDose | None:
    result = await session.execute(
        select(MedicationDose)
        .options(selectinload(MedicationDose.plan).selectinload(TreatmentPlan.doses))
        .where(MedicationDose.id == dose_id, MedicationDose.plan_id == plan_id)
    )
    return result.scalar_one_or_none()


async def record_dose(
    session: AsyncSession,
    *,
    dose: MedicationDose,
    target: DoseStatus,
    payload: DoseAction,
    reminders: ReminderPort,
    clock: SystemClock,
    reminder_attempts: int,
) -> MedicationDose:
    plan = dose.plan
    doses.ensure_plan_accepts_dose(plan.status, target)
    already_administered = doses.administered_count(plan.doses)
    dose.status = doses.transition_dose(dose.status, target)
    if payload.notes:
        dose.notes = payload.notes
    if target is DoseStatus.ADMINISTERED:
        dose.administered_at = dates.as_utc(payload.administered_at or clock.now())
        plan.status = doses.status_after_administration(
            plan.status, already_administered + 1, plan.total_doses
        )
    await session.commit()
    logger.info("Dose %s of plan %s marked %s", dose.sequence, plan.id, target.value)

    await reminder_service.best_effort(
        f"cancel reminder for dose {dose.id}",
        lambda: reminders.cancel(reminder_service.medication_identifier(dose.id)),
        attempts=reminder_attempts,
    )
    if plan.status is PlanStatus.COMPLETED:
        logger.info("Treatment plan %s completed", plan.id)
        await _disarm(reminders, plan, attempts=reminder_attempts)
    return dose
