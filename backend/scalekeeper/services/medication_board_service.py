"""Aggregated daily view of active treatment plans."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scalekeeper.core.clock import SystemClock
from scalekeeper.engine import dates, doses
from scalekeeper.engine.doses import DoseStatus, PlanStatus
from scalekeeper.models import TreatmentPlan
from scalekeeper.schemas.treatment import DoseRead, MedicationBoard, MedicationBoardRow


async def medication_board(
    session: AsyncSession,
    *,
    clock: SystemClock,
    target_date: date | None = None,
) -> MedicationBoard:
    """Active plans with their doses for one local day, plus anything overdue."""
    day = target_date or clock.today()
    start_utc, end_utc = dates.day_bounds(day, clock.tz)
    now = clock.now()

    result = await session.execute(
        select(TreatmentPlan)
        .options(selectinload(TreatmentPlan.animal))
        .where(TreatmentPlan.status == PlanStatus.ACTIVE)
        .order_by(TreatmentPlan.medication_name)
    )
    rows: list[MedicationBoardRow] = []
    for plan in result.scalars().all():
        todays = [
            dose for dose in plan.doses if start_utc <= dates.as_utc(dose.scheduled_at) < end_utc
        ]
        overdue = [
            dose for dose in plan.doses if doses.is_overdue(dose.status, dose.scheduled_at, now)
        ]
        upcoming = doses.next_scheduled_dose(plan.doses)
        rows.append(
            MedicationBoardRow(
                plan_id=plan.id,
                animal_id=plan.animal_id,
                animal_name=plan.animal.name,
                medication_name=plan.medication_name,
                dosage=plan.dosage,
                frequency_hours=plan.frequency_hours,
                todays_doses=[DoseRead.model_validate(dose) for dose in todays],
                overdue_doses=[DoseRead.model_validate(dose) for dose in overdue],
                next_dose=DoseRead.model_validate(upcoming) if upcoming is not None else None,
                remaining_count=sum(
                    1 for dose in plan.doses if dose.status is DoseStatus.SCHEDULED
                ),
                completed_count=doses.administered_count(plan.doses),
            )
        )
    rows.sort(key=lambda row: (row.animal_name, row.medication_name))
    return MedicationBoard(date=day.isoformat(), rows=rows)
