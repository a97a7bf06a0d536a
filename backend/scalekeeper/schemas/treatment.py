"""Treatment plan and medication dose schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scalekeeper.engine.doses import DoseStatus, PlanStatus


class TreatmentPlanCreate(BaseModel):
    """Payload for prescribing a treatment; omit ``total_doses`` for open-ended plans."""

    animal_id: uuid.UUID
    medication_name: str = Field(min_length=1, max_length=120)
    dosage: str = Field(min_length=1, max_length=120)
    frequency_hours: int
    total_doses: int | None = None
    start_at: datetime | None = None
    condition_treated: str | None = None
    prescribed_by: str | None = None
    notes: str | None = None


class DoseRead(BaseModel):
    """Serialized medication dose."""

    id: uuid.UUID
    plan_id: uuid.UUID
    sequence: int
    scheduled_at: datetime
    administered_at: datetime | None = None
    status: DoseStatus
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class TreatmentPlanRead(BaseModel):
    """Serialized treatment plan without its doses."""

    id: uuid.UUID
    animal_id: uuid.UUID
    medication_name: str
    dosage: str
    frequency_hours: int
    total_doses: int | None
    start_at: datetime
    end_at: datetime | None
    status: PlanStatus
    condition_treated: str | None = None
    prescribed_by: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TreatmentPlanDetail(TreatmentPlanRead):
    """Plan with its dose timeline and derived progress."""

    doses: list[DoseRead]
    next_dose: DoseRead | None
    administered_count: int
    overdue_count: int
    progress_percentage: float


class DoseAction(BaseModel):
    """Optional details recorded with a dose transition."""

    administered_at: datetime | None = None
    notes: str | None = None


class PlanDiscontinue(BaseModel):
    """Reason appended to the plan notes when discontinuing."""

    reason: str | None = None


class PlanExtend(BaseModel):
    """Extend an open-ended plan's dose timeline by a number of days."""

    days: int = Field(ge=1)


class MedicationBoardRow(BaseModel):
    """One active plan on the daily medication board."""

    plan_id: uuid.UUID
    animal_id: uuid.UUID
    animal_name: str
    medication_name: str
    dosage: str
    frequency_hours: int
    todays_doses: list[DoseRead]
    overdue_doses: list[DoseRead]
    next_dose: DoseRead | None
    remaining_count: int
    completed_count: int


class MedicationBoard(BaseModel):
    """Active treatment plans for the given local day."""

    date: str
    rows: list[MedicationBoardRow]
