"""Brumation cycle schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scalekeeper.engine.brumation import BrumationPhase, BrumationStatus


class BrumationCycleBase(BaseModel):
    """Shared brumation cycle fields."""

    year: int = Field(ge=1900, le=9999)
    season_name: str | None = None
    status: BrumationStatus = BrumationStatus.PLANNED
    cooldown_start: datetime | None = None
    full_brumation_start: datetime | None = None
    warmup_start: datetime | None = None
    brumation_end: datetime | None = None
    pre_weight_grams: float | None = Field(default=None, gt=0)
    post_weight_grams: float | None = Field(default=None, gt=0)
    last_feeding_before: datetime | None = None
    first_feeding_after: datetime | None = None
    target_low_temp_f: float | None = None
    target_high_temp_f: float | None = None
    notes: str | None = None


class BrumationCycleCreate(BrumationCycleBase):
    """Payload for planning a brumation cycle."""

    animal_id: uuid.UUID


class BrumationCycleUpdate(BaseModel):
    """Mutable brumation cycle fields; explicit nulls clear a date."""

    season_name: str | None = None
    status: BrumationStatus | None = None
    cooldown_start: datetime | None = None
    full_brumation_start: datetime | None = None
    warmup_start: datetime | None = None
    brumation_end: datetime | None = None
    pre_weight_grams: float | None = Field(default=None, gt=0)
    post_weight_grams: float | None = Field(default=None, gt=0)
    last_feeding_before: datetime | None = None
    first_feeding_after: datetime | None = None
    target_low_temp_f: float | None = None
    target_high_temp_f: float | None = None
    notes: str | None = None


class BrumationCycleRead(BrumationCycleBase):
    """Serialized brumation cycle."""

    id: uuid.UUID
    animal_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PhaseGuidanceRead(BaseModel):
    display_name: str
    description: str
    tasks: list[str]


class BrumationCycleDetail(BrumationCycleRead):
    """Cycle with its date-derived phase."""

    phase: BrumationPhase | None
    next_phase: BrumationPhase | None
    days_in_phase: int | None
    days_until_next_phase: int | None
    next_phase_not_scheduled: bool
    progress: float
    guidance: PhaseGuidanceRead | None
    total_days: int | None
    weight_change_grams: float | None
    weight_change_percentage: float | None
