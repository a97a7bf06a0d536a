"""Feeding routine, feeding event and hunger schemas."""
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from scalekeeper.engine.hunger import (
    FeedingResponse,
    FeedingState,
    HungerUrgency,
    WeightTrend,
)
from scalekeeper.engine.recurrence import RoutineType


class TimeSlot(BaseModel):
    """Time of day a feeding is offered."""

    label: str = "Feeding"
    hour: int = Field(ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class FeedingRoutineBase(BaseModel):
    """Shared feeding routine fields."""

    name: str = Field(min_length=1, max_length=120)
    routine_type: RoutineType
    time_slots: list[TimeSlot] = Field(default_factory=list)
    weekdays: list[int] = Field(default_factory=list)
    interval_days: int | None = None
    start_date: date
    end_date: date | None = None
    notes: str | None = None


class FeedingRoutineCreate(FeedingRoutineBase):
    """Payload for creating a feeding routine."""

    animal_ids: list[uuid.UUID] = Field(default_factory=list)
    is_active: bool = True


class FeedingRoutineUpdate(BaseModel):
    """Mutable feeding routine fields."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    routine_type: RoutineType | None = None
    time_slots: list[TimeSlot] | None = None
    weekdays: list[int] | None = None
    interval_days: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    animal_ids: list[uuid.UUID] | None = None
    is_active: bool | None = None
    notes: str | None = None


class FeedingRoutineRead(FeedingRoutineBase):
    """Serialized feeding routine."""

    id: uuid.UUID
    animal_ids: list[uuid.UUID]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NextFeedingRead(BaseModel):
    """Next feeding of a routine; both fields are null when none is due soon."""

    routine_id: uuid.UUID
    next_at: datetime | None = None
    next_date: date | None = None
    not_scheduled: bool


class ScheduledFeedingRead(BaseModel):
    """A concrete upcoming feeding."""

    routine_id: uuid.UUID | None
    routine_name: str
    scheduled_at: datetime
    slot_label: str
    animal_ids: list[uuid.UUID]
    animal_count: int

    model_config = ConfigDict(from_attributes=True)


class FeedingEventCreate(BaseModel):
    """Payload for logging a feeding; ``fed_at`` defaults to now."""

    prey_type: str = Field(min_length=1, max_length=60)
    response: FeedingResponse
    fed_at: datetime | None = None
    prey_size: str | None = None
    prey_state: str | None = None
    quantity: int = Field(default=1, ge=1)
    prey_weight_grams: float | None = Field(default=None, gt=0)
    refused_reason: str | None = None
    regurgitated_at: datetime | None = None
    notes: str | None = None


class FeedingEventRead(BaseModel):
    """Serialized feeding event."""

    id: uuid.UUID
    animal_id: uuid.UUID
    fed_at: datetime
    prey_type: str
    prey_size: str | None = None
    prey_state: str | None = None
    quantity: int
    prey_weight_grams: float | None = None
    response: FeedingResponse
    is_successful: bool
    refused_reason: str | None = None
    regurgitated_at: datetime | None = None
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class HungerRead(BaseModel):
    """How long an animal has gone without a successful meal."""

    animal_id: uuid.UUID
    animal_name: str
    days_since_last_meal: int | None
    last_successful_feeding: datetime | None
    never_fed: bool
    refusal_count: int
    weight_change_during_strike: float | None
    significant_weight_loss: bool
    weight_trend: WeightTrend | None
    urgency: HungerUrgency
    urgency_advice: str
    advisory: str
    display_text: str


class FeedingStatsRead(BaseModel):
    """Feeding history summary."""

    animal_id: uuid.UUID
    total_feedings: int
    successful_feedings: int
    refusals: int
    success_rate: float
    refusal_rate: float
    average_interval_days: int
    last_feeding_date: datetime | None


class FeedingStatusRead(BaseModel):
    """Where an animal stands against its feeding interval."""

    animal_id: uuid.UUID
    state: FeedingState
    days: int | None
    display_name: str
    priority: int
    interval_days: int
    last_feeding: datetime | None
