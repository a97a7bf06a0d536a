"""Animal and weight schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnimalBase(BaseModel):
    """Shared animal fields."""

    name: str = Field(min_length=1, max_length=120)
    species: str | None = None
    enclosure_id: uuid.UUID | None = None
    notes: str | None = None


class AnimalCreate(AnimalBase):
    """Payload for creating an animal."""


class AnimalUpdate(BaseModel):
    """Mutable animal fields."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    species: str | None = None
    enclosure_id: uuid.UUID | None = None
    is_active: bool | None = None
    notes: str | None = None


class AnimalRead(AnimalBase):
    """Serialized animal."""

    id: uuid.UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WeightRecordCreate(BaseModel):
    """Payload for logging a weigh-in; ``recorded_at`` defaults to now."""

    weight_grams: float = Field(gt=0)
    recorded_at: datetime | None = None
    notes: str | None = None


class WeightRecordRead(BaseModel):
    """Serialized weigh-in."""

    id: uuid.UUID
    animal_id: uuid.UUID
    weight_grams: float
    recorded_at: datetime
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)
