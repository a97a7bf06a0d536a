"""Enclosure and cleaning schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scalekeeper.engine.cleaning import CleaningType, CleaningUrgency


class EnclosureBase(BaseModel):
    """Shared enclosure fields."""

    name: str = Field(min_length=1, max_length=120)
    is_bioactive: bool = False
    notes: str | None = None


class EnclosureCreate(EnclosureBase):
    """Payload for creating an enclosure."""

    seed_default_schedules: bool = True


class EnclosureRead(EnclosureBase):
    """Serialized enclosure."""

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CleaningScheduleUpsert(BaseModel):
    """Interval settings for one cleaning type; omitted interval uses the type default."""

    interval_days: int | None = Field(default=None, ge=1)
    reminder_enabled: bool = True
    reminder_lead_days: int = Field(default=1, ge=0)


class CleaningScheduleRead(BaseModel):
    """Serialized cleaning schedule."""

    id: uuid.UUID
    enclosure_id: uuid.UUID
    cleaning_type: CleaningType
    interval_days: int
    reminder_enabled: bool
    reminder_lead_days: int

    model_config = ConfigDict(from_attributes=True)


class CleaningEventCreate(BaseModel):
    """Payload for logging a cleaning; ``cleaned_at`` defaults to now."""

    cleaning_type: CleaningType
    cleaned_at: datetime | None = None
    supplies_used: list[str] = Field(default_factory=list)
    notes: str | None = None


class CleaningEventRead(BaseModel):
    """Serialized cleaning event."""

    id: uuid.UUID
    enclosure_id: uuid.UUID
    cleaning_type: CleaningType
    cleaned_at: datetime
    supplies_used: list[str]
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CleaningStatusRead(BaseModel):
    """Urgency of one cleaning type in one enclosure."""

    enclosure_id: uuid.UUID | None
    enclosure_name: str
    cleaning_type: CleaningType
    cleaning_type_display: str
    last_cleaned: datetime | None
    never_cleaned: bool
    interval_days: int
    days_since_last_clean: int | None
    days_until_due: int | None
    display_days_until_due: int
    urgency: CleaningUrgency


class CleaningAttentionRead(BaseModel):
    """Cleaning tasks that need attention across enclosures."""

    overdue: list[CleaningStatusRead]
    due_soon: list[CleaningStatusRead]
