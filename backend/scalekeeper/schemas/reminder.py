"""Reminder outbox schemas."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from scalekeeper.models.reminder import ReminderCategory


class ReminderRead(BaseModel):
    """A pending reminder."""

    id: uuid.UUID
    identifier: str
    category: ReminderCategory
    fire_at: datetime | None
    title: str
    body: str
    payload: dict[str, Any]

    model_config = ConfigDict(from_attributes=True)
