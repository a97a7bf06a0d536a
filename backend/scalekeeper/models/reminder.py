"""Pending reminder outbox."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from scalekeeper.db.base import Base
from scalekeeper.db.types import UTCDateTime
from scalekeeper.models.mixins import TimestampMixin


class ReminderCategory(str, enum.Enum):
    """Notification category tags understood by device notifiers."""

    FEEDING = "FEEDING_REMINDER"
    MEDICATION = "MEDICATION_REMINDER"
    CLEANING = "CLEANING_REMINDER"
    BRUMATION = "BRUMATION_REMINDER"


class Reminder(TimestampMixin, Base):
    """A reminder waiting to be delivered, keyed by a deterministic identifier."""

    __tablename__ = "reminders"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    identifier: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    category: Mapped[ReminderCategory] = mapped_column(
        Enum(ReminderCategory, values_callable=lambda cls: [item.value for item in cls]),
        nullable=False,
        index=True,
    )
    # None fires immediately.
    fire_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(String(1024), default="", nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
