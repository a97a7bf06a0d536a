"""Enclosure and cleaning models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Enum, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scalekeeper.db.base import Base
from scalekeeper.db.types import UTCDateTime
from scalekeeper.engine.cleaning import CleaningType
from scalekeeper.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from scalekeeper.models import Animal


class Enclosure(TimestampMixin, Base):
    """A tank, tub or vivarium."""

    __tablename__ = "enclosures"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    is_bioactive: Mapped[bool] = mapped_column(default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(1024))

    animals: Mapped[list["Animal"]] = relationship("Animal", back_populates="enclosure")
    cleaning_schedules: Mapped[list["CleaningSchedule"]] = relationship(
        "CleaningSchedule", back_populates="enclosure", cascade="all, delete-orphan"
    )
    cleaning_events: Mapped[list["CleaningEvent"]] = relationship(
        "CleaningEvent", back_populates="enclosure", cascade="all, delete-orphan"
    )


class CleaningSchedule(TimestampMixin, Base):
    """How often one cleaning type is due for an enclosure."""

    __tablename__ = "cleaning_schedules"
    __table_args__ = (
        UniqueConstraint("enclosure_id", "cleaning_type", name="uq_cleaning_schedule_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    enclosure_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("enclosures.id", ondelete="CASCADE"), nullable=False
    )
    cleaning_type: Mapped[CleaningType] = mapped_column(Enum(CleaningType), nullable=False)
    interval_days: Mapped[int] = mapped_column(Integer(), nullable=False)
    reminder_enabled: Mapped[bool] = mapped_column(default=True, nullable=False)
    reminder_lead_days: Mapped[int] = mapped_column(Integer(), default=1, nullable=False)

    enclosure: Mapped[Enclosure] = relationship("Enclosure", back_populates="cleaning_schedules")


class CleaningEvent(TimestampMixin, Base):
    """A cleaning that actually happened."""

    __tablename__ = "cleaning_events"
    __table_args__ = (
        Index("ix_cleaning_events_lookup", "enclosure_id", "cleaning_type", "cleaned_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    enclosure_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("enclosures.id", ondelete="CASCADE"), nullable=False
    )
    cleaning_type: Mapped[CleaningType] = mapped_column(Enum(CleaningType), nullable=False)
    cleaned_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    supplies_used: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(1024))

    enclosure: Mapped[Enclosure] = relationship("Enclosure", back_populates="cleaning_events")
