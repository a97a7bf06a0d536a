"""Animal and weight history models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scalekeeper.db.base import Base
from scalekeeper.db.types import UTCDateTime
from scalekeeper.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from scalekeeper.models import (
        BrumationCycle,
        Enclosure,
        FeedingEvent,
        TreatmentPlan,
    )


class Animal(TimestampMixin, Base):
    """A kept animal."""

    __tablename__ = "animals"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    species: Mapped[str | None] = mapped_column(String(120))
    enclosure_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("enclosures.id", ondelete="SET NULL")
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(1024))

    enclosure: Mapped["Enclosure | None"] = relationship(
        "Enclosure", back_populates="animals"
    )
    weights: Mapped[list["WeightRecord"]] = relationship(
        "WeightRecord", back_populates="animal", cascade="all, delete-orphan"
    )
    feedings: Mapped[list["FeedingEvent"]] = relationship(
        "FeedingEvent", back_populates="animal", cascade="all, delete-orphan"
    )
    treatment_plans: Mapped[list["TreatmentPlan"]] = relationship(
        "TreatmentPlan", back_populates="animal", cascade="all, delete-orphan"
    )
    brumation_cycles: Mapped[list["BrumationCycle"]] = relationship(
        "BrumationCycle", back_populates="animal", cascade="all, delete-orphan"
    )


class WeightRecord(TimestampMixin, Base):
    """A single weigh-in."""

    __tablename__ = "weight_records"
    __table_args__ = (Index("ix_weight_records_animal_recorded", "animal_id", "recorded_at"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    animal_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("animals.id", ondelete="CASCADE"), nullable=False
    )
    recorded_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    weight_grams: Mapped[float] = mapped_column(Float(), nullable=False)
    notes: Mapped[str | None] = mapped_column(String(512))

    animal: Mapped[Animal] = relationship("Animal", back_populates="weights")
