"""Feeding routine and feeding history models."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Column,
    Date,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scalekeeper.db.base import Base
from scalekeeper.db.types import UTCDateTime
from scalekeeper.engine.hunger import FeedingResponse
from scalekeeper.engine.recurrence import RoutineType
from scalekeeper.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from scalekeeper.models import Animal


feeding_routine_animals = Table(
    "feeding_routine_animals",
    Base.metadata,
    Column(
        "routine_id",
        ForeignKey("feeding_routines.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "animal_id",
        ForeignKey("animals.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class FeedingRoutine(TimestampMixin, Base):
    """A named recurrence rule for feeding one or more animals."""

    __tablename__ = "feeding_routines"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    routine_type: Mapped[RoutineType] = mapped_column(Enum(RoutineType), nullable=False)
    # [{"label": "Evening", "hour": 18, "minute": 0}, ...]
    time_slots: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    weekdays: Mapped[list[int]] = mapped_column(JSON, default=list, nullable=False)
    interval_days: Mapped[int | None] = mapped_column(Integer())
    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date())
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(String(1024))

    animals: Mapped[list["Animal"]] = relationship(
        "Animal",
        secondary=feeding_routine_animals,
        order_by="Animal.name",
        lazy="selectin",
    )

    @property
    def animal_ids(self) -> list[uuid.UUID]:
        return [animal.id for animal in self.animals]


class FeedingEvent(TimestampMixin, Base):
    """A recorded feeding attempt and the animal's response."""

    __tablename__ = "feeding_events"
    __table_args__ = (Index("ix_feeding_events_animal_fed", "animal_id", "fed_at"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    animal_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("animals.id", ondelete="CASCADE"), nullable=False
    )
    fed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    prey_type: Mapped[str] = mapped_column(String(60), nullable=False)
    prey_size: Mapped[str | None] = mapped_column(String(60))
    prey_state: Mapped[str | None] = mapped_column(String(60))
    quantity: Mapped[int] = mapped_column(Integer(), default=1, nullable=False)
    prey_weight_grams: Mapped[float | None] = mapped_column(Float())
    response: Mapped[FeedingResponse] = mapped_column(Enum(FeedingResponse), nullable=False)
    refused_reason: Mapped[str | None] = mapped_column(String(255))
    regurgitated_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    notes: Mapped[str | None] = mapped_column(String(1024))

    animal: Mapped["Animal"] = relationship("Animal", back_populates="feedings")

    @property
    def is_successful(self) -> bool:
        return self.response.is_successful
