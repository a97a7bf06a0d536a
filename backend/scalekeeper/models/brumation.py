"""Brumation cycle model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scalekeeper.db.base import Base
from scalekeeper.db.types import UTCDateTime
from scalekeeper.engine.brumation import BrumationStatus, BrumationTimeline
from scalekeeper.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from scalekeeper.models import Animal


class BrumationCycle(TimestampMixin, Base):
    """One animal's dormancy season, described by its phase boundary dates."""

    __tablename__ = "brumation_cycles"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    animal_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("animals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    year: Mapped[int] = mapped_column(Integer(), nullable=False)
    season_name: Mapped[str | None] = mapped_column(String(60))
    status: Mapped[BrumationStatus] = mapped_column(
        Enum(BrumationStatus), default=BrumationStatus.PLANNED, nullable=False
    )
    cooldown_start: Mapped[datetime | None] = mapped_column(UTCDateTime())
    full_brumation_start: Mapped[datetime | None] = mapped_column(UTCDateTime())
    warmup_start: Mapped[datetime | None] = mapped_column(UTCDateTime())
    brumation_end: Mapped[datetime | None] = mapped_column(UTCDateTime())
    pre_weight_grams: Mapped[float | None] = mapped_column(Float())
    post_weight_grams: Mapped[float | None] = mapped_column(Float())
    last_feeding_before: Mapped[datetime | None] = mapped_column(UTCDateTime())
    first_feeding_after: Mapped[datetime | None] = mapped_column(UTCDateTime())
    target_low_temp_f: Mapped[float | None] = mapped_column(Float())
    target_high_temp_f: Mapped[float | None] = mapped_column(Float())
    notes: Mapped[str | None] = mapped_column(String(2048))

    animal: Mapped["Animal"] = relationship("Animal", back_populates="brumation_cycles")

    def timeline(self) -> BrumationTimeline:
        return BrumationTimeline(
            status=self.status,
            cooldown_start=self.cooldown_start,
            full_brumation_start=self.full_brumation_start,
            warmup_start=self.warmup_start,
            brumation_end=self.brumation_end,
        )
