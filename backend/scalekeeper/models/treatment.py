"""Treatment plan and medication dose models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scalekeeper.db.base import Base
from scalekeeper.db.types import UTCDateTime
from scalekeeper.engine.doses import DoseStatus, PlanStatus
from scalekeeper.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from scalekeeper.models import Animal


class TreatmentPlan(TimestampMixin, Base):
    """A prescription expanded into a timeline of individual doses."""

    __tablename__ = "treatment_plans"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    animal_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("animals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    medication_name: Mapped[str] = mapped_column(String(120), nullable=False)
    condition_treated: Mapped[str | None] = mapped_column(String(255))
    dosage: Mapped[str] = mapped_column(String(120), nullable=False)
    frequency_hours: Mapped[int] = mapped_column(Integer(), nullable=False)
    # None means open-ended.
    total_doses: Mapped[int | None] = mapped_column(Integer())
    prescribed_by: Mapped[str | None] = mapped_column(String(120))
    start_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    end_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    status: Mapped[PlanStatus] = mapped_column(
        Enum(PlanStatus), default=PlanStatus.ACTIVE, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(String(2048))

    animal: Mapped["Animal"] = relationship("Animal", back_populates="treatment_plans")
    doses: Mapped[list["MedicationDose"]] = relationship(
        "MedicationDose",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="MedicationDose.sequence",
        lazy="selectin",
    )

    @property
    def is_open_ended(self) -> bool:
        return self.total_doses is None


class MedicationDose(TimestampMixin, Base):
    """One scheduled administration within a plan."""

    __tablename__ = "medication_doses"
    __table_args__ = (UniqueConstraint("plan_id", "sequence", name="uq_dose_plan_sequence"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    plan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("treatment_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer(), nullable=False)
    scheduled_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    administered_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    status: Mapped[DoseStatus] = mapped_column(
        Enum(DoseStatus), default=DoseStatus.SCHEDULED, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(String(1024))

    plan: Mapped[TreatmentPlan] = relationship("TreatmentPlan", back_populates="doses")
