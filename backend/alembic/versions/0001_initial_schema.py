"""Initial husbandry schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

routine_type = sa.Enum(
    "DAILY", "EVERY_OTHER_DAY", "WEEKLY", "EVERY_N_DAYS", "CUSTOM", name="routinetype"
)
feeding_response = sa.Enum(
    "STRUCK_IMMEDIATELY",
    "RELUCTANT",
    "ASSISTED_FEED",
    "REFUSED",
    "REGURGITATED",
    name="feedingresponse",
)
cleaning_type = sa.Enum(
    "SPOT_CLEAN",
    "SUBSTRATE_CHANGE",
    "DEEP_CLEAN",
    "WATER_CHANGE",
    "BIOACTIVE_MAINTENANCE",
    "CUSTOM",
    name="cleaningtype",
)
plan_status = sa.Enum("ACTIVE", "PAUSED", "DISCONTINUED", "COMPLETED", name="planstatus")
dose_status = sa.Enum("SCHEDULED", "ADMINISTERED", "SKIPPED", "MISSED", name="dosestatus")
brumation_status = sa.Enum(
    "PLANNED", "COOLDOWN", "ACTIVE", "WARMUP", "COMPLETE", "CANCELLED", name="brumationstatus"
)
reminder_category = sa.Enum(
    "FEEDING_REMINDER",
    "MEDICATION_REMINDER",
    "CLEANING_REMINDER",
    "BRUMATION_REMINDER",
    name="remindercategory",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _animal_fk(**kwargs) -> sa.Column:
    return sa.Column(
        "animal_id",
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("animals.id", ondelete="CASCADE"),
        nullable=False,
        **kwargs,
    )


def upgrade() -> None:
    op.create_table(
        "enclosures",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("is_bioactive", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
    )

    op.create_table(
        "animals",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("species", sa.String(length=120)),
        sa.Column(
            "enclosure_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("enclosures.id", ondelete="SET NULL"),
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
    )

    op.create_table(
        "weight_records",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _animal_fk(),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("weight_grams", sa.Float(), nullable=False),
        sa.Column("notes", sa.String(length=512)),
        *_timestamps(),
    )
    op.create_index(
        "ix_weight_records_animal_recorded", "weight_records", ["animal_id", "recorded_at"]
    )

    op.create_table(
        "cleaning_schedules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "enclosure_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("enclosures.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("cleaning_type", cleaning_type, nullable=False),
        sa.Column("interval_days", sa.Integer(), nullable=False),
        sa.Column("reminder_enabled", sa.Boolean(), nullable=False),
        sa.Column("reminder_lead_days", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("enclosure_id", "cleaning_type", name="uq_cleaning_schedule_type"),
    )

    op.create_table(
        "cleaning_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "enclosure_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("enclosures.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("cleaning_type", cleaning_type, nullable=False),
        sa.Column("cleaned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("supplies_used", sa.JSON(), nullable=False),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
    )
    op.create_index(
        "ix_cleaning_events_lookup",
        "cleaning_events",
        ["enclosure_id", "cleaning_type", "cleaned_at"],
    )

    op.create_table(
        "feeding_routines",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("routine_type", routine_type, nullable=False),
        sa.Column("time_slots", sa.JSON(), nullable=False),
        sa.Column("weekdays", sa.JSON(), nullable=False),
        sa.Column("interval_days", sa.Integer()),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date()),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
    )

    op.create_table(
        "feeding_routine_animals",
        sa.Column(
            "routine_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("feeding_routines.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "animal_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("animals.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index(
        "ix_feeding_routine_animals_animal_id", "feeding_routine_animals", ["animal_id"]
    )

    op.create_table(
        "feeding_events",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _animal_fk(),
        sa.Column("fed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("prey_type", sa.String(length=60), nullable=False),
        sa.Column("prey_size", sa.String(length=60)),
        sa.Column("prey_state", sa.String(length=60)),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("prey_weight_grams", sa.Float()),
        sa.Column("response", feeding_response, nullable=False),
        sa.Column("refused_reason", sa.String(length=255)),
        sa.Column("regurgitated_at", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
    )
    op.create_index("ix_feeding_events_animal_fed", "feeding_events", ["animal_id", "fed_at"])

    op.create_table(
        "treatment_plans",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _animal_fk(index=True),
        sa.Column("medication_name", sa.String(length=120), nullable=False),
        sa.Column("condition_treated", sa.String(length=255)),
        sa.Column("dosage", sa.String(length=120), nullable=False),
        sa.Column("frequency_hours", sa.Integer(), nullable=False),
        sa.Column("total_doses", sa.Integer()),
        sa.Column("prescribed_by", sa.String(length=120)),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True)),
        sa.Column("status", plan_status, nullable=False),
        sa.Column("notes", sa.String(length=2048)),
        *_timestamps(),
    )

    op.create_table(
        "medication_doses",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "plan_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("treatment_plans.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("administered_at", sa.DateTime(timezone=True)),
        sa.Column("status", dose_status, nullable=False),
        sa.Column("notes", sa.String(length=1024)),
        *_timestamps(),
        sa.UniqueConstraint("plan_id", "sequence", name="uq_dose_plan_sequence"),
    )

    op.create_table(
        "brumation_cycles",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _animal_fk(index=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("season_name", sa.String(length=60)),
        sa.Column("status", brumation_status, nullable=False),
        sa.Column("cooldown_start", sa.DateTime(timezone=True)),
        sa.Column("full_brumation_start", sa.DateTime(timezone=True)),
        sa.Column("warmup_start", sa.DateTime(timezone=True)),
        sa.Column("brumation_end", sa.DateTime(timezone=True)),
        sa.Column("pre_weight_grams", sa.Float()),
        sa.Column("post_weight_grams", sa.Float()),
        sa.Column("last_feeding_before", sa.DateTime(timezone=True)),
        sa.Column("first_feeding_after", sa.DateTime(timezone=True)),
        sa.Column("target_low_temp_f", sa.Float()),
        sa.Column("target_high_temp_f", sa.Float()),
        sa.Column("notes", sa.String(length=2048)),
        *_timestamps(),
    )

    op.create_table(
        "reminders",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("identifier", sa.String(length=200), nullable=False, unique=True),
        sa.Column("category", reminder_category, nullable=False, index=True),
        sa.Column("fire_at", sa.DateTime(timezone=True), index=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("body", sa.String(length=1024), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("reminders")
    op.drop_table("brumation_cycles")
    op.drop_table("medication_doses")
    op.drop_table("treatment_plans")
    op.drop_index("ix_feeding_events_animal_fed", table_name="feeding_events")
    op.drop_table("feeding_events")
    op.drop_index("ix_feeding_routine_animals_animal_id", table_name="feeding_routine_animals")
    op.drop_table("feeding_routine_animals")
    op.drop_table("feeding_routines")
    op.drop_index("ix_cleaning_events_lookup", table_name="cleaning_events")
    op.drop_table("cleaning_events")
    op.drop_table("cleaning_schedules")
    op.drop_index("ix_weight_records_animal_recorded", table_name="weight_records")
    op.drop_table("weight_records")
    op.drop_table("animals")
    op.drop_table("enclosures")
    bind = op.get_bind()
    for enum_type in (
        reminder_category,
        brumation_status,
        dose_status,
        plan_status,
        cleaning_type,
        feeding_response,
        routine_type,
    ):
        enum_type.drop(bind, checkfirst=True)
