"""Reminder outbox and best-effort delivery tests."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scalekeeper.core.clock import FixedClock
from scalekeeper.models import Reminder, ReminderCategory, TreatmentPlan
from scalekeeper.schemas.animal import AnimalCreate
from scalekeeper.schemas.treatment import TreatmentPlanCreate
from scalekeeper.services import animal_service, reminder_service, treatment_service
from scalekeeper.services.reminder_service import OutboxReminderPort

pytestmark = pytest.mark.asyncio

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


class FailingPort:
    """Reminder port whose every call raises."""

    def __init__(self) -> None:
        self.calls = 0

    async def schedule(self, *args, **kwargs) -> None:
        self.calls += 1
        raise RuntimeError("notifier unavailable")

    async def cancel(self, identifier: str) -> None:
        self.calls += 1
        raise RuntimeError("notifier unavailable")

    async def cancel_for(self, category: ReminderCategory, key: str, value: str) -> None:
        self.calls += 1
        raise RuntimeError("notifier unavailable")


async def test_best_effort_retries_until_success() -> None:
    attempts: list[int] = []

    async def flaky() -> None:
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("try again")

    assert await reminder_service.best_effort("flaky", flaky, attempts=3) is True
    assert len(attempts) == 3


async def test_best_effort_logs_final_failure(caplog: pytest.LogCaptureFixture) -> None:
    port = FailingPort()

    with caplog.at_level(logging.WARNING, logger="scalekeeper.services.reminder_service"):
        delivered = await reminder_service.best_effort(
            "cancel", lambda: port.cancel("feeding-x"), attempts=2
        )

    assert delivered is False
    assert port.calls == 2
    assert any(record.levelno == logging.ERROR for record in caplog.records)


async def test_outbox_upserts_by_identifier(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> None:
    port = OutboxReminderPort(sessionmaker)
    plan_id = str(uuid.uuid4())

    await port.schedule(
        "medication-a",
        NOW,
        ReminderCategory.MEDICATION,
        {"treatment_plan_id": plan_id},
        title="Medication Due",
    )
    await port.schedule(
        "medication-a",
        NOW + timedelta(hours=1),
        ReminderCategory.MEDICATION,
        {"treatment_plan_id": plan_id},
        title="Medication Due",
        body="moved",
    )
    await port.schedule(
        "medication-b",
        None,
        ReminderCategory.MEDICATION,
        {"treatment_plan_id": str(uuid.uuid4())},
        title="Medication Due",
    )

    async with sessionmaker() as session:
        pending = await reminder_service.list_pending(session)
    assert [reminder.identifier for reminder in pending] == ["medication-b", "medication-a"]
    assert pending[1].body == "moved"
    assert pending[1].fire_at == NOW + timedelta(hours=1)

    await port.cancel_for(ReminderCategory.MEDICATION, "treatment_plan_id", plan_id)
    await port.cancel("medication-b")
    async with sessionmaker() as session:
        assert await reminder_service.list_pending(session) == []


async def test_reminder_failure_does_not_undo_plan_creation(
    sessionmaker: async_sessionmaker[AsyncSession],
    clock: FixedClock,
) -> None:
    port = FailingPort()
    async with sessionmaker() as session:
        animal = await animal_service.create_animal(session, AnimalCreate(name="Kiwi"))
        plan = await treatment_service.create_plan(
            session,
            TreatmentPlanCreate(
                animal_id=animal.id,
                medication_name="Baytril",
                dosage="0.1 ml",
                frequency_hours=24,
                total_doses=3,
                start_at=NOW,
            ),
            reminders=port,
            clock=clock,
            open_ended_horizon_days=14,
            reminder_attempts=2,
        )

    assert port.calls == 2
    async with sessionmaker() as session:
        stored = await session.get(TreatmentPlan, plan.id)
        assert stored is not None
        assert len(stored.doses) == 3
        reminders = (await session.execute(select(Reminder))).scalars().all()
        assert reminders == []


async def test_reminder_endpoint_filters_by_category(client: AsyncClient) -> None:
    enclosure = await client.post("/api/v1/enclosures", json={"name": "Rack"})
    assert enclosure.status_code == 201

    everything = await client.get("/api/v1/reminders")
    assert {row["category"] for row in everything.json()} == {"CLEANING_REMINDER"}

    feeding = await client.get("/api/v1/reminders", params={"category": "FEEDING_REMINDER"})
    assert feeding.json() == []
