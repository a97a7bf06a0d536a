"""Treatment plan, dose and medication board API tests."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


async def _create_animal(client: AsyncClient, name: str = "Rex") -> str:
    response = await client.post("/api/v1/animals", json={"name": name, "species": "Bearded dragon"})
    assert response.status_code == 201
    return response.json()["id"]


async def _create_plan(client: AsyncClient, animal_id: str, **overrides) -> dict:
    payload = {
        "animal_id": animal_id,
        "medication_name": "Baytril",
        "dosage": "0.1 ml",
        "frequency_hours": 12,
        "total_doses": 3,
        "start_at": (NOW - timedelta(hours=1)).isoformat(),
        **overrides,
    }
    response = await client.post("/api/v1/treatments", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _medication_reminders(client: AsyncClient) -> list[dict]:
    response = await client.get("/api/v1/reminders", params={"category": "MEDICATION_REMINDER"})
    assert response.status_code == 200
    return response.json()


def _dose_url(plan: dict, index: int, action: str) -> str:
    return f"/api/v1/treatments/{plan['id']}/doses/{plan['doses'][index]['id']}/{action}"


async def test_plan_creation_expands_dose_timeline(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(client, animal_id, condition_treated="Mouth rot")

    assert plan["status"] == "active"
    assert [dose["sequence"] for dose in plan["doses"]] == [0, 1, 2]
    assert [datetime.fromisoformat(dose["scheduled_at"]) for dose in plan["doses"]] == [
        NOW - timedelta(hours=1),
        NOW + timedelta(hours=11),
        NOW + timedelta(hours=23),
    ]
    assert datetime.fromisoformat(plan["end_at"]) == NOW + timedelta(hours=23)
    assert plan["overdue_count"] == 1
    assert plan["next_dose"]["sequence"] == 0
    assert plan["progress_percentage"] == 0.0

    reminders = await _medication_reminders(client)
    assert len(reminders) == 2
    assert {reminder["title"] for reminder in reminders} == {"Medication Due"}
    assert reminders[0]["body"] == "Rex: Baytril - 0.1 ml"
    assert {reminder["payload"]["treatment_plan_id"] for reminder in reminders} == {plan["id"]}


async def test_invalid_plan_is_not_persisted(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)

    response = await client.post(
        "/api/v1/treatments",
        json={
            "animal_id": animal_id,
            "medication_name": "Baytril",
            "dosage": "0.1 ml",
            "frequency_hours": 0,
            "total_doses": 3,
        },
    )
    assert response.status_code == 400

    unknown_animal = await client.post(
        "/api/v1/treatments",
        json={
            "animal_id": str(uuid.uuid4()),
            "medication_name": "Baytril",
            "dosage": "0.1 ml",
            "frequency_hours": 12,
        },
    )
    assert unknown_animal.status_code == 400

    listing = await client.get("/api/v1/treatments")
    assert listing.json() == []


async def test_dose_transitions(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(client, animal_id)

    administered = await client.post(_dose_url(plan, 0, "administer"), json={"notes": "Easy"})
    assert administered.status_code == 200
    assert administered.json()["status"] == "administered"
    assert datetime.fromisoformat(administered.json()["administered_at"]) == NOW
    assert administered.json()["notes"] == "Easy"

    again = await client.post(_dose_url(plan, 0, "skip"), json={})
    assert again.status_code == 409

    skipped = await client.post(_dose_url(plan, 1, "skip"), json={})
    assert skipped.json()["status"] == "skipped"
    reminders = await _medication_reminders(client)
    assert [reminder["payload"]["dose_id"] for reminder in reminders] == [plan["doses"][2]["id"]]

    missed = await client.post(_dose_url(plan, 2, "miss"), json={})
    assert missed.json()["status"] == "missed"

    detail = await client.get(f"/api/v1/treatments/{plan['id']}")
    assert detail.json()["status"] == "active"
    assert detail.json()["administered_count"] == 1
    assert detail.json()["next_dose"] is None

    missing = await client.post(
        f"/api/v1/treatments/{plan['id']}/doses/{uuid.uuid4()}/administer", json={}
    )
    assert missing.status_code == 404


async def test_plan_completes_after_final_dose(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(client, animal_id, total_doses=2)

    first = await client.post(_dose_url(plan, 0, "administer"), json={})
    assert first.status_code == 200
    final = await client.post(
        _dose_url(plan, 1, "administer"),
        json={"administered_at": (NOW + timedelta(hours=11)).isoformat()},
    )
    assert final.status_code == 200

    detail = await client.get(f"/api/v1/treatments/{plan['id']}")
    assert detail.json()["status"] == "completed"
    assert detail.json()["progress_percentage"] == 100.0
    assert await _medication_reminders(client) == []

    paused = await client.post(f"/api/v1/treatments/{plan['id']}/pause")
    assert paused.status_code == 409


async def test_single_dose_plan_completes_on_administer(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(client, animal_id, total_doses=1)

    administered = await client.post(_dose_url(plan, 0, "administer"), json={})
    assert administered.status_code == 200
    assert administered.json()["status"] == "administered"

    detail = await client.get(f"/api/v1/treatments/{plan['id']}")
    assert detail.json()["status"] == "completed"
    assert detail.json()["administered_count"] == 1


async def test_paused_and_discontinued_plans_still_close_out_doses(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(client, animal_id)
    await client.post(f"/api/v1/treatments/{plan['id']}/pause")

    missed = await client.post(_dose_url(plan, 0, "miss"), json={})
    assert missed.status_code == 200
    assert missed.json()["status"] == "missed"

    detail = await client.get(f"/api/v1/treatments/{plan['id']}")
    assert detail.json()["status"] == "paused"
    assert detail.json()["overdue_count"] == 0

    blocked = await client.post(_dose_url(plan, 1, "administer"), json={})
    assert blocked.status_code == 409

    await client.post(f"/api/v1/treatments/{plan['id']}/discontinue", json={})
    skipped = await client.post(_dose_url(plan, 1, "skip"), json={})
    assert skipped.status_code == 200
    assert skipped.json()["status"] == "skipped"


async def test_pause_resume_and_discontinue(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(client, animal_id)

    paused = await client.post(f"/api/v1/treatments/{plan['id']}/pause")
    assert paused.status_code == 200
    assert paused.json()["status"] == "paused"
    assert await _medication_reminders(client) == []

    blocked = await client.post(_dose_url(plan, 0, "administer"), json={})
    assert blocked.status_code == 409

    resumed = await client.post(f"/api/v1/treatments/{plan['id']}/resume")
    assert resumed.json()["status"] == "active"
    assert len(await _medication_reminders(client)) == 2

    discontinued = await client.post(
        f"/api/v1/treatments/{plan['id']}/discontinue", json={"reason": "Resolved"}
    )
    assert discontinued.status_code == 200
    assert discontinued.json()["status"] == "discontinued"
    assert discontinued.json()["notes"] == "Discontinued: Resolved"
    assert datetime.fromisoformat(discontinued.json()["end_at"]) == NOW
    assert await _medication_reminders(client) == []

    revived = await client.post(f"/api/v1/treatments/{plan['id']}/resume")
    assert revived.status_code == 409

    by_status = await client.get("/api/v1/treatments", params={"status": "discontinued"})
    assert [row["id"] for row in by_status.json()] == [plan["id"]]


async def test_open_ended_plan_extends(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    plan = await _create_plan(
        client, animal_id, frequency_hours=24, total_doses=None, start_at=NOW.isoformat()
    )
    assert plan["end_at"] is None
    assert len(plan["doses"]) == 15
    assert plan["progress_percentage"] == 0.0

    extended = await client.post(f"/api/v1/treatments/{plan['id']}/extend", json={"days": 7})
    assert extended.status_code == 200
    doses = extended.json()["doses"]
    assert len(doses) == 22
    assert [dose["sequence"] for dose in doses] == list(range(22))
    assert datetime.fromisoformat(doses[-1]["scheduled_at"]) == NOW + timedelta(days=21)

    bounded = await _create_plan(client, animal_id)
    refused = await client.post(f"/api/v1/treatments/{bounded['id']}/extend", json={"days": 7})
    assert refused.status_code == 400


async def test_medication_board(client: AsyncClient) -> None:
    rex = await _create_animal(client, "Rex")
    ada = await _create_animal(client, "Ada")
    await _create_plan(client, rex)
    await _create_plan(
        client,
        ada,
        medication_name="Metacam",
        frequency_hours=24,
        total_doses=5,
        start_at=(NOW + timedelta(days=2)).isoformat(),
    )
    paused = await _create_plan(client, rex, medication_name="Panacur")
    await client.post(f"/api/v1/treatments/{paused['id']}/pause")

    board = await client.get("/api/v1/medication-board")
    assert board.status_code == 200
    body = board.json()
    assert body["date"] == "2024-03-01"
    assert [(row["animal_name"], row["medication_name"]) for row in body["rows"]] == [
        ("Ada", "Metacam"),
        ("Rex", "Baytril"),
    ]
    ada_row, rex_row = body["rows"]
    assert ada_row["todays_doses"] == []
    assert ada_row["remaining_count"] == 5
    assert len(rex_row["todays_doses"]) == 2
    assert len(rex_row["overdue_doses"]) == 1

    later = await client.get("/api/v1/medication-board", params={"date": "2024-03-03"})
    assert [len(row["todays_doses"]) for row in later.json()["rows"]] == [1, 0]
