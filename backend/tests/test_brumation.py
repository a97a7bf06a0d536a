"""Brumation cycle API tests."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def _days(offset: int) -> str:
    return (NOW + timedelta(days=offset)).isoformat()


async def _create_animal(client: AsyncClient) -> str:
    response = await client.post("/api/v1/animals", json={"name": "Sandy", "species": "Uromastyx"})
    assert response.status_code == 201
    return response.json()["id"]


async def _brumation_reminders(client: AsyncClient) -> list[dict]:
    response = await client.get("/api/v1/reminders", params={"category": "BRUMATION_REMINDER"})
    assert response.status_code == 200
    return response.json()


async def _create_cycle(client: AsyncClient, animal_id: str, **overrides) -> dict:
    payload = {
        "animal_id": animal_id,
        "year": 2024,
        "season_name": "Winter",
        "cooldown_start": _days(-5),
        "full_brumation_start": _days(9),
        "warmup_start": _days(60),
        "brumation_end": _days(74),
        **overrides,
    }
    response = await client.post("/api/v1/brumation-cycles", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_cycle_phase_is_derived_from_dates(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    cycle = await _create_cycle(client, animal_id, pre_weight_grams=500, post_weight_grams=450)

    assert cycle["status"] == "planned"
    assert cycle["phase"] == "cooldown"
    assert cycle["next_phase"] == "active"
    assert cycle["days_in_phase"] == 5
    assert cycle["days_until_next_phase"] == 9
    assert cycle["next_phase_not_scheduled"] is False
    assert cycle["progress"] == pytest.approx(5 / 14)
    assert cycle["guidance"]["display_name"] == "Cooling Down"
    assert cycle["total_days"] == 79
    assert cycle["weight_change_grams"] == -50
    assert cycle["weight_change_percentage"] == pytest.approx(-10.0)

    reminders = await _brumation_reminders(client)
    assert [reminder["payload"]["phase"] for reminder in reminders] == [
        "active",
        "warmup",
        "complete",
    ]
    assert reminders[0]["title"] == "Brumation Alert"
    assert reminders[0]["body"] == "Sandy: Full Brumation phase starting"


async def test_missing_boundary_is_reported(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    cycle = await _create_cycle(
        client, animal_id, full_brumation_start=None, warmup_start=None, brumation_end=None
    )

    assert cycle["phase"] == "cooldown"
    assert cycle["days_until_next_phase"] is None
    assert cycle["next_phase_not_scheduled"] is True
    assert cycle["total_days"] is None
    assert await _brumation_reminders(client) == []


async def test_cancelling_clears_phase_and_reminders(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    cycle = await _create_cycle(client, animal_id)

    cancelled = await client.patch(
        f"/api/v1/brumation-cycles/{cycle['id']}", json={"status": "cancelled"}
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["phase"] is None
    assert cancelled.json()["progress"] == 0.0
    assert cancelled.json()["guidance"] is None
    assert await _brumation_reminders(client) == []


async def test_rescheduling_rearms_reminders(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    cycle = await _create_cycle(client, animal_id)

    moved = await client.patch(
        f"/api/v1/brumation-cycles/{cycle['id']}",
        json={"warmup_start": _days(45), "notes": "Shortened"},
    )
    assert moved.status_code == 200
    reminders = {
        reminder["payload"]["phase"]: reminder for reminder in await _brumation_reminders(client)
    }
    assert datetime.fromisoformat(reminders["warmup"]["fire_at"]) == NOW + timedelta(days=45)

    out_of_order = await client.patch(
        f"/api/v1/brumation-cycles/{cycle['id']}", json={"warmup_start": _days(1)}
    )
    assert out_of_order.status_code == 400

    fetched = await client.get(f"/api/v1/brumation-cycles/{cycle['id']}")
    assert fetched.json()["notes"] == "Shortened"


async def test_invalid_cycles_are_rejected(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)

    backwards = await client.post(
        "/api/v1/brumation-cycles",
        json={
            "animal_id": animal_id,
            "year": 2024,
            "cooldown_start": _days(10),
            "full_brumation_start": _days(1),
        },
    )
    assert backwards.status_code == 400

    unknown = await client.post(
        "/api/v1/brumation-cycles", json={"animal_id": str(uuid.uuid4()), "year": 2024}
    )
    assert unknown.status_code == 400

    missing = await client.get(f"/api/v1/brumation-cycles/{uuid.uuid4()}")
    assert missing.status_code == 404


async def test_list_cycles_by_animal(client: AsyncClient) -> None:
    first = await _create_animal(client)
    second = await _create_animal(client)
    await _create_cycle(client, first)
    await _create_cycle(client, second, year=2023)

    listing = await client.get("/api/v1/brumation-cycles", params={"animal_id": second})
    assert [row["year"] for row in listing.json()] == [2023]
    everything = await client.get("/api/v1/brumation-cycles")
    assert [row["year"] for row in everything.json()] == [2024, 2023]
