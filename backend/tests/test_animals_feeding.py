"""Animal, weight and feeding history API tests."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

pytestmark = pytest.mark.asyncio


async def _create_animal(client: AsyncClient, name: str = "Noodle", **fields) -> str:
    response = await client.post(
        "/api/v1/animals", json={"name": name, "species": "Ball python", **fields}
    )
    assert response.status_code == 201
    return response.json()["id"]


async def _log_feeding(client: AsyncClient, animal_id: str, days_ago: int, response: str) -> None:
    resp = await client.post(
        f"/api/v1/animals/{animal_id}/feedings",
        json={
            "prey_type": "Mouse",
            "prey_size": "Adult",
            "response": response,
            "fed_at": (NOW - timedelta(days=days_ago)).isoformat(),
        },
    )
    assert resp.status_code == 201, resp.text


async def test_animal_crud(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)

    fetched = await client.get(f"/api/v1/animals/{animal_id}")
    assert fetched.status_code == 200
    assert fetched.json()["is_active"] is True

    updated = await client.patch(f"/api/v1/animals/{animal_id}", json={"is_active": False})
    assert updated.status_code == 200
    assert updated.json()["is_active"] is False

    active = await client.get("/api/v1/animals")
    assert active.json() == []
    everything = await client.get("/api/v1/animals", params={"include_inactive": True})
    assert [row["id"] for row in everything.json()] == [animal_id]

    missing = await client.get(f"/api/v1/animals/{uuid.uuid4()}")
    assert missing.status_code == 404


async def test_animal_with_unknown_enclosure_is_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/animals", json={"name": "Pip", "enclosure_id": str(uuid.uuid4())}
    )
    assert response.status_code == 400


async def test_weights_are_listed_newest_first(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    first = await client.post(
        f"/api/v1/animals/{animal_id}/weights",
        json={"weight_grams": 410.5, "recorded_at": (NOW - timedelta(days=7)).isoformat()},
    )
    assert first.status_code == 201
    second = await client.post(f"/api/v1/animals/{animal_id}/weights", json={"weight_grams": 415})
    assert second.status_code == 201
    assert datetime.fromisoformat(second.json()["recorded_at"]) == NOW

    listing = await client.get(f"/api/v1/animals/{animal_id}/weights")
    assert [row["weight_grams"] for row in listing.json()] == [415, 410.5]

    invalid = await client.post(f"/api/v1/animals/{animal_id}/weights", json={"weight_grams": 0})
    assert invalid.status_code == 422


async def test_feeding_log_and_hunger(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)
    await client.post(
        f"/api/v1/animals/{animal_id}/weights",
        json={"weight_grams": 100, "recorded_at": (NOW - timedelta(days=22)).isoformat()},
    )
    await client.post(
        f"/api/v1/animals/{animal_id}/weights",
        json={"weight_grams": 92, "recorded_at": (NOW - timedelta(days=1)).isoformat()},
    )
    await _log_feeding(client, animal_id, 20, "struck_immediately")
    await _log_feeding(client, animal_id, 12, "refused")
    await _log_feeding(client, animal_id, 5, "refused")

    feedings = await client.get(f"/api/v1/animals/{animal_id}/feedings")
    assert [row["response"] for row in feedings.json()] == [
        "refused",
        "refused",
        "struck_immediately",
    ]
    assert feedings.json()[2]["is_successful"] is True

    hunger = await client.get(f"/api/v1/animals/{animal_id}/hunger")
    assert hunger.status_code == 200
    body = hunger.json()
    assert body["days_since_last_meal"] == 20
    assert body["refusal_count"] == 2
    assert body["urgency"] == "extended"
    assert body["weight_trend"] == "losing"
    assert body["weight_change_during_strike"] == pytest.approx(-8.0)
    assert body["significant_weight_loss"] is False
    assert body["advisory"] == "Slight weight loss during strike, continue monitoring."
    assert body["display_text"] == "Last ate 20 days ago"

    stats = await client.get(f"/api/v1/animals/{animal_id}/feeding-stats")
    assert stats.json()["total_feedings"] == 3
    assert stats.json()["refusals"] == 2
    assert stats.json()["average_interval_days"] == 7

    status = await client.get(f"/api/v1/animals/{animal_id}/feeding-status")
    assert status.json()["state"] == "overdue"
    assert status.json()["days"] == 13
    assert status.json()["display_name"] == "Overdue (13d)"

    custom = await client.get(
        f"/api/v1/animals/{animal_id}/feeding-status", params={"interval_days": 30}
    )
    assert custom.json()["state"] == "upcoming"
    assert custom.json()["days"] == 10


async def test_never_fed_animal(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)

    hunger = await client.get(f"/api/v1/animals/{animal_id}/hunger")
    assert hunger.json()["never_fed"] is True
    assert hunger.json()["urgency"] == "unknown"

    status = await client.get(f"/api/v1/animals/{animal_id}/feeding-status")
    assert status.json()["state"] == "not_scheduled"


async def test_extended_hunger_lists_longest_fast_first(client: AsyncClient) -> None:
    recent = await _create_animal(client, "Basil")
    long_fast = await _create_animal(client, "Clover")
    longer_fast = await _create_animal(client, "Dune")
    await _log_feeding(client, recent, 2, "reluctant")
    await _log_feeding(client, long_fast, 18, "assisted_feed")
    await _log_feeding(client, longer_fast, 45, "struck_immediately")

    response = await client.get("/api/v1/feeding/extended-hunger")
    assert response.status_code == 200
    assert [(row["animal_name"], row["urgency"]) for row in response.json()] == [
        ("Dune", "concerning"),
        ("Clover", "extended"),
    ]


async def test_feeding_validation(client: AsyncClient) -> None:
    animal_id = await _create_animal(client)

    bad_response = await client.post(
        f"/api/v1/animals/{animal_id}/feedings",
        json={"prey_type": "Mouse", "response": "ate_a_lot"},
    )
    assert bad_response.status_code == 422

    unknown = await client.post(
        f"/api/v1/animals/{uuid.uuid4()}/feedings",
        json={"prey_type": "Mouse", "response": "refused"},
    )
    assert unknown.status_code == 404
