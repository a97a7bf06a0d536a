"""Health endpoint smoke tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from scalekeeper.main import app


@pytest.mark.asyncio
async def test_healthcheck_returns_ok() -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["service"] == "ScaleKeeper API"
    assert payload["timezone"] == "UTC"


@pytest.mark.asyncio
async def test_healthcheck_sets_request_and_security_headers() -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        echoed = await client.get("/api/v1/health", headers={"X-Request-ID": "a" * 32})
        generated = await client.get("/api/v1/health")
    assert echoed.status_code == 200
    assert echoed.headers["x-request-id"] == "a" * 32
    assert echoed.headers["x-content-type-options"] == "nosniff"
    assert len(generated.headers["x-request-id"]) == 32


@pytest.mark.asyncio
async def test_healthcheck_is_only_served_under_the_api_prefix() -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 404
