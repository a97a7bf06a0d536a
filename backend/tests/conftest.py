"""Test fixtures for the ScaleKeeper backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("APP_TIMEZONE", "UTC")

from scalekeeper.api import deps
from scalekeeper.core.clock import FixedClock
from scalekeeper.core.config import get_settings
from scalekeeper.db.base import Base
from scalekeeper.db.session import dispose_engine, get_sessionmaker
from scalekeeper.main import app

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW, ZoneInfo("UTC"))


@pytest.fixture()
def sessionmaker(reset_database: None, db_url: str) -> async_sessionmaker[AsyncSession]:
    return get_sessionmaker(db_url)


@pytest_asyncio.fixture()
async def client(reset_database: None, clock: FixedClock) -> AsyncIterator[AsyncClient]:
    """Async client with the wall clock pinned to ``NOW``."""
    app.dependency_overrides[deps.get_clock] = lambda: clock
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.pop(deps.get_clock, None)
