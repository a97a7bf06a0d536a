"""Database engine and session factories."""

from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from scalekeeper.core.config import get_settings

_engines: dict[str, AsyncEngine] = {}
_sessionmakers: dict[str, async_sessionmaker[AsyncSession]] = {}


def _database_url(override: str | None = None) -> str:
    return override or get_settings().database_url


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:  # noqa: ANN001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(url: str) -> AsyncEngine:
    engine = create_async_engine(url, echo=False)
    if make_url(url).get_backend_name() == "sqlite":
        # Cascading dose/event deletes rely on FK enforcement.
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_engine(database_url: str | None = None) -> AsyncEngine:
    url = _database_url(database_url)
    engine = _engines.get(url)
    if engine is None:
        engine = _engines[url] = _build_engine(url)
    return engine


def get_sessionmaker(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return (and cache) an async sessionmaker for the given database URL."""
    url = _database_url(database_url)
    factory = _sessionmakers.get(url)
    if factory is None:
        factory = _sessionmakers[url] = async_sessionmaker(
            get_engine(url), expire_on_commit=False, class_=AsyncSession
        )
    return factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async database session using the configured engine."""
    async with get_sessionmaker()() as session:
        yield session


async def dispose_engine(database_url: str | None = None) -> None:
    """Dispose the cached engine and sessionmaker for the given URL."""
    url = _database_url(database_url)
    _sessionmakers.pop(url, None)
    engine = _engines.pop(url, None)
    if engine is not None:
        await engine.dispose()
