"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.core.clock import SystemClock, resolve_timezone
from scalekeeper.core.config import Settings, get_settings
from scalekeeper.db.session import get_session, get_sessionmaker
from scalekeeper.services.reminder_service import OutboxReminderPort, ReminderPort


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def get_app_settings() -> Settings:
    return get_settings()


def get_clock() -> SystemClock:
    """Wall clock in the configured calendar timezone."""
    return SystemClock(resolve_timezone(get_settings().timezone))


def get_reminder_port() -> ReminderPort:
    """Reminder outbox bound to the configured database."""
    return OutboxReminderPort(get_sessionmaker())
