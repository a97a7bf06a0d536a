"""Injectable sources of "now" and the calendar timezone."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from scalekeeper.engine import dates

logger = logging.getLogger(__name__)


def resolve_timezone(name: str | None) -> ZoneInfo:
    """Return the named timezone or UTC when unknown."""
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; falling back to UTC", name)
        return ZoneInfo("UTC")


class SystemClock:
    """Reads the wall clock."""

    def __init__(self, tz: ZoneInfo | None = None) -> None:
        self.tz = tz or ZoneInfo("UTC")

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return dates.local_date(self.now(), self.tz)


class FixedClock(SystemClock):
    """Always reports the same instant."""

    def __init__(self, instant: datetime, tz: ZoneInfo | None = None) -> None:
        super().__init__(tz)
        self.instant = dates.as_utc(instant)

    def now(self) -> datetime:
        return self.instant


__all__ = ["FixedClock", "SystemClock", "resolve_timezone"]
