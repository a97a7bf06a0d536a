"""Calendar arithmetic tests."""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from scalekeeper.engine.dates import (
    as_utc,
    at_local_time,
    day_bounds,
    local_date,
    sunday_first_weekday,
    whole_days_between,
)

NEW_YORK = ZoneInfo("America/New_York")


def test_weekday_numbers_start_on_sunday() -> None:
    assert sunday_first_weekday(date(2024, 1, 7)) == 1
    assert sunday_first_weekday(date(2024, 1, 8)) == 2
    assert sunday_first_weekday(date(2024, 1, 13)) == 7


def test_naive_values_are_treated_as_utc() -> None:
    assert as_utc(datetime(2024, 1, 1, 9, 30)) == datetime(2024, 1, 1, 9, 30, tzinfo=UTC)


def test_local_date_uses_calendar_timezone() -> None:
    moment = datetime(2024, 1, 2, 3, 0, tzinfo=UTC)

    assert local_date(moment) == date(2024, 1, 2)
    assert local_date(moment, NEW_YORK) == date(2024, 1, 1)


def test_whole_days_survive_daylight_saving_shift() -> None:
    before = at_local_time(date(2024, 3, 9), 12, 0, NEW_YORK)
    after = at_local_time(date(2024, 3, 10), 12, 0, NEW_YORK)

    assert (after - before).total_seconds() == 23 * 3600
    assert whole_days_between(before, after, NEW_YORK) == 1


def test_whole_days_truncate_partial_days() -> None:
    start = datetime(2024, 1, 1, 18, 0, tzinfo=UTC)

    assert whole_days_between(start, datetime(2024, 1, 2, 17, 59, tzinfo=UTC)) == 0
    assert whole_days_between(start, datetime(2024, 1, 3, 18, 0, tzinfo=UTC)) == 2


def test_day_bounds_cover_the_local_day() -> None:
    start, end = day_bounds(date(2024, 7, 4), NEW_YORK)

    assert start == datetime(2024, 7, 4, 4, 0, tzinfo=UTC)
    assert end == datetime(2024, 7, 5, 4, 0, tzinfo=UTC)
