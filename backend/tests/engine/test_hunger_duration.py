"""Hunger duration and feeding status tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from scalekeeper.engine.hunger import (
    FeedingRecord,
    FeedingResponse,
    FeedingState,
    HungerUrgency,
    WeightReading,
    WeightTrend,
    advisory,
    assess,
    classify,
    consecutive_refusals,
    feeding_stats,
    feeding_status,
    hunger_from_history,
    weight_trend,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def _fed(days_ago: int, response: FeedingResponse) -> FeedingRecord:
    return FeedingRecord(fed_at=NOW - timedelta(days=days_ago), response=response)


@pytest.mark.parametrize(
    ("days", "urgency"),
    [
        (None, HungerUrgency.UNKNOWN),
        (0, HungerUrgency.NORMAL),
        (10, HungerUrgency.NORMAL),
        (14, HungerUrgency.NORMAL),
        (15, HungerUrgency.EXTENDED),
        (30, HungerUrgency.EXTENDED),
        (31, HungerUrgency.CONCERNING),
        (45, HungerUrgency.CONCERNING),
        (60, HungerUrgency.CONCERNING),
        (61, HungerUrgency.CRITICAL),
        (90, HungerUrgency.CRITICAL),
    ],
)
def test_classify_bands(days: int | None, urgency: HungerUrgency) -> None:
    assert classify(days) is urgency


def test_hunger_counts_from_last_successful_meal() -> None:
    history = [
        _fed(20, FeedingResponse.RELUCTANT),
        _fed(10, FeedingResponse.REFUSED),
        _fed(5, FeedingResponse.REFUSED),
        _fed(3, FeedingResponse.REGURGITATED),
    ]

    duration = hunger_from_history(history, now=NOW)

    assert duration.days_since_last_meal == 20
    assert duration.last_successful_feeding == NOW - timedelta(days=20)
    assert duration.refusal_count == 2
    assert duration.urgency is HungerUrgency.EXTENDED
    assert duration.display_text == "Last ate 20 days ago"


def test_refusal_run_stops_at_success() -> None:
    history = [
        _fed(9, FeedingResponse.REFUSED),
        _fed(6, FeedingResponse.STRUCK_IMMEDIATELY),
        _fed(2, FeedingResponse.REFUSED),
    ]

    assert consecutive_refusals(history) == 1


def test_never_fed_is_unknown() -> None:
    duration = hunger_from_history([_fed(2, FeedingResponse.REFUSED)], now=NOW)

    assert duration.days_since_last_meal is None
    assert duration.urgency is HungerUrgency.UNKNOWN
    assert duration.display_text == "No feeding records"
    assert advisory(duration) == "Start logging feedings to track patterns."


def test_significant_weight_loss_during_strike() -> None:
    weights = [
        WeightReading(recorded_at=NOW - timedelta(days=25), grams=100.0),
        WeightReading(recorded_at=NOW - timedelta(days=1), grams=88.0),
    ]

    duration = hunger_from_history([_fed(21, FeedingResponse.ASSISTED_FEED)], weights, now=NOW)

    assert duration.weight_change_during_strike == pytest.approx(-12.0)
    assert duration.significant_weight_loss
    assert advisory(duration, WeightTrend.LOSING) == (
        "Weight down 12% during food strike, consider vet consultation."
    )


def test_advisory_follows_urgency_and_trend() -> None:
    assert advisory(assess(NOW, now=NOW)) == "Fed successfully today!"
    assert advisory(assess(NOW - timedelta(days=5), now=NOW)) == "Within normal feeding schedule."
    assert advisory(assess(NOW - timedelta(days=20), now=NOW), WeightTrend.STABLE) == (
        "Weight stable during food strike, no cause for concern yet."
    )
    assert advisory(assess(NOW - timedelta(days=70), now=NOW)).startswith("Urgent")


def test_weight_trend_threshold() -> None:
    assert weight_trend(100.0, 106.0) is WeightTrend.GAINING
    assert weight_trend(100.0, 95.0) is WeightTrend.STABLE
    assert weight_trend(100.0, 94.0) is WeightTrend.LOSING


def test_feeding_stats() -> None:
    stats = feeding_stats(
        [
            _fed(5, FeedingResponse.REFUSED),
            _fed(20, FeedingResponse.STRUCK_IMMEDIATELY),
            _fed(10, FeedingResponse.RELUCTANT),
        ]
    )

    assert stats.total_feedings == 3
    assert stats.successful_feedings == 2
    assert stats.refusals == 1
    assert stats.average_interval_days == 7
    assert stats.success_rate == pytest.approx(200 / 3)
    assert stats.last_feeding_date == NOW - timedelta(days=5)


def test_feeding_stats_empty() -> None:
    stats = feeding_stats([])

    assert stats.total_feedings == 0
    assert stats.success_rate == 0.0
    assert stats.last_feeding_date is None


@pytest.mark.parametrize(
    ("days_ago", "state", "days", "label"),
    [
        (0, FeedingState.FED_TODAY, None, "Fed Today"),
        (7, FeedingState.DUE_TODAY, None, "Due Today"),
        (9, FeedingState.OVERDUE, 2, "Overdue (2d)"),
        (3, FeedingState.UPCOMING, 4, "In 4 days"),
        (6, FeedingState.UPCOMING, 1, "In 1 day"),
    ],
)
def test_feeding_status(days_ago: int, state: FeedingState, days: int | None, label: str) -> None:
    status = feeding_status(NOW - timedelta(days=days_ago), now=NOW, interval_days=7)

    assert status.state is state
    assert status.days == days
    assert status.display_name == label


def test_feeding_status_without_history() -> None:
    status = feeding_status(None, now=NOW, interval_days=7)

    assert status.state is FeedingState.NOT_SCHEDULED
    assert status.state.priority > FeedingState.OVERDUE.priority
