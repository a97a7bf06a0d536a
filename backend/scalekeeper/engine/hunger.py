"""Hunger duration, weight trend and feeding history summaries."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, tzinfo

from scalekeeper.engine import dates

# Species-agnostic upper bounds (inclusive) of each band, in days.
NORMAL_MAX_DAYS = 14
EXTENDED_MAX_DAYS = 30
CONCERNING_MAX_DAYS = 60

TREND_THRESHOLD_PERCENT = 5.0
SIGNIFICANT_LOSS_PERCENT = 10.0


class FeedingResponse(str, enum.Enum):
    STRUCK_IMMEDIATELY = "struck_immediately"
    RELUCTANT = "reluctant"
    ASSISTED_FEED = "assisted_feed"
    REFUSED = "refused"
    REGURGITATED = "regurgitated"

    @property
    def is_successful(self) -> bool:
        return self in _SUCCESSFUL_RESPONSES


_SUCCESSFUL_RESPONSES = frozenset(
    {
        FeedingResponse.STRUCK_IMMEDIATELY,
        FeedingResponse.RELUCTANT,
        FeedingResponse.ASSISTED_FEED,
    }
)


class HungerUrgency(str, enum.Enum):
    UNKNOWN = "unknown"
    NORMAL = "normal"
    EXTENDED = "extended"
    CONCERNING = "concerning"
    CRITICAL = "critical"

    @property
    def advice(self) -> str:
        return _URGENCY_ADVICE[self]


_URGENCY_ADVICE = {
    HungerUrgency.UNKNOWN: "Log feedings to track hunger duration",
    HungerUrgency.NORMAL: "Within normal feeding window",
    HungerUrgency.EXTENDED: "Extended fast, monitor weight",
    HungerUrgency.CONCERNING: "Consider vet consultation if weight loss exceeds 10%",
    HungerUrgency.CRITICAL: "Urgent: veterinary attention recommended",
}


class WeightTrend(str, enum.Enum):
    GAINING = "gaining"
    STABLE = "stable"
    LOSING = "losing"


@dataclass(frozen=True, slots=True)
class FeedingRecord:
    fed_at: datetime
    response: FeedingResponse


@dataclass(frozen=True, slots=True)
class WeightReading:
    recorded_at: datetime
    grams: float


def percent_change(previous: float, current: float) -> float:
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def weight_trend(previous: float, current: float) -> WeightTrend:
    change = percent_change(previous, current)
    if change > TREND_THRESHOLD_PERCENT:
        return WeightTrend.GAINING
    if change < -TREND_THRESHOLD_PERCENT:
        return WeightTrend.LOSING
    return WeightTrend.STABLE


def trend_between(readings: Iterable[WeightReading]) -> WeightTrend | None:
    """Trend between the chronologically first and last readings."""
    ordered = sorted(readings, key=lambda reading: dates.as_utc(reading.recorded_at))
    if len(ordered) < 2:
        return None
    return weight_trend(ordered[0].grams, ordered[-1].grams)


def classify(days_since_last_meal: int | None) -> HungerUrgency:
    if days_since_last_meal is None:
        return HungerUrgency.UNKNOWN
    if days_since_last_meal <= NORMAL_MAX_DAYS:
        return HungerUrgency.NORMAL
    if days_since_last_meal <= EXTENDED_MAX_DAYS:
        return HungerUrgency.EXTENDED
    if days_since_last_meal <= CONCERNING_MAX_DAYS:
        return HungerUrgency.CONCERNING
    return HungerUrgency.CRITICAL


@dataclass(frozen=True, slots=True)
class HungerDuration:
    days_since_last_meal: int | None
    last_successful_feeding: datetime | None
    refusal_count: int = 0
    weight_change_during_strike: float | None = None

    @property
    def urgency(self) -> HungerUrgency:
        return classify(self.days_since_last_meal)

    @property
    def significant_weight_loss(self) -> bool:
        change = self.weight_change_during_strike
        return change is not None and change <= -SIGNIFICANT_LOSS_PERCENT

    @property
    def display_text(self) -> str:
        days = self.days_since_last_meal
        if days is None:
            return "No feeding records"
        if days == 0:
            return "Fed today"
        if days == 1:
            return "Last ate yesterday"
        return f"Last ate {days} days ago"


def assess(
    last_successful_feeding: datetime | None,
    *,
    now: datetime,
    refusal_count: int = 0,
    weight_change_during_strike: float | None = None,
    tz: tzinfo = UTC,
) -> HungerDuration:
    days = (
        dates.whole_days_between(last_successful_feeding, now, tz)
        if last_successful_feeding is not None
        else None
    )
    return HungerDuration(
        days_since_last_meal=days,
        last_successful_feeding=last_successful_feeding,
        refusal_count=refusal_count,
        weight_change_during_strike=weight_change_during_strike,
    )


def _newest_first(feedings: Iterable[FeedingRecord]) -> list[FeedingRecord]:
    return sorted(feedings, key=lambda record: dates.as_utc(record.fed_at), reverse=True)


def consecutive_refusals(feedings: Iterable[FeedingRecord]) -> int:
    """Refusals since the most recent successful feeding.

    Regurgitations neither count as refusals nor end the run.
    """
    count = 0
    for record in _newest_first(feedings):
        if record.response.is_successful:
            break
        if record.response is FeedingResponse.REFUSED:
            count += 1
    return count


def weight_change_since(
    last_successful_feeding: datetime, weights: Iterable[WeightReading]
) -> float | None:
    """Percent change from the last weight at the meal to the latest one after it."""
    cutoff = dates.as_utc(last_successful_feeding)
    ordered = sorted(weights, key=lambda reading: dates.as_utc(reading.recorded_at))
    before = [reading for reading in ordered if dates.as_utc(reading.recorded_at) <= cutoff]
    during = [reading for reading in ordered if dates.as_utc(reading.recorded_at) > cutoff]
    if not before or not during or before[-1].grams <= 0:
        return None
    return percent_change(before[-1].grams, during[-1].grams)


def hunger_from_history(
    feedings: Sequence[FeedingRecord],
    weights: Sequence[WeightReading] = (),
    *,
    now: datetime,
    tz: tzinfo = UTC,
) -> HungerDuration:
    last_success = next(
        (record for record in _newest_first(feedings) if record.response.is_successful),
        None,
    )
    last_fed_at = dates.as_utc(last_success.fed_at) if last_success is not None else None
    return assess(
        last_fed_at,
        now=now,
        refusal_count=consecutive_refusals(feedings),
        weight_change_during_strike=(
            weight_change_since(last_fed_at, weights) if last_fed_at is not None else None
        ),
        tz=tz,
    )


def advisory(hunger: HungerDuration, trend: WeightTrend | None = None) -> str:
    """Human-readable recommendation combining urgency and weight trend."""
    days = hunger.days_since_last_meal
    if days is None:
        return "Start logging feedings to track patterns."
    if days == 0:
        return "Fed successfully today!"

    urgency = hunger.urgency
    if urgency is HungerUrgency.NORMAL:
        return "Within normal feeding schedule."
    if urgency is HungerUrgency.CRITICAL:
        return f"{urgency.advice}. No successful meal in {days} days."
    if hunger.significant_weight_loss:
        loss = abs(hunger.weight_change_during_strike or 0.0)
        return f"Weight down {loss:.0f}% during food strike, consider vet consultation."
    if trend is WeightTrend.STABLE:
        return "Weight stable during food strike, no cause for concern yet."
    if trend is WeightTrend.GAINING:
        return "Weight stable or gaining, healthy despite reduced feeding."
    if trend is WeightTrend.LOSING:
        return "Slight weight loss during strike, continue monitoring."
    return "Extended fast, monitor weight closely."


@dataclass(frozen=True, slots=True)
class FeedingStats:
    total_feedings: int
    successful_feedings: int
    refusals: int
    average_interval_days: int
    last_feeding_date: datetime | None

    @property
    def success_rate(self) -> float:
        if not self.total_feedings:
            return 0.0
        return self.successful_feedings / self.total_feedings * 100

    @property
    def refusal_rate(self) -> float:
        if not self.total_feedings:
            return 0.0
        return self.refusals / self.total_feedings * 100


def feeding_stats(feedings: Iterable[FeedingRecord], *, tz: tzinfo = UTC) -> FeedingStats:
    ordered = _newest_first(feedings)
    intervals = [
        dates.whole_days_between(older.fed_at, newer.fed_at, tz)
        for newer, older in zip(ordered, ordered[1:])
    ]
    return FeedingStats(
        total_feedings=len(ordered),
        successful_feedings=sum(1 for record in ordered if record.response.is_successful),
        refusals=sum(1 for record in ordered if record.response is FeedingResponse.REFUSED),
        average_interval_days=sum(intervals) // len(intervals) if intervals else 0,
        last_feeding_date=dates.as_utc(ordered[0].fed_at) if ordered else None,
    )


class FeedingState(str, enum.Enum):
    FED_TODAY = "fed_today"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    NOT_SCHEDULED = "not_scheduled"

    @property
    def priority(self) -> int:
        return _STATE_PRIORITY[self]


_STATE_PRIORITY = {
    FeedingState.OVERDUE: 0,
    FeedingState.DUE_TODAY: 1,
    FeedingState.UPCOMING: 2,
    FeedingState.FED_TODAY: 3,
    FeedingState.NOT_SCHEDULED: 4,
}


@dataclass(frozen=True, slots=True)
class FeedingStatus:
    state: FeedingState
    days: int | None = None

    @property
    def display_name(self) -> str:
        if self.state is FeedingState.OVERDUE:
            return f"Overdue ({self.days}d)"
        if self.state is FeedingState.UPCOMING:
            suffix = "" if self.days == 1 else "s"
            return f"In {self.days} day{suffix}"
        return self.state.value.replace("_", " ").title()


def feeding_status(
    last_feeding: datetime | None,
    *,
    now: datetime,
    interval_days: int,
    tz: tzinfo = UTC,
) -> FeedingStatus:
    """Where an animal stands relative to its default feeding interval."""
    if last_feeding is None:
        return FeedingStatus(FeedingState.NOT_SCHEDULED)
    today = dates.local_date(now, tz)
    if dates.local_date(last_feeding, tz) == today:
        return FeedingStatus(FeedingState.FED_TODAY)
    next_day = dates.local_date(dates.as_utc(last_feeding) + timedelta(days=interval_days), tz)
    if next_day < today:
        return FeedingStatus(FeedingState.OVERDUE, dates.day_count(next_day, today))
    if next_day == today:
        return FeedingStatus(FeedingState.DUE_TODAY)
    return FeedingStatus(FeedingState.UPCOMING, dates.day_count(today, next_day))


__all__ = [
    "FeedingRecord",
    "FeedingResponse",
    "FeedingState",
    "FeedingStats",
    "FeedingStatus",
    "HungerDuration",
    "HungerUrgency",
    "WeightReading",
    "WeightTrend",
    "advisory",
    "assess",
    "classify",
    "consecutive_refusals",
    "feeding_stats",
    "feeding_status",
    "hunger_from_history",
    "percent_change",
    "trend_between",
    "weight_change_since",
    "weight_trend",
]
