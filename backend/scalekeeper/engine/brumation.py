"""Brumation phase derivation from recorded boundary dates.

Phases are never stored. They follow from the four boundary dates of a cycle
and the current time, checked most-advanced first::

    planned -> cooldown -> active -> warmup -> complete

A cycle whose user-set status is ``cancelled`` or ``complete`` has no phase.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo

from scalekeeper.engine import dates


class BrumationStatus(str, enum.Enum):
    """User-controlled lifecycle flag stored on the cycle."""

    PLANNED = "planned"
    COOLDOWN = "cooldown"
    ACTIVE = "active"
    WARMUP = "warmup"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class BrumationPhase(str, enum.Enum):
    PLANNED = "planned"
    COOLDOWN = "cooldown"
    ACTIVE = "active"
    WARMUP = "warmup"
    COMPLETE = "complete"


# Typical phase lengths in days. Species vary widely; these are global defaults.
PHASE_DURATION_DAYS = {
    BrumationPhase.COOLDOWN: 14,
    BrumationPhase.ACTIVE: 60,
    BrumationPhase.WARMUP: 14,
}

_CLOSED_STATUSES = frozenset({BrumationStatus.CANCELLED, BrumationStatus.COMPLETE})


@dataclass(frozen=True, slots=True)
class PhaseGuidance:
    display_name: str
    description: str
    tasks: tuple[str, ...]


PHASE_GUIDANCE = {
    BrumationPhase.PLANNED: PhaseGuidance(
        "Planned",
        "Preparing for brumation. Verify health and last feeding.",
        (
            "Confirm animal is healthy",
            "Record pre-brumation weight",
            "Last feeding 2 weeks before cooldown",
            "Clean enclosure thoroughly",
        ),
    ),
    BrumationPhase.COOLDOWN: PhaseGuidance(
        "Cooling Down",
        "Gradually reducing temperatures over 1-2 weeks.",
        (
            "Reduce temps by 2-3°F every few days",
            "Reduce photoperiod gradually",
            "Monitor for signs of stress",
            "Ensure fresh water available",
        ),
    ),
    BrumationPhase.ACTIVE: PhaseGuidance(
        "Full Brumation",
        "Minimal disturbance, monitor weekly.",
        (
            "Maintain cool temperatures (50-60°F typical)",
            "Minimal disturbance",
            "Weekly health check",
            "Keep water dish clean",
        ),
    ),
    BrumationPhase.WARMUP: PhaseGuidance(
        "Warming Up",
        "Gradually increasing temperatures over 1-2 weeks.",
        (
            "Increase temps by 2-3°F every few days",
            "Extend photoperiod gradually",
            "Offer water frequently",
            "Prepare for first feeding",
        ),
    ),
    BrumationPhase.COMPLETE: PhaseGuidance(
        "Complete",
        "Brumation complete. Resume normal care and feeding.",
        (
            "Record post-brumation weight",
            "Offer first meal",
            "Resume normal feeding schedule",
            "Consider breeding pairings",
        ),
    ),
}


@dataclass(frozen=True, slots=True)
class BrumationTimeline:
    """Boundary dates and status of one cycle."""

    status: BrumationStatus = BrumationStatus.PLANNED
    cooldown_start: datetime | None = None
    full_brumation_start: datetime | None = None
    warmup_start: datetime | None = None
    brumation_end: datetime | None = None

    def boundary(self, phase: BrumationPhase) -> datetime | None:
        """Date the given phase begins; ``planned`` has none."""
        return {
            BrumationPhase.PLANNED: None,
            BrumationPhase.COOLDOWN: self.cooldown_start,
            BrumationPhase.ACTIVE: self.full_brumation_start,
            BrumationPhase.WARMUP: self.warmup_start,
            BrumationPhase.COMPLETE: self.brumation_end,
        }[phase]


_NEXT_PHASE = {
    BrumationPhase.PLANNED: BrumationPhase.COOLDOWN,
    BrumationPhase.COOLDOWN: BrumationPhase.ACTIVE,
    BrumationPhase.ACTIVE: BrumationPhase.WARMUP,
    BrumationPhase.WARMUP: BrumationPhase.COMPLETE,
}

_CASCADE = (
    BrumationPhase.COMPLETE,
    BrumationPhase.WARMUP,
    BrumationPhase.ACTIVE,
    BrumationPhase.COOLDOWN,
)


@dataclass(frozen=True, slots=True)
class PhaseReport:
    phase: BrumationPhase | None
    days_in_phase: int | None
    days_until_next_phase: int | None
    progress: float
    next_phase: BrumationPhase | None

    @property
    def guidance(self) -> PhaseGuidance | None:
        return PHASE_GUIDANCE[self.phase] if self.phase is not None else None


def validate_boundaries(timeline: BrumationTimeline) -> None:
    """Reject boundary dates that are out of order; unset dates are skipped."""
    ordered = [
        (name, dates.as_utc(value))
        for name, value in (
            ("cooldown_start", timeline.cooldown_start),
            ("full_brumation_start", timeline.full_brumation_start),
            ("warmup_start", timeline.warmup_start),
            ("brumation_end", timeline.brumation_end),
        )
        if value is not None
    ]
    for (earlier_name, earlier), (later_name, later) in zip(ordered, ordered[1:]):
        if later < earlier:
            raise ValueError(f"{later_name} must not precede {earlier_name}")


def current_phase(timeline: BrumationTimeline, now: datetime) -> BrumationPhase | None:
    if timeline.status in _CLOSED_STATUSES:
        return None
    moment = dates.as_utc(now)
    for phase in _CASCADE:
        boundary = timeline.boundary(phase)
        if boundary is not None and moment >= dates.as_utc(boundary):
            return phase
    return BrumationPhase.PLANNED


def days_in_current_phase(
    timeline: BrumationTimeline, now: datetime, *, tz: tzinfo = UTC
) -> int | None:
    phase = current_phase(timeline, now)
    if phase is None:
        return None
    start = timeline.boundary(phase)
    if start is None:
        return None
    return dates.whole_days_between(start, now, tz)


def days_until_next_phase(
    timeline: BrumationTimeline, now: datetime, *, tz: tzinfo = UTC
) -> int | None:
    phase = current_phase(timeline, now)
    if phase is None or phase is BrumationPhase.COMPLETE:
        return None
    upcoming = timeline.boundary(_NEXT_PHASE[phase])
    if upcoming is None:
        return None
    return dates.whole_days_between(now, upcoming, tz)


def phase_progress(
    timeline: BrumationTimeline, now: datetime, *, tz: tzinfo = UTC
) -> float:
    phase = current_phase(timeline, now)
    if phase is None or phase is BrumationPhase.PLANNED:
        return 0.0
    if phase is BrumationPhase.COMPLETE:
        return 1.0
    elapsed = days_in_current_phase(timeline, now, tz=tz)
    if elapsed is None:
        return 0.0
    return min(max(elapsed / PHASE_DURATION_DAYS[phase], 0.0), 1.0)


def report(timeline: BrumationTimeline, now: datetime, *, tz: tzinfo = UTC) -> PhaseReport:
    phase = current_phase(timeline, now)
    return PhaseReport(
        phase=phase,
        days_in_phase=days_in_current_phase(timeline, now, tz=tz),
        days_until_next_phase=days_until_next_phase(timeline, now, tz=tz),
        progress=phase_progress(timeline, now, tz=tz),
        next_phase=_NEXT_PHASE.get(phase) if phase is not None else None,
    )


def pending_boundaries(
    timeline: BrumationTimeline, now: datetime
) -> list[tuple[BrumationPhase, datetime]]:
    """Boundary dates still ahead of ``now``, in phase order."""
    if timeline.status in _CLOSED_STATUSES:
        return []
    moment = dates.as_utc(now)
    pending = []
    for phase in (
        BrumationPhase.COOLDOWN,
        BrumationPhase.ACTIVE,
        BrumationPhase.WARMUP,
        BrumationPhase.COMPLETE,
    ):
        boundary = timeline.boundary(phase)
        if boundary is not None and dates.as_utc(boundary) > moment:
            pending.append((phase, dates.as_utc(boundary)))
    return pending


def total_brumation_days(timeline: BrumationTimeline, *, tz: tzinfo = UTC) -> int | None:
    if timeline.cooldown_start is None or timeline.brumation_end is None:
        return None
    return dates.whole_days_between(timeline.cooldown_start, timeline.brumation_end, tz)


def weight_change(pre_grams: float | None, post_grams: float | None) -> float | None:
    if pre_grams is None or post_grams is None:
        return None
    return post_grams - pre_grams


def weight_change_percentage(pre_grams: float | None, post_grams: float | None) -> float | None:
    change = weight_change(pre_grams, post_grams)
    if change is None or not pre_grams:
        return None
    return change / pre_grams * 100


__all__ = [
    "BrumationPhase",
    "BrumationStatus",
    "BrumationTimeline",
    "PHASE_DURATION_DAYS",
    "PHASE_GUIDANCE",
    "PhaseGuidance",
    "PhaseReport",
    "current_phase",
    "days_in_current_phase",
    "days_until_next_phase",
    "pending_boundaries",
    "phase_progress",
    "report",
    "total_brumation_days",
    "validate_boundaries",
    "weight_change",
    "weight_change_percentage",
]
