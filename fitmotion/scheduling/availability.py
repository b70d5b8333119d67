"""Conflict detection for a proposed workout time."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence

from fitmotion import config
from fitmotion.scheduling.slots import Booking, build_busy_slots, overlaps, to_local_naive

logger = logging.getLogger(__name__)

PAST_TIME_TITLE = "Past Time"


@dataclass(frozen=True)
class ScheduleConflict:
    start: datetime
    end: datetime
    title: str
    booking_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "title": self.title,
            "booking_id": self.booking_id,
        }


@dataclass
class TimeAvailabilityResult:
    available: bool
    conflicts: list[ScheduleConflict] = field(default_factory=list)
    next_available: Optional[datetime] = None
    message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "next_available": self.next_available.isoformat() if self.next_available else None,
            "message": self.message,
        }


def _in_quiet_hours(hour: int) -> bool:
    return hour >= config.QUIET_HOURS_START or hour < config.QUIET_HOURS_END


def find_next_available_time(
    proposed_time: datetime,
    conflicts: Sequence[ScheduleConflict],
    workout_duration_minutes: int,
    now: datetime,
) -> Optional[datetime]:
    """Step forward from max(proposed, now) until an interval clears every conflict.

    Candidates starting in quiet hours (23:00-05:00) are skipped.
    """
    duration = timedelta(minutes=workout_duration_minutes)
    start = max(to_local_naive(proposed_time), to_local_naive(now))
    ordered = sorted(conflicts, key=lambda c: c.start)

    for i in range(config.NEXT_AVAILABLE_STEPS):
        check_time = start + timedelta(minutes=i * config.SLOT_INTERVAL_MIN)
        if _in_quiet_hours(check_time.hour):
            continue
        check_end = check_time + duration
        if not any(overlaps(check_time, check_end, c.start, c.end) for c in ordered):
            return check_time
    return None


def check_availability(
    proposed_time: datetime,
    workout_duration_minutes: int = config.DEFAULT_WORKOUT_DURATION_MIN,
    existing_bookings: Iterable[Booking | Mapping[str, Any]] = (),
    exclude_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TimeAvailabilityResult:
    if workout_duration_minutes <= 0:
        raise ValueError(f"workout duration must be positive, got {workout_duration_minutes}")

    now = to_local_naive(now) if now is not None else datetime.now()
    proposed_time = to_local_naive(proposed_time)
    proposed_end = proposed_time + timedelta(minutes=workout_duration_minutes)

    # Times up to PAST_GRACE_MIN ago still count as "now" (picked, then saved a moment later).
    minimum_allowed = now - timedelta(minutes=config.PAST_GRACE_MIN)
    if proposed_time < minimum_allowed:
        return TimeAvailabilityResult(
            available=False,
            conflicts=[ScheduleConflict(proposed_time, proposed_end, PAST_TIME_TITLE)],
            next_available=None,
            message="Cannot schedule in the past",
        )

    busy_slots = build_busy_slots(existing_bookings, proposed_time.date(), exclude_id)
    conflicts = [
        ScheduleConflict(slot.start, slot.end, slot.title, slot.booking_id)
        for slot in busy_slots
        if overlaps(proposed_time, proposed_end, slot.start, slot.end)
    ]

    if not conflicts:
        return TimeAvailabilityResult(available=True, message="Time slot is available")

    logger.debug("%d conflicts for %s", len(conflicts), proposed_time.isoformat())
    next_available = find_next_available_time(
        proposed_time, conflicts, workout_duration_minutes, now
    )
    return TimeAvailabilityResult(
        available=False,
        conflicts=conflicts,
        next_available=next_available,
        message=f'Time conflict with "{conflicts[0].title}"',
    )
