"""Bookings, busy slots, overlap test and fitness-level preferred windows.

Shared by the suggestion engine and the availability checker so both derive
busy time the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from fitmotion import config

logger = logging.getLogger(__name__)

FITNESS_LEVELS = ("beginner", "intermediate", "advanced")
DEFAULT_FITNESS_LEVEL = "beginner"
DEFAULT_BOOKING_TITLE = "Scheduled Activity"


@dataclass(frozen=True)
class TimeWindow:
    name: str
    start_hour: int
    end_hour: int


PREFERRED_WINDOWS: dict[str, tuple[TimeWindow, ...]] = {
    "advanced": (
        TimeWindow("Early Morning", 5, 8),
        TimeWindow("Afternoon", 14, 16),
        TimeWindow("Evening", 19, 21),
    ),
    "intermediate": (
        TimeWindow("Morning", 7, 10),
        TimeWindow("Lunchtime", 12, 14),
        TimeWindow("Evening", 17, 20),
    ),
    "beginner": (
        TimeWindow("Late Morning", 9, 12),
        TimeWindow("Afternoon", 15, 18),
        TimeWindow("Early Evening", 18, 21),
    ),
}

LEVEL_TIPS = {
    "beginner": "Great time for learning proper form",
    "intermediate": "Optimal for strength building",
    "advanced": "Perfect for high-intensity training",
}


def normalize_fitness_level(raw: Any) -> str:
    level = "" if raw is None else str(raw).strip().lower()
    if level in FITNESS_LEVELS:
        return level
    return DEFAULT_FITNESS_LEVEL


def latest_fitness_level(health_records: Iterable[Mapping[str, Any]]) -> str:
    """Level from the most recent health record (by createdAt); beginner if none."""
    latest: Optional[Mapping[str, Any]] = None
    latest_at: Optional[datetime] = None
    for record in health_records:
        created = record.get("createdAt")
        created_at = parse_instant(created) if created is not None else datetime.min
        if latest is None or created_at > latest_at:
            latest, latest_at = record, created_at
    if latest is None:
        return DEFAULT_FITNESS_LEVEL
    return normalize_fitness_level(latest.get("level"))


def preferred_windows(fitness_level: Any) -> tuple[TimeWindow, ...]:
    return PREFERRED_WINDOWS[normalize_fitness_level(fitness_level)]


def to_local_naive(moment: datetime) -> datetime:
    """Offset-aware instants become naive local time; naive values pass through."""
    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def parse_instant(value: Any) -> datetime:
    """Datetime, date or ISO-8601 string as naive local time. Raises ValueError otherwise."""
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_local_naive(datetime.fromisoformat(text))
        except ValueError as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    raise ValueError(f"Invalid timestamp: {value!r}")


@dataclass(frozen=True)
class Booking:
    """An existing schedule entry as supplied by the booking store."""

    start: datetime
    duration_minutes: int = config.DEFAULT_WORKOUT_DURATION_MIN
    completed: bool = False
    title: str = DEFAULT_BOOKING_TITLE
    id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "start", to_local_naive(self.start))

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Booking":
        """Build from a store document; `scheduledAt` or `start` is required."""
        raw_start = data.get("scheduledAt", data.get("start"))
        if raw_start is None:
            raise ValueError("Booking has no start time (scheduledAt)")

        duration = data.get("duration", data.get("durationMinutes"))
        if duration is None:
            duration = config.DEFAULT_WORKOUT_DURATION_MIN
        booking_id = data.get("id")
        return cls(
            start=parse_instant(raw_start),
            duration_minutes=int(duration),
            completed=data.get("completed") is True,
            title=data.get("title") or data.get("selectedWorkoutName") or DEFAULT_BOOKING_TITLE,
            id=None if booking_id is None else str(booking_id),
        )


@dataclass(frozen=True)
class BusySlot:
    start: datetime
    end: datetime
    title: str = DEFAULT_BOOKING_TITLE
    booking_id: Optional[str] = None


def overlaps(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Half-open [start, end) overlap: adjacent intervals do not overlap."""
    return start1 < end2 and start2 < end1


def _as_booking(item: Booking | Mapping[str, Any]) -> Booking:
    if isinstance(item, Booking):
        return item
    return Booking.from_dict(item)


def build_busy_slots(
    bookings: Iterable[Booking | Mapping[str, Any]],
    day: date,
    exclude_id: Optional[str] = None,
) -> list[BusySlot]:
    """Busy intervals for bookings starting on `day`, skipping the excluded and completed ones."""
    if isinstance(day, datetime):
        day = to_local_naive(day).date()

    slots = []
    for item in bookings:
        booking = _as_booking(item)
        if exclude_id is not None and booking.id == exclude_id:
            continue
        if booking.completed:
            continue
        if booking.start.date() != day:
            continue
        slots.append(
            BusySlot(
                start=booking.start,
                end=booking.end,
                title=booking.title,
                booking_id=booking.id,
            )
        )
    slots.sort(key=lambda s: s.start)
    return slots


def has_conflict(start: datetime, end: datetime, slots: Iterable[BusySlot]) -> bool:
    return any(overlaps(start, end, slot.start, slot.end) for slot in slots)
