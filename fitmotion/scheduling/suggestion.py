"""Optimal workout time suggestion based on fitness level and existing bookings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence

from fitmotion import config
from fitmotion.scheduling.slots import (
    LEVEL_TIPS,
    Booking,
    BusySlot,
    build_busy_slots,
    has_conflict,
    normalize_fitness_level,
    preferred_windows,
    to_local_naive,
)

logger = logging.getLogger(__name__)

REASONABLE_HOURS = "Reasonable Hours"


@dataclass(frozen=True)
class SuggestionResult:
    time: datetime
    fitness_level: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "fitness_level": self.fitness_level,
            "reason": self.reason,
        }


def format_clock(moment: datetime) -> str:
    """12-hour clock without a leading zero, e.g. '9:30 AM'."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def _day_label(moment: datetime, now: datetime) -> str:
    if moment.date() == now.date():
        return "Today"
    if moment.date() == now.date() + timedelta(days=1):
        return "Tomorrow"
    return f"{moment.strftime('%b')} {moment.day}"


def _slot_reason(window_name: str, moment: datetime, fitness_level: str, now: datetime) -> str:
    return (
        f"{window_name} slot at {format_clock(moment)} "
        f"({_day_label(moment, now)}) - {LEVEL_TIPS[fitness_level]}"
    )


def find_first_available_slot(
    target_day: date,
    start_hour: int,
    end_hour: int,
    busy_slots: Sequence[BusySlot],
    workout_duration_minutes: int,
    not_before: Optional[datetime] = None,
) -> Optional[datetime]:
    """First slot-aligned start in [start_hour:00, end_hour:00) whose interval is free.

    Candidates at or before `not_before` are skipped.
    """
    duration = timedelta(minutes=workout_duration_minutes)
    day_start = datetime.combine(target_day, time())
    for hour in range(start_hour, end_hour):
        for minute in range(0, 60, config.SLOT_INTERVAL_MIN):
            start = day_start + timedelta(hours=hour, minutes=minute)
            if not_before is not None and start <= not_before:
                continue
            if not has_conflict(start, start + duration, busy_slots):
                return start
    return None


def _scan_windows(
    target_day: date,
    fitness_level: str,
    busy_slots: Sequence[BusySlot],
    workout_duration_minutes: int,
    not_before: Optional[datetime],
    now: datetime,
) -> Optional[tuple[datetime, str]]:
    for window in preferred_windows(fitness_level):
        slot = find_first_available_slot(
            target_day,
            window.start_hour,
            window.end_hour,
            busy_slots,
            workout_duration_minutes,
            not_before,
        )
        if slot is not None:
            return slot, _slot_reason(window.name, slot, fitness_level, now)
    return None


def suggest_optimal_time(
    fitness_level: Any,
    target_date: date | datetime,
    workout_duration_minutes: int = config.DEFAULT_WORKOUT_DURATION_MIN,
    existing_bookings: Iterable[Booking | Mapping[str, Any]] = (),
    exclude_id: Optional[str] = None,
    now: Optional[datetime] = None,
    tomorrow_bookings: Optional[Iterable[Booking | Mapping[str, Any]]] = None,
) -> Optional[SuggestionResult]:
    """Suggest the first free slot in the level's preferred windows.

    Falls back to reasonable hours on the same day, then (only when the target
    is today) to tomorrow's preferred windows. Tomorrow is scanned with no busy
    slots unless `tomorrow_bookings` is given. Returns None when nothing fits.
    """
    if workout_duration_minutes <= 0:
        raise ValueError(f"workout duration must be positive, got {workout_duration_minutes}")

    now = to_local_naive(now) if now is not None else datetime.now()
    level = normalize_fitness_level(fitness_level)
    if isinstance(target_date, datetime):
        target_day = to_local_naive(target_date).date()
    else:
        target_day = target_date
    is_today = target_day == now.date()
    not_before = now if is_today else None

    logger.debug("Detected fitness level: %s", level)

    busy_slots = build_busy_slots(existing_bookings, target_day, exclude_id)
    logger.debug("Found %d busy slots on %s", len(busy_slots), target_day)

    found = _scan_windows(target_day, level, busy_slots, workout_duration_minutes, not_before, now)
    if found is not None:
        slot, reason = found
        return SuggestionResult(time=slot, fitness_level=level, reason=reason)

    logger.debug("No slots in preferred windows, checking reasonable hours")
    start_hour = config.REASONABLE_HOURS_START
    if is_today:
        start_hour = max(start_hour, now.hour)
    slot = find_first_available_slot(
        target_day,
        start_hour,
        config.REASONABLE_HOURS_END,
        busy_slots,
        workout_duration_minutes,
        not_before,
    )
    if slot is not None:
        reason = _slot_reason(REASONABLE_HOURS, slot, level, now)
        return SuggestionResult(
            time=slot,
            fitness_level=level,
            reason=f"No preferred time available. {reason}",
        )

    if is_today:
        logger.debug("No slots today, checking tomorrow")
        tomorrow = target_day + timedelta(days=1)
        tomorrow_busy: list[BusySlot] = []
        if tomorrow_bookings is not None:
            tomorrow_busy = build_busy_slots(tomorrow_bookings, tomorrow, exclude_id)
        found = _scan_windows(tomorrow, level, tomorrow_busy, workout_duration_minutes, None, now)
        if found is not None:
            slot, reason = found
            return SuggestionResult(
                time=slot,
                fitness_level=level,
                reason=f"No slots available today. Suggested tomorrow: {reason}",
            )

    return None
