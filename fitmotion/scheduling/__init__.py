from fitmotion.scheduling.availability import (
    ScheduleConflict,
    TimeAvailabilityResult,
    check_availability,
    find_next_available_time,
)
from fitmotion.scheduling.reminders import Reminder, reminder_time, upcoming_reminders
from fitmotion.scheduling.slots import (
    Booking,
    BusySlot,
    TimeWindow,
    build_busy_slots,
    latest_fitness_level,
    normalize_fitness_level,
    overlaps,
    parse_instant,
    preferred_windows,
    to_local_naive,
)
from fitmotion.scheduling.suggestion import SuggestionResult, suggest_optimal_time

__all__ = [
    "Booking",
    "BusySlot",
    "Reminder",
    "ScheduleConflict",
    "SuggestionResult",
    "TimeAvailabilityResult",
    "TimeWindow",
    "build_busy_slots",
    "check_availability",
    "find_next_available_time",
    "latest_fitness_level",
    "normalize_fitness_level",
    "overlaps",
    "parse_instant",
    "preferred_windows",
    "reminder_time",
    "suggest_optimal_time",
    "to_local_naive",
    "upcoming_reminders",
]
