"""Workout reminder times for upcoming bookings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from fitmotion import config
from fitmotion.scheduling.slots import Booking, to_local_naive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reminder:
    fire_at: datetime
    scheduled_at: datetime
    title: str
    booking_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fire_at": self.fire_at.isoformat(),
            "scheduled_at": self.scheduled_at.isoformat(),
            "title": self.title,
            "booking_id": self.booking_id,
        }


def reminder_time(
    scheduled_at: datetime,
    now: datetime,
    lead_minutes: int = config.REMINDER_LEAD_MIN,
) -> datetime:
    """Lead time before the booking, or the booking time itself once that has passed."""
    early = scheduled_at - timedelta(minutes=lead_minutes)
    return early if early > now else scheduled_at


def upcoming_reminders(
    bookings: Iterable[Booking | Mapping[str, Any]],
    now: Optional[datetime] = None,
    lead_minutes: int = config.REMINDER_LEAD_MIN,
) -> list[Reminder]:
    """Reminders for bookings that are not completed and start at or after `now`, soonest first."""
    now = to_local_naive(now) if now is not None else datetime.now()

    reminders = []
    for item in bookings:
        booking = item if isinstance(item, Booking) else Booking.from_dict(item)
        if booking.completed or booking.start < now:
            continue
        reminders.append(
            Reminder(
                fire_at=reminder_time(booking.start, now, lead_minutes),
                scheduled_at=booking.start,
                title=booking.title,
                booking_id=booking.id,
            )
        )
    reminders.sort(key=lambda r: r.scheduled_at)
    logger.debug("%d upcoming reminders", len(reminders))
    return reminders
