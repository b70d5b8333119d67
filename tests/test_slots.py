#!/usr/bin/env python3
"""Tests for bookings, busy-slot derivation, overlap and preferred windows."""

import itertools
from datetime import date, datetime, timedelta, timezone

import pytest

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
)

DAY = date(2026, 3, 12)


def _at(hour, minute=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute)


def _three_clause_overlap(s1, e1, s2, e2):
    """Overlap written as start-inside / end-inside / covers."""
    return (
        (s1 >= s2 and s1 < e2)
        or (e1 > s2 and e1 <= e2)
        or (s1 < s2 and e1 > e2)
    )


class TestOverlap:
    def test_same_start_overlaps(self):
        assert overlaps(_at(10), _at(11), _at(10), _at(11))

    def test_adjacent_intervals_do_not_overlap(self):
        assert not overlaps(_at(9), _at(10), _at(10), _at(11))
        assert not overlaps(_at(11), _at(12), _at(10), _at(11))

    def test_containment_overlaps(self):
        assert overlaps(_at(9), _at(12), _at(10), _at(11))
        assert overlaps(_at(10), _at(10, 30), _at(9), _at(12))

    def test_matches_three_clause_form_on_all_boundaries(self):
        """Both formulations agree for every positive-length pair on a small grid."""
        base = _at(8)
        points = [base + timedelta(minutes=30 * i) for i in range(7)]
        pairs = [(s, e) for s, e in itertools.product(points, points) if s < e]
        for (s1, e1), (s2, e2) in itertools.product(pairs, pairs):
            assert overlaps(s1, e1, s2, e2) == _three_clause_overlap(s1, e1, s2, e2), (
                f"disagree on [{s1.time()}, {e1.time()}) vs [{s2.time()}, {e2.time()})"
            )


class TestBooking:
    def test_from_store_document(self):
        b = Booking.from_dict(
            {"id": "abc", "scheduledAt": "2026-03-12T10:00:00", "duration": 45,
             "completed": False, "title": "Leg Day"}
        )
        assert b.start == _at(10)
        assert b.end == _at(10, 45)
        assert b.title == "Leg Day"
        assert b.id == "abc"

    def test_defaults(self):
        b = Booking.from_dict({"start": _at(10)})
        assert b.duration_minutes == 60
        assert b.end == _at(11)
        assert b.title == "Scheduled Activity"
        assert b.completed is False
        assert b.id is None

    def test_only_literal_true_marks_completed(self):
        assert Booking.from_dict({"start": _at(10), "completed": "yes"}).completed is False
        assert Booking.from_dict({"start": _at(10), "completed": True}).completed is True

    def test_workout_name_used_when_title_missing(self):
        b = Booking.from_dict({"start": _at(10), "selectedWorkoutName": "Upper Body"})
        assert b.title == "Upper Body"

    @pytest.mark.parametrize("raw", ["2026-03-12T10:00:00+00:00", "2026-03-12T10:00:00Z"])
    def test_offset_timestamp_becomes_naive_local(self, raw):
        expected = datetime(2026, 3, 12, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        b = Booking.from_dict({"scheduledAt": raw})
        assert b.start == expected
        assert b.start.tzinfo is None
        assert b.end == expected + timedelta(hours=1)

    def test_aware_datetime_start_is_normalized(self):
        aware = datetime(2026, 3, 12, 10, 0, tzinfo=timezone(timedelta(hours=-5)))
        b = Booking(aware)
        assert b.start.tzinfo is None
        assert b.start == parse_instant("2026-03-12T15:00:00Z")

    def test_missing_start_raises(self):
        with pytest.raises(ValueError):
            Booking.from_dict({"title": "No time"})

    def test_bad_timestamp_raises(self):
        with pytest.raises(ValueError):
            Booking.from_dict({"scheduledAt": "next tuesday"})


class TestBuildBusySlots:
    def test_filters_and_sorts(self):
        bookings = [
            Booking(_at(15), title="Late", id="3"),
            Booking(_at(9), title="Early", id="1"),
            Booking(_at(11), completed=True, title="Done", id="2"),
            Booking(_at(12), title="Editing", id="4"),
            Booking(_at(9, day=date(2026, 3, 13)), title="Other day", id="5"),
        ]
        slots = build_busy_slots(bookings, DAY, exclude_id="4")
        assert [s.title for s in slots] == ["Early", "Late"]
        assert slots[0] == BusySlot(_at(9), _at(10), "Early", "1")

    def test_accepts_dicts_and_datetime_day(self):
        slots = build_busy_slots([{"scheduledAt": _at(7), "duration": 90}], _at(0))
        assert slots[0].end == _at(8, 30)

    def test_empty(self):
        assert build_busy_slots([], DAY) == []


class TestFitnessLevels:
    def test_table(self):
        assert preferred_windows("advanced") == (
            TimeWindow("Early Morning", 5, 8),
            TimeWindow("Afternoon", 14, 16),
            TimeWindow("Evening", 19, 21),
        )
        assert preferred_windows("intermediate") == (
            TimeWindow("Morning", 7, 10),
            TimeWindow("Lunchtime", 12, 14),
            TimeWindow("Evening", 17, 20),
        )
        assert preferred_windows("beginner") == (
            TimeWindow("Late Morning", 9, 12),
            TimeWindow("Afternoon", 15, 18),
            TimeWindow("Early Evening", 18, 21),
        )

    def test_windows_are_ordered_intervals(self):
        for level in ("beginner", "intermediate", "advanced"):
            for w in preferred_windows(level):
                assert 0 <= w.start_hour < w.end_hour < 24

    @pytest.mark.parametrize("raw,level", [
        ("Advanced", "advanced"), (" intermediate ", "intermediate"),
        ("", "beginner"), (None, "beginner"), ("pro", "beginner"),
    ])
    def test_normalize(self, raw, level):
        assert normalize_fitness_level(raw) == level

    def test_latest_health_record_wins(self):
        records = [
            {"level": "beginner", "createdAt": "2026-01-01T10:00:00"},
            {"level": "Advanced", "createdAt": "2026-02-01T10:00:00"},
            {"level": "intermediate", "createdAt": "2026-01-15T10:00:00"},
        ]
        assert latest_fitness_level(records) == "advanced"

    def test_latest_with_mixed_offset_timestamps(self):
        records = [
            {"level": "advanced", "createdAt": "2026-01-01T10:00:00Z"},
            {"level": "intermediate", "createdAt": datetime(2026, 2, 1, 10, 0)},
        ]
        assert latest_fitness_level(records) == "intermediate"

    def test_latest_with_no_records(self):
        assert latest_fitness_level([]) == "beginner"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
