#!/usr/bin/env python3
"""Command line entry point: replay recorded poses or query the scheduler."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from fitmotion import config
from fitmotion.common import load_reference_json
from fitmotion.exercises import available_exercises
from fitmotion.rep_counter import create_counter
from fitmotion.scheduling import Booking, check_availability, parse_instant, suggest_optimal_time

logger = logging.getLogger(__name__)


def load_bookings(path: Optional[str]) -> list[Booking]:
    """Read a JSON list of booking documents (or {"bookings": [...]})."""
    if not path:
        return []
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("bookings", [])
    return [Booking.from_dict(item) for item in data]


def _parse_datetime(raw: Optional[str]) -> Optional[datetime]:
    if raw is None:
        return None
    return parse_instant(raw)


def cmd_count(args: argparse.Namespace) -> int:
    counter = create_counter(args.exercise)
    data = load_reference_json(args.frames)
    frames = data["frames"] if isinstance(data, dict) else data

    reps: list[dict[str, Any]] = []
    for i, frame in enumerate(frames):
        landmarks = frame.get("landmarks") if isinstance(frame, dict) else frame
        result = counter.process_frame(landmarks)
        if result.feedback:
            reps.append({"frame": i, **result.to_dict()})

    print(json.dumps({
        "exercise": counter.config.key,
        "frames": len(frames),
        "count": counter.count,
        "reps": reps,
    }, indent=2))
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    suggestion = suggest_optimal_time(
        args.level,
        date.fromisoformat(args.date),
        workout_duration_minutes=args.duration,
        existing_bookings=load_bookings(args.bookings),
        exclude_id=args.exclude,
        now=_parse_datetime(args.now),
    )
    if suggestion is None:
        print(json.dumps({"suggestion": None}, indent=2))
        return 1
    print(json.dumps({"suggestion": suggestion.to_dict()}, indent=2))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    result = check_availability(
        parse_instant(args.time),
        workout_duration_minutes=args.duration,
        existing_bookings=load_bookings(args.bookings),
        exclude_id=args.exclude,
        now=_parse_datetime(args.now),
    )
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.available else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fitmotion", description="Rep counting and workout scheduling")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (default from LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    count = sub.add_parser("count", help="Replay a landmark JSON file through a rep counter")
    count.add_argument("exercise", help=f"One of: {', '.join(available_exercises())}")
    count.add_argument("frames", help='JSON file: {"frames": [{"landmarks": [...]}, ...]}')
    count.set_defaults(func=cmd_count)

    suggest = sub.add_parser("suggest", help="Suggest an optimal workout time")
    suggest.add_argument("--level", default="beginner", help="beginner | intermediate | advanced")
    suggest.add_argument("--date", required=True, help="Target date (YYYY-MM-DD)")
    suggest.add_argument("--duration", type=int, default=config.DEFAULT_WORKOUT_DURATION_MIN)
    suggest.add_argument("--bookings", default="", help="JSON file with existing bookings")
    suggest.add_argument("--exclude", default=None, help="Booking id being edited")
    suggest.add_argument("--now", default=None, help="Reference instant (ISO-8601) instead of the clock")
    suggest.set_defaults(func=cmd_suggest)

    check = sub.add_parser("check", help="Check whether a proposed time is free")
    check.add_argument("--time", required=True, help="Proposed start (ISO-8601)")
    check.add_argument("--duration", type=int, default=config.DEFAULT_WORKOUT_DURATION_MIN)
    check.add_argument("--bookings", default="", help="JSON file with existing bookings")
    check.add_argument("--exclude", default=None, help="Booking id being edited")
    check.add_argument("--now", default=None, help="Reference instant (ISO-8601) instead of the clock")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except KeyError as e:
        print(f"error: {e.args[0] if e.args else e}", file=sys.stderr)
        return 2
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
