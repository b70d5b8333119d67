"""Runtime settings, read from the environment and an optional .env file."""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

PACKAGE_DIR = Path(__file__).resolve().parent
ENV_PATH = Path(os.getenv("FITMOTION_ENV_FILE", str(PACKAGE_DIR.parent / ".env")))

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def _parse_env_line(raw_line: str) -> Optional[tuple[str, str]]:
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export ") :].strip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    # shlex handles quoting and trailing comments
    try:
        tokens = shlex.split(value, comments=True, posix=True)
    except ValueError:
        return key, value.strip("\"'")
    return key, " ".join(tokens)


def _load_env_file(path: Path) -> None:
    """Export KEY=VALUE pairs from `path`; variables already set in the environment win."""
    if not path.is_file():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        pair = _parse_env_line(raw_line)
        if pair is not None:
            os.environ.setdefault(*pair)


def _typed_env(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    return _typed_env(name, default, lambda raw: raw.lower() in _TRUE_VALUES)


def _float_env(name: str, default: float) -> float:
    return _typed_env(name, default, float)


def _int_env(name: str, default: int) -> int:
    return _typed_env(name, default, int)


def _clamp(value: T, low: T, high: T) -> T:
    return max(low, min(high, value))


_load_env_file(ENV_PATH)

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").strip().upper()

# Rep counters
COUNTER_MOVEMENT_THRESHOLD = max(0.0, _float_env("COUNTER_MOVEMENT_THRESHOLD", 0.06))
COUNTER_SKIP_UNSTABLE = _bool_env("COUNTER_SKIP_UNSTABLE", False)

# Scheduling
DEFAULT_WORKOUT_DURATION_MIN = max(1, _int_env("DEFAULT_WORKOUT_DURATION_MIN", 60))
SLOT_INTERVAL_MIN = _clamp(_int_env("SLOT_INTERVAL_MIN", 30), 1, 60)
PAST_GRACE_MIN = max(0, _int_env("PAST_GRACE_MIN", 5))
NEXT_AVAILABLE_STEPS = max(1, _int_env("NEXT_AVAILABLE_STEPS", 48))
QUIET_HOURS_START = _clamp(_int_env("QUIET_HOURS_START", 23), 0, 24)
QUIET_HOURS_END = _clamp(_int_env("QUIET_HOURS_END", 5), 0, 24)
REASONABLE_HOURS_START = _clamp(_int_env("REASONABLE_HOURS_START", 7), 0, 23)
REASONABLE_HOURS_END = _clamp(_int_env("REASONABLE_HOURS_END", 21), REASONABLE_HOURS_START + 1, 24)

# Reminders
REMINDER_LEAD_MIN = max(0, _int_env("REMINDER_LEAD_MIN", 5))
