#!/usr/bin/env python3
"""Exercise registry: per-exercise thresholds and landmark triples for the rep counter."""

from __future__ import annotations

from dataclasses import dataclass

ABOVE = "above"
BELOW = "below"


@dataclass(frozen=True)
class CounterConfig:
    """Threshold pair, landmark triples and crossing directions for one exercise.

    The top condition arms the counter (`up`); the completion condition, reached
    while armed, counts a rep.
    """

    key: str
    display_name: str
    top_joints: tuple[int, int, int]
    top_threshold: float
    top_direction: str
    bottom_joints: tuple[int, int, int]
    bottom_threshold: float
    bottom_direction: str
    feedback: str

    def at_top(self, angle: float) -> bool:
        return _crossed(angle, self.top_threshold, self.top_direction)

    def at_bottom(self, angle: float) -> bool:
        return _crossed(angle, self.bottom_threshold, self.bottom_direction)

    @property
    def landmark_indices(self) -> tuple[int, ...]:
        return tuple(sorted(set(self.top_joints) | set(self.bottom_joints)))


def _crossed(angle: float, threshold: float, direction: str) -> bool:
    if direction == ABOVE:
        return angle > threshold
    return angle < threshold


# Right arm: shoulder 12, elbow 14, wrist 16. Left leg: shoulder 11, hip 23, knee 25, ankle 27.
EXERCISE_CONFIGS: dict[str, CounterConfig] = {
    "bicep_curl": CounterConfig(
        key="bicep_curl",
        display_name="Bicep Curl",
        top_joints=(12, 14, 16),
        top_threshold=30.0,
        top_direction=BELOW,
        bottom_joints=(12, 14, 16),
        bottom_threshold=160.0,
        bottom_direction=ABOVE,
        feedback="Nice bicep curl - full extension",
    ),
    "pushup": CounterConfig(
        key="pushup",
        display_name="Push-up",
        top_joints=(12, 14, 16),
        top_threshold=160.0,
        top_direction=ABOVE,
        bottom_joints=(12, 14, 16),
        bottom_threshold=70.0,
        bottom_direction=BELOW,
        feedback="Nice push-up - bottom reached",
    ),
    "squat": CounterConfig(
        key="squat",
        display_name="Squat",
        top_joints=(11, 23, 25),
        top_threshold=170.0,
        top_direction=ABOVE,
        bottom_joints=(23, 25, 27),
        bottom_threshold=100.0,
        bottom_direction=BELOW,
        feedback="Good squat - bottom reached",
    ),
}

EXERCISE_ALIASES = {
    "bicep_curls": "bicep_curl",
    "biceps_curl": "bicep_curl",
    "curl": "bicep_curl",
    "push_up": "pushup",
    "push_ups": "pushup",
    "pushups": "pushup",
    "squats": "squat",
}


def canonical_exercise_key(name: str) -> str:
    n = name.strip().lower().replace("-", "_").replace(" ", "_")
    if n in EXERCISE_CONFIGS:
        return n
    if n in EXERCISE_ALIASES:
        return EXERCISE_ALIASES[n]
    raise KeyError(f"Unknown exercise: {name}")


def get_counter_config(name: str) -> CounterConfig:
    return EXERCISE_CONFIGS[canonical_exercise_key(name)]


def available_exercises() -> list[str]:
    return sorted(EXERCISE_CONFIGS.keys())
