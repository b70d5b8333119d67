"""
Rep counter for real-time exercise tracking.
One state machine for every exercise, driven by a CounterConfig.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from fitmotion import config
from fitmotion.common import is_unstable, joint_angle, min_visibility, pose_to_np
from fitmotion.exercises import CounterConfig, get_counter_config

logger = logging.getLogger(__name__)


@dataclass
class CounterState:
    success_count: int = 0
    up: bool = False
    down: bool = False
    previous_pose: Optional[np.ndarray] = None


@dataclass
class CounterResult:
    count: int
    feedback: Optional[str] = None
    score: Optional[float] = None
    calorie: Optional[float] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"count": self.count}
        for key in ("feedback", "score", "calorie", "confidence"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out


class RepCounter:
    """Counts reps from a stream of 33-landmark poses.

    States: idle (up=False, down=False) -> top reached (up) -> rep complete
    (down, count += 1). Frames must be fed in arrival order by a single caller.
    """

    def __init__(
        self,
        counter_config: CounterConfig,
        skip_unstable: bool = config.COUNTER_SKIP_UNSTABLE,
        movement_threshold: float = config.COUNTER_MOVEMENT_THRESHOLD,
    ):
        self.config = counter_config
        self.skip_unstable = skip_unstable
        self.movement_threshold = movement_threshold
        self.state = CounterState()

    @property
    def count(self) -> int:
        return self.state.success_count

    def process_frame(self, pose: Any) -> CounterResult:
        landmarks = pose_to_np(pose)
        if landmarks is None:
            return CounterResult(count=self.state.success_count)

        previous = self.state.previous_pose
        self.state.previous_pose = landmarks
        if self.skip_unstable and is_unstable(previous, landmarks, self.movement_threshold):
            return CounterResult(count=self.state.success_count)

        cfg = self.config
        top_angle = joint_angle(landmarks, cfg.top_joints)
        if cfg.bottom_joints == cfg.top_joints:
            bottom_angle = top_angle
        else:
            bottom_angle = joint_angle(landmarks, cfg.bottom_joints)
        confidence = min_visibility(landmarks, cfg.landmark_indices)

        state = self.state
        at_top = cfg.at_top(top_angle)

        if at_top and not state.up:
            state.up = True
            state.down = False

        if state.up and cfg.at_bottom(bottom_angle) and not state.down:
            state.down = True
            state.up = False
            state.success_count += 1
            logger.info("%s rep counted: %d", cfg.display_name, state.success_count)
            return CounterResult(
                count=state.success_count,
                feedback=cfg.feedback,
                score=1,
                confidence=confidence,
            )

        if state.down and at_top:
            state.up = False

        return CounterResult(count=state.success_count, confidence=confidence)

    def reset(self) -> None:
        self.state = CounterState()


def create_counter(exercise: str, **kwargs: Any) -> RepCounter:
    """Build a counter for an exercise name or alias. Raises KeyError if unknown."""
    return RepCounter(get_counter_config(exercise), **kwargs)
