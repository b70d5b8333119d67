"""
Workout session management.

A session owns one RepCounter per set for its whole lifetime: the counter is
created when a set starts and dropped when the set ends, so rep state never
leaks between sets or sessions.

Example:
    session = WorkoutSession.for_level("squat", "intermediate")
    session.start()
    for pose in frames:
        progress = session.process_frame(pose)
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fitmotion.exercises import canonical_exercise_key
from fitmotion.rep_counter import CounterResult, RepCounter, create_counter
from fitmotion.scheduling.slots import normalize_fitness_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkoutPlan:
    sets: int
    reps: int
    rest_seconds: int


LEVEL_PLANS: Dict[str, WorkoutPlan] = {
    "beginner": WorkoutPlan(sets=3, reps=8, rest_seconds=90),
    "intermediate": WorkoutPlan(sets=4, reps=10, rest_seconds=60),
    "advanced": WorkoutPlan(sets=5, reps=12, rest_seconds=45),
}


def workout_plan_for_level(level: Optional[str]) -> WorkoutPlan:
    """Sets/reps/rest for a fitness level; unknown levels get the beginner plan."""
    return LEVEL_PLANS[normalize_fitness_level(level)]


@dataclass
class ExerciseSet:
    """A single set of an exercise within a workout session."""

    exercise: str
    target_reps: int
    completed_reps: int = 0
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.completed_reps >= self.target_reps

    @property
    def remaining_reps(self) -> int:
        return max(0, self.target_reps - self.completed_reps)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        elif self.start_time:
            return time.time() - self.start_time
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exercise": self.exercise,
            "target_reps": self.target_reps,
            "completed_reps": self.completed_reps,
            "remaining_reps": self.remaining_reps,
            "is_complete": self.is_complete,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class WorkoutSession:
    """Sets of one exercise, counted frame by frame."""

    exercise: str
    sets: List[ExerciseSet] = field(default_factory=list)
    rest_seconds: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    current_set_index: int = 0
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    counter: Optional[RepCounter] = field(default=None, repr=False)

    @classmethod
    def for_level(cls, exercise: str, level: Optional[str] = None) -> "WorkoutSession":
        """Create a session sized by the fitness-level plan. Raises KeyError for unknown exercises."""
        key = canonical_exercise_key(exercise)
        plan = workout_plan_for_level(level)
        sets = [ExerciseSet(exercise=key, target_reps=plan.reps) for _ in range(plan.sets)]
        return cls(exercise=key, sets=sets, rest_seconds=plan.rest_seconds)

    @property
    def current_set(self) -> Optional[ExerciseSet]:
        if 0 <= self.current_set_index < len(self.sets):
            return self.sets[self.current_set_index]
        return None

    @property
    def is_complete(self) -> bool:
        return self.current_set_index >= len(self.sets)

    @property
    def is_active(self) -> bool:
        return self.started_at is not None and self.finished_at is None

    @property
    def total_reps_completed(self) -> int:
        return sum(s.completed_reps for s in self.sets)

    @property
    def total_reps_target(self) -> int:
        return sum(s.target_reps for s in self.sets)

    def start(self) -> None:
        """Start the session and the first set."""
        self.started_at = time.time()
        self._start_current_set()

    def _start_current_set(self) -> None:
        current = self.current_set
        if current is None:
            self.counter = None
            return
        current.start_time = time.time()
        self.counter = create_counter(self.exercise)

    def process_frame(self, pose: Any) -> Dict[str, Any]:
        """Feed one frame to the active set's counter and record any completed rep.

        Once the current set reaches its target, frames are ignored (the counter
        is not fed) until `advance_to_next_set` starts the next set.
        """
        result = CounterResult(count=0)
        set_complete = False
        current = self.current_set

        if self.is_active and self.counter is not None and current is not None:
            if current.is_complete:
                result = CounterResult(count=self.counter.count)
                set_complete = True
            else:
                before = self.counter.count
                result = self.counter.process_frame(pose)
                if result.count > before:
                    current.completed_reps = min(current.target_reps, result.count)
                    set_complete = current.is_complete
                    if set_complete:
                        logger.info(
                            "Set %d/%d of %s complete",
                            self.current_set_index + 1,
                            len(self.sets),
                            self.exercise,
                        )

        progress = self.get_progress()
        progress["result"] = result.to_dict()
        progress["set_complete"] = set_complete
        return progress

    def advance_to_next_set(self) -> Optional[ExerciseSet]:
        """End the current set and start the next one; None once the session is done."""
        if self.current_set:
            self.current_set.end_time = time.time()

        self.current_set_index += 1
        self._start_current_set()

        if self.current_set:
            return self.current_set
        self.finished_at = time.time()
        return None

    def finish(self) -> None:
        """End the session early."""
        if self.current_set and not self.current_set.end_time:
            self.current_set.end_time = time.time()
        self.counter = None
        self.finished_at = time.time()

    def get_progress(self) -> Dict[str, Any]:
        return {
            "session_id": self.id,
            "exercise": self.exercise,
            "is_active": self.is_active,
            "is_complete": self.is_complete,
            "current_set_index": self.current_set_index,
            "total_sets": len(self.sets),
            "current_set": self.current_set.to_dict() if self.current_set else None,
            "total_reps_completed": self.total_reps_completed,
            "total_reps_target": self.total_reps_target,
            "rest_seconds": self.rest_seconds,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "exercise": self.exercise,
            "sets": [s.to_dict() for s in self.sets],
            "rest_seconds": self.rest_seconds,
            "total_reps_completed": self.total_reps_completed,
            "total_reps_target": self.total_reps_target,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }
