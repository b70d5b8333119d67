#!/usr/bin/env python3
"""Shared landmark geometry utilities for the rep counters."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Sequence

import numpy as np

POSE_LANDMARK_COUNT = 33

LANDMARK_INDEX = {
    "nose": 0,
    "left_shoulder": 11,
    "right_shoulder": 12,
    "left_elbow": 13,
    "right_elbow": 14,
    "left_wrist": 15,
    "right_wrist": 16,
    "left_hip": 23,
    "right_hip": 24,
    "left_knee": 25,
    "right_knee": 26,
    "left_ankle": 27,
    "right_ankle": 28,
}


def load_reference_json(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _landmark_row(lm: Any) -> tuple[float, float, float, float]:
    if isinstance(lm, dict):
        vis = lm.get("visibility")
        return (
            float(lm.get("x", 0.0)),
            float(lm.get("y", 0.0)),
            float(lm.get("z") or 0.0),
            1.0 if vis is None else float(vis),
        )
    if hasattr(lm, "x") and hasattr(lm, "y"):
        vis = getattr(lm, "visibility", None)
        return (
            float(lm.x),
            float(lm.y),
            float(getattr(lm, "z", 0.0) or 0.0),
            1.0 if vis is None else float(vis),
        )
    row = [float(v) for v in lm]
    while len(row) < 3:
        row.append(0.0)
    if len(row) < 4:
        row.append(1.0)
    return row[0], row[1], row[2], row[3]


def pose_to_np(pose: Any) -> np.ndarray | None:
    """Convert a pose into float32 (33, 4): x,y,z,visibility.

    Accepts a (N, >=2) array, a list of landmark dicts or a list of
    MediaPipe-style landmark objects. Returns None when the frame has no
    usable detection (missing pose or fewer than 33 landmarks).
    """
    if pose is None:
        return None

    if isinstance(pose, np.ndarray):
        if pose.ndim != 2 or pose.shape[0] < POSE_LANDMARK_COUNT or pose.shape[1] < 2:
            return None
        out = np.zeros((POSE_LANDMARK_COUNT, 4), dtype=np.float32)
        out[:, 3] = 1.0
        cols = min(4, pose.shape[1])
        out[:, :cols] = pose[:POSE_LANDMARK_COUNT, :cols]
        return out

    if len(pose) < POSE_LANDMARK_COUNT:
        return None

    out = np.zeros((POSE_LANDMARK_COUNT, 4), dtype=np.float32)
    for i in range(POSE_LANDMARK_COUNT):
        out[i] = _landmark_row(pose[i])
    return out


def angle_at(a: Sequence[float], b: Sequence[float], c: Sequence[float]) -> float:
    """Unsigned angle ABC in degrees (0-180) from the difference of atan2 bearings.

    Coincident points are not an error; atan2(0, 0) is 0 so the result stays finite.
    """
    radians = math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def joint_angle(pose_xyzw: np.ndarray, joints: tuple[int, int, int]) -> float:
    a, b, c = joints
    return angle_at(pose_xyzw[a, :2], pose_xyzw[b, :2], pose_xyzw[c, :2])


def is_unstable(prev: Any, current: Any, threshold: float = 0.06) -> bool:
    """True if any landmark moved more than `threshold` (x/y distance) between poses."""
    if prev is None or current is None:
        return False
    if len(prev) != len(current) or len(current) == 0:
        return False

    prev_xy = np.array([_landmark_row(lm)[:2] for lm in prev], dtype=np.float64)
    cur_xy = np.array([_landmark_row(lm)[:2] for lm in current], dtype=np.float64)
    dist = np.linalg.norm(cur_xy - prev_xy, axis=1)
    return bool(np.any(dist > threshold))


def min_visibility(pose_xyzw: np.ndarray, indices: Sequence[int]) -> float:
    return float(np.min(pose_xyzw[list(indices), 3]))
