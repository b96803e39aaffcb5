"""
Movement model.

(pose, direction) -> new pose

Rules:
- Pure and total: no failure mode, no side effects.
- rotation_deg is unbounded; it is never normalized.
- STRAIGHT translates one grid cell along the current heading.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from constants import (
    GRID_SIZE,
    ORIGIN_ROTATION_DEG,
    ORIGIN_X,
    ORIGIN_Z,
    TURN_ANGLE_DEG,
)
from orchestrator.enums.direction import Direction


@dataclass(frozen=True)
class Pose:
    """Player position on the ground plane plus heading in degrees."""

    x: float = ORIGIN_X
    z: float = ORIGIN_Z
    rotation_deg: float = ORIGIN_ROTATION_DEG


@dataclass(frozen=True)
class GoalCell:
    """Center of the grid cell a generated path terminates in."""

    x: float
    z: float


ORIGIN_POSE = Pose()


def apply_move(
    pose: Pose,
    direction: Direction,
    *,
    grid_size: float = GRID_SIZE,
    turn_angle_deg: float = TURN_ANGLE_DEG,
) -> Pose:
    """Return the pose reached by performing direction from pose."""
    if direction is Direction.STRAIGHT:
        rad = math.radians(pose.rotation_deg)
        return replace(
            pose,
            x=pose.x - math.sin(rad) * grid_size,
            z=pose.z - math.cos(rad) * grid_size,
        )
    if direction is Direction.LEFT:
        return replace(pose, rotation_deg=pose.rotation_deg + turn_angle_deg)
    return replace(pose, rotation_deg=pose.rotation_deg - turn_angle_deg)
