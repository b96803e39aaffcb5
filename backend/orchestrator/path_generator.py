"""
Procedural path generation.

(config, rng) -> GeneratedLevel(path, goal)

Rules:
- Randomness is injected (anything with randrange(n), e.g. random.Random).
- One draw per command; the simulation uses the same movement model as play.
- No solvability, loop or revisit checks: the path IS the ground truth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from constants import GOAL_CELL_OFFSET, GRID_SIZE, PATH_DRAW_TABLE
from orchestrator.enums.direction import Direction
from orchestrator.levels import LevelConfig
from orchestrator.movement import ORIGIN_POSE, GoalCell, apply_move


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


@dataclass(frozen=True)
class GeneratedLevel:
    """Full command path for one attempt plus the cell it leads to."""

    path: tuple[Direction, ...]
    goal: GoalCell


def snap_to_cell_center(value: float, *, grid_size: float = GRID_SIZE) -> float:
    """
    Round value to the nearest grid coordinate (half-up) and offset to
    the center of the cell.
    """
    return math.floor(value / grid_size + 0.5) * grid_size + GOAL_CELL_OFFSET


def generate_path(config: LevelConfig, rng: RandomSource) -> GeneratedLevel:
    """Draw config.total_commands directions and simulate where they lead."""
    path: list[Direction] = []
    pose = ORIGIN_POSE

    for _ in range(config.total_commands):
        move = PATH_DRAW_TABLE[rng.randrange(len(PATH_DRAW_TABLE))]
        path.append(move)
        pose = apply_move(pose, move)

    goal = GoalCell(
        x=snap_to_cell_center(pose.x),
        z=snap_to_cell_center(pose.z),
    )
    return GeneratedLevel(path=tuple(path), goal=goal)


def step_slice(
    path: tuple[Direction, ...],
    config: LevelConfig,
    step_index: int,
) -> tuple[Direction, ...]:
    """Commands narrated for step_index."""
    start = step_index * config.command_count_per_step
    return path[start : start + config.command_count_per_step]
