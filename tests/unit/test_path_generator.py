# pylint: disable=missing-module-docstring,missing-function-docstring

import random

import pytest

from constants import GOAL_CELL_OFFSET, GRID_SIZE, PATH_DRAW_TABLE
from orchestrator.enums.direction import Direction
from orchestrator.levels import LEVEL_CONFIGS, LevelConfig
from orchestrator.path_generator import generate_path, snap_to_cell_center, step_slice


S, L, R = Direction.STRAIGHT, Direction.LEFT, Direction.RIGHT


class ScriptedRng:
    """Returns pre-scripted draws; asserts the draw table size."""

    def __init__(self, draws: list[int]) -> None:
        self._draws = list(draws)

    def randrange(self, stop: int) -> int:
        assert stop == len(PATH_DRAW_TABLE)
        return self._draws.pop(0)


# ---------------------------------------------------------------------
# Draw table
# ---------------------------------------------------------------------

def test_draw_table_weights_straight_twice():
    assert len(PATH_DRAW_TABLE) == 4
    assert PATH_DRAW_TABLE.count(S) == 2
    assert PATH_DRAW_TABLE.count(L) == 1
    assert PATH_DRAW_TABLE.count(R) == 1


# ---------------------------------------------------------------------
# Path shape
# ---------------------------------------------------------------------

@pytest.mark.parametrize("config", LEVEL_CONFIGS, ids=lambda c: f"level{c.id}")
def test_path_length_matches_level(config: LevelConfig):
    generated = generate_path(config, random.Random(1234))

    assert len(generated.path) == config.total_steps * config.command_count_per_step


def test_same_seed_same_level():
    config = LEVEL_CONFIGS[1]

    a = generate_path(config, random.Random(7))
    b = generate_path(config, random.Random(7))

    assert a == b


def test_scripted_draws_map_through_table():
    config = LevelConfig(id=9, command_count_per_step=2, total_steps=2)

    generated = generate_path(config, ScriptedRng([0, 2, 1, 3]))

    assert generated.path == (S, L, S, R)


# ---------------------------------------------------------------------
# Goal
# ---------------------------------------------------------------------

def test_goal_for_straight_line():
    config = LevelConfig(id=9, command_count_per_step=1, total_steps=8)

    generated = generate_path(config, ScriptedRng([0] * 8))

    # Final pose (0, -40) snaps to the center of the cell below it
    assert generated.goal.x == pytest.approx(2.5)
    assert generated.goal.z == pytest.approx(-37.5)


def test_goal_after_left_turn():
    config = LevelConfig(id=9, command_count_per_step=1, total_steps=2)

    generated = generate_path(config, ScriptedRng([2, 0]))

    assert generated.path == (L, S)
    assert generated.goal.x == pytest.approx(-2.5)
    assert generated.goal.z == pytest.approx(2.5)


@pytest.mark.parametrize("seed", range(25))
def test_goal_is_always_a_cell_center(seed: int):
    generated = generate_path(LEVEL_CONFIGS[2], random.Random(seed))

    for coord in (generated.goal.x, generated.goal.z):
        cells = (coord - GOAL_CELL_OFFSET) / GRID_SIZE
        assert cells == pytest.approx(round(cells))


def test_snap_rounds_half_up():
    assert snap_to_cell_center(2.5) == pytest.approx(7.5)
    assert snap_to_cell_center(-2.5) == pytest.approx(2.5)
    assert snap_to_cell_center(-2.6) == pytest.approx(-2.5)


# ---------------------------------------------------------------------
# Step slicing
# ---------------------------------------------------------------------

def test_step_slice_returns_step_window():
    config = LevelConfig(id=9, command_count_per_step=2, total_steps=3)
    path = (S, L, R, S, L, L)

    assert step_slice(path, config, 0) == (S, L)
    assert step_slice(path, config, 1) == (R, S)
    assert step_slice(path, config, 2) == (L, L)
