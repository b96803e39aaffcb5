"""
Level catalog.

Rules:
- The catalog is static configuration, ordered by id.
- Lookups never fail: unknown ids fall back to the first entry.
- Advancing past the last level wraps back to the first.
"""

from __future__ import annotations

from dataclasses import dataclass

from constants import LEVEL_CATALOG


@dataclass(frozen=True)
class LevelConfig:
    """Shape of one level: how many cues per step, how many steps."""

    id: int
    command_count_per_step: int
    total_steps: int

    def __post_init__(self) -> None:
        if self.command_count_per_step < 1:
            raise ValueError("command_count_per_step must be >= 1")
        if self.total_steps < 1:
            raise ValueError("total_steps must be >= 1")

    @property
    def total_commands(self) -> int:
        """Length of a generated path for this level."""
        return self.total_steps * self.command_count_per_step


LEVEL_CONFIGS: tuple[LevelConfig, ...] = tuple(
    LevelConfig(id=level_id, command_count_per_step=per_step, total_steps=steps)
    for level_id, per_step, steps in LEVEL_CATALOG
)


def config_for_level(level_id: int) -> LevelConfig:
    """Return the catalog entry for level_id, or the first entry if unknown."""
    for config in LEVEL_CONFIGS:
        if config.id == level_id:
            return config
    return LEVEL_CONFIGS[0]


def next_level_id(level_id: int) -> int:
    """Return the id after level_id, wrapping from the last level to the first."""
    ids = [config.id for config in LEVEL_CONFIGS]
    if level_id not in ids:
        return ids[0]
    return ids[(ids.index(level_id) + 1) % len(ids)]
