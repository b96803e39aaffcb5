"""
Authoritative session state container.

Rules:
- This dataclass is a pure data model.
- It contains ALL state the reducer may ever need.
- No behavior, no helpers beyond read-only projections.
- A new instance is produced for every transition; nothing mutates in place.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from orchestrator.enums.direction import Direction
from orchestrator.enums.status import GameStatus
from orchestrator.levels import LEVEL_CONFIGS, LevelConfig
from orchestrator.movement import ORIGIN_POSE, GoalCell, Pose


# =============================================================================
# Scheduled transitions
# =============================================================================

class PendingKind(str, Enum):
    """Transitions the reducer has scheduled but not yet performed."""

    NARRATE_STEP = "NARRATE_STEP"


@dataclass(frozen=True)
class PendingTransition:
    """
    Explicit "do X after delay_ms" value.

    The runtime turns it into a timer; the timer event comes back to the
    reducer, which performs the transition. due=True means the delay has
    elapsed but the transition is waiting on something else (an in-flight
    replay).
    """
    kind: PendingKind
    delay_ms: int
    due: bool = False


def no_audio_available() -> dict[Direction, bool]:
    return {direction: False for direction in Direction}


# =============================================================================
# Session State
# =============================================================================

@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of all engine-owned state for one attempt."""

    # ------------------------------------------------------------------
    # Attempt identity
    # ------------------------------------------------------------------
    # Bumped on every (re)generation. Async completions carry the id
    # they were started for; anything else is stale.
    attempt_id: int = 0

    # ------------------------------------------------------------------
    # Level
    # ------------------------------------------------------------------
    level: int = LEVEL_CONFIGS[0].id
    config: LevelConfig = LEVEL_CONFIGS[0]
    path: tuple[Direction, ...] = ()
    goal: GoalCell = GoalCell(x=0.0, z=0.0)

    # ------------------------------------------------------------------
    # Player
    # ------------------------------------------------------------------
    pose: Pose = ORIGIN_POSE

    # ------------------------------------------------------------------
    # Step progress
    # ------------------------------------------------------------------
    step_index: int = 0
    commands_for_step: tuple[Direction, ...] = ()
    moves_accepted: int = 0

    # ------------------------------------------------------------------
    # Control state
    # ------------------------------------------------------------------
    status: GameStatus = GameStatus.START
    preloading: bool = True
    replaying: bool = False
    pending: PendingTransition | None = None

    # ------------------------------------------------------------------
    # Narration
    # ------------------------------------------------------------------
    # Per-attempt cache; replaced (never mutated) on downgrade.
    audio_availability: Mapping[Direction, bool] = field(
        default_factory=no_audio_available
    )

    @property
    def is_final_step(self) -> bool:
        return self.step_index + 1 == self.config.total_steps

    @property
    def expected_command(self) -> Direction | None:
        if self.moves_accepted < len(self.commands_for_step):
            return self.commands_for_step[self.moves_accepted]
        return None


# =============================================================================
# Renderer contract
# =============================================================================

@dataclass(frozen=True)
class RenderSnapshot:
    """
    Read-only view consumed by presentation.

    pose / goal / status drive the scene; the remaining fields drive the
    HUD (level badge, step progress, revealed cues, loading and replay
    indicators).
    """
    pose: Pose
    goal: GoalCell
    status: GameStatus
    level: int
    step_number: int
    total_steps: int
    command_count_per_step: int
    moves_accepted: int
    revealed_commands: tuple[Direction, ...]
    preloading: bool
    replaying: bool


def render_snapshot(state: SessionState) -> RenderSnapshot:
    """Project the session state onto the renderer contract."""
    return RenderSnapshot(
        pose=state.pose,
        goal=state.goal,
        status=state.status,
        level=state.level,
        step_number=state.step_index + 1,
        total_steps=state.config.total_steps,
        command_count_per_step=state.config.command_count_per_step,
        moves_accepted=state.moves_accepted,
        revealed_commands=state.commands_for_step[: state.moves_accepted],
        preloading=state.preloading,
        replaying=state.replaying,
    )
