"""
Unified event definitions for the session reducer.

Rules:
- Events describe facts that have occurred.
- Events carry data only (no behavior).
- All reducer decisions are based on these events.
- No clocks, no timers, no async, no side effects.

Events produced by async work (preload, narration, timers) carry the
attempt_id they were started for so the reducer can drop stale ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from orchestrator.enums.direction import Direction
from orchestrator.levels import LevelConfig
from orchestrator.movement import GoalCell


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """
    Canonical event types understood by the reducer.

    Every (status, event_type) pair must be explicitly handled
    or explicitly ignored by the reducer.
    """

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------
    LOAD_LEVEL = "LOAD_LEVEL"
    LEVEL_GENERATED = "LEVEL_GENERATED"
    PRELOAD_COMPLETE = "PRELOAD_COMPLETE"
    RETRY_REQUESTED = "RETRY_REQUESTED"
    ADVANCE_LEVEL_REQUESTED = "ADVANCE_LEVEL_REQUESTED"

    # ------------------------------------------------------------------
    # Player control
    # ------------------------------------------------------------------
    BEGIN_STEP = "BEGIN_STEP"
    DIRECTION_INPUT = "DIRECTION_INPUT"
    REPLAY_REQUESTED = "REPLAY_REQUESTED"

    # ------------------------------------------------------------------
    # Narration
    # ------------------------------------------------------------------
    NARRATION_COMPLETE = "NARRATION_COMPLETE"
    REPLAY_COMPLETE = "REPLAY_COMPLETE"
    CUE_AUDIO_FAILED = "CUE_AUDIO_FAILED"

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    STEP_PACING_ELAPSED = "STEP_PACING_ELAPSED"


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: timestamp provided by the source (or fake in tests)
    """

    event_type: EventType
    ts_ms: int


@dataclass(frozen=True)
class AttemptEvent(Event):
    """
    Base class for completions of async work started by a command.

    The reducer MUST ignore events whose attempt_id does not match the
    current attempt.
    """

    attempt_id: int


# =============================================================================
# Level Lifecycle Events
# =============================================================================

@dataclass(frozen=True)
class LoadLevel(Event):
    """Request to generate a fresh attempt of level."""
    level: int


@dataclass(frozen=True)
class LevelGenerated(Event):
    """A path was generated for level (runtime owns the random source)."""
    level: int
    config: LevelConfig
    path: tuple[Direction, ...]
    goal: GoalCell


@dataclass(frozen=True)
class PreloadComplete(AttemptEvent):
    """Availability probe and minimum loading display both finished."""
    availability: Mapping[Direction, bool]


@dataclass(frozen=True)
class RetryRequested(Event):
    """Player asked to retry after FAIL."""


@dataclass(frozen=True)
class AdvanceLevelRequested(Event):
    """Player asked for the next level after SUCCESS."""


# =============================================================================
# Player Control Events
# =============================================================================

@dataclass(frozen=True)
class BeginStep(Event):
    """Explicit trigger that starts narration of the first step."""


@dataclass(frozen=True)
class DirectionInput(Event):
    """Input surface emitted one symbolic direction."""
    direction: Direction


@dataclass(frozen=True)
class ReplayRequested(Event):
    """Player asked to hear the current step again."""


# =============================================================================
# Narration Events
# =============================================================================

@dataclass(frozen=True)
class NarrationComplete(AttemptEvent):
    """Narration of step_index finished (every cue voiced or timed out)."""
    step_index: int


@dataclass(frozen=True)
class ReplayComplete(AttemptEvent):
    """A replay of the current step finished."""


@dataclass(frozen=True)
class CueAudioFailed(AttemptEvent):
    """Audio asset playback failed; direction is downgraded to speech."""
    direction: Direction


# =============================================================================
# Timer Events
# =============================================================================

@dataclass(frozen=True)
class StepPacingElapsed(AttemptEvent):
    """The pause between a completed step and the next narration elapsed."""
