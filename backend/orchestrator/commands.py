"""
Side-effect command definitions for the session engine.

Rules:
- Commands are declarative requests for side effects.
- Commands are emitted by the reducer and executed by the runtime.
- No behavior, no async, no I/O, no clocks.
- Reducer logic remains pure and deterministic.
Invariant:
    - All concrete Command subclasses MUST be frozen dataclasses.
    - Commands are immutable value objects emitted by the reducer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from orchestrator.enums.direction import Direction
from orchestrator.events import EventType

# =============================================================================
# Command Type Enumeration
# =============================================================================

class CommandType(str, Enum):
    """
    Canonical command types emitted by the reducer.

    These are stable discriminants used for logging and runtime dispatch.
    """

    # Level lifecycle
    GENERATE_LEVEL = "GENERATE_LEVEL"
    START_PRELOAD = "START_PRELOAD"

    # Narration
    PLAY_SEQUENCE = "PLAY_SEQUENCE"

    # Timers
    START_TIMER = "START_TIMER"
    CANCEL_TIMER = "CANCEL_TIMER"

    # Observability
    LOG_EVENT = "LOG_EVENT"


class SequencePurpose(str, Enum):
    """Why a cue sequence is being played; selects the completion event."""

    NARRATION = "NARRATION"
    REPLAY = "REPLAY"


# =============================================================================
# Base Command
# =============================================================================

class Command:
    """
    Base command type.

    command_type is an explicit discriminant and must never be inferred
    from Python type identity.
    """

    command_type: CommandType


# =============================================================================
# Level Lifecycle Commands
# =============================================================================

@dataclass(frozen=True)
class GenerateLevel(Command):
    """
    Request a fresh path for level.

    The runtime owns the random source and must answer with exactly one
    LevelGenerated event.
    """
    level: int
    command_type: CommandType = CommandType.GENERATE_LEVEL


@dataclass(frozen=True)
class StartPreload(Command):
    """
    Request the availability probe for attempt_id.

    The runtime must answer with exactly one PreloadComplete event, after
    both the probe and the minimum loading display have finished.
    """
    attempt_id: int
    command_type: CommandType = CommandType.START_PRELOAD


# =============================================================================
# Narration Commands
# =============================================================================

@dataclass(frozen=True)
class PlaySequence(Command):
    """
    Request narration of cues, in order.

    availability is the session's cache at emission time; the runtime
    reports downgrades back as CueAudioFailed events. Completion is
    reported as NarrationComplete(step_index) or ReplayComplete depending
    on purpose.
    """
    attempt_id: int
    step_index: int
    cues: tuple[Direction, ...]
    availability: Mapping[Direction, bool]
    purpose: SequencePurpose = SequencePurpose.NARRATION
    command_type: CommandType = CommandType.PLAY_SEQUENCE


# =============================================================================
# Timer Commands
# =============================================================================

@dataclass(frozen=True)
class StartTimer(Command):
    """
    Request to start a named timer.

    On expiration, the runtime must inject the specified timeout event.
    """
    timer_id: str
    duration_ms: int
    timeout_event_type: EventType
    command_type: CommandType = CommandType.START_TIMER


@dataclass(frozen=True)
class CancelTimer(Command):
    """Request to cancel a previously scheduled timer."""
    timer_id: str
    command_type: CommandType = CommandType.CANCEL_TIMER


# =============================================================================
# Observability Commands
# =============================================================================

@dataclass(frozen=True)
class LogEvent(Command):
    """Request to emit a structured observability event."""
    event: dict[str, Any]
    command_type: CommandType = CommandType.LOG_EVENT
