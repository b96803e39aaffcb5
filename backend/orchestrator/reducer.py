"""
Pure session reducer.

(state, event) -> (new_state, commands)

Rules:
- Pure: no side effects, no IO, no clocks, no randomness.
- Deterministic: output depends only on inputs.
- Total: every (status, event) pair is handled or explicitly ignored (logged).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from orchestrator.commands import (
    CancelTimer,
    Command,
    GenerateLevel,
    LogEvent,
    PlaySequence,
    SequencePurpose,
    StartPreload,
    StartTimer,
)
from orchestrator.enums.status import GameStatus
from orchestrator.events import (
    AdvanceLevelRequested,
    AttemptEvent,
    BeginStep,
    CueAudioFailed,
    DirectionInput,
    Event,
    EventType,
    LevelGenerated,
    LoadLevel,
    NarrationComplete,
    PreloadComplete,
    ReplayComplete,
    ReplayRequested,
    RetryRequested,
    StepPacingElapsed,
)
from orchestrator.levels import next_level_id
from orchestrator.movement import ORIGIN_POSE, apply_move
from orchestrator.path_generator import step_slice
from orchestrator.state_dataclass import (
    PendingKind,
    PendingTransition,
    SessionState,
    no_audio_available,
)
from constants import STEP_ADVANCE_DELAY_MS


# =============================================================================
# Invariants
# =============================================================================
# - attempt_id is bumped ONLY on LevelGenerated
# - moves_accepted resets whenever step_index changes or a level is generated
# - DirectionInput is only ever applied in MOVING
# - FAIL / SUCCESS are terminal; only GenerateLevel leaves them

# =============================================================================
# Timer IDs
# =============================================================================

TIMER_STEP_PACING = "step_pacing"


# =============================================================================
# Small helpers
# =============================================================================

def _log(
    state: SessionState,
    event: Event,
    decision: str,
    details: dict[str, Any] | None = None,
) -> LogEvent:
    return LogEvent(
        event={
            "ts_ms": event.ts_ms,
            "status": state.status.value,
            "attempt_id": state.attempt_id,
            "level": state.level,
            "step_index": state.step_index,
            "moves_accepted": state.moves_accepted,
            "event_type": event.event_type.value,
            "decision": decision,
            "details": details or {},
        }
    )


def _logs_last(commands: tuple[Command, ...]) -> tuple[Command, ...]:
    non_logs: list[Command] = []
    logs: list[Command] = []
    state_change_logs: list[Command] = []

    for command in commands:
        if isinstance(command, LogEvent):
            if command.event.get("decision") == "state_changed":
                state_change_logs.append(command)
            else:
                logs.append(command)
        else:
            non_logs.append(command)

    return tuple(non_logs + logs + state_change_logs)


def _ignore(
    state: SessionState, event: Event, reason: str
) -> tuple[SessionState, tuple[Command, ...]]:
    return state, (_log(state, event, "ignore", {"reason": reason}),)


def _state_changed(
    old: SessionState,
    new: SessionState,
    event: Event,
    source: str,
) -> LogEvent:
    return _log(
        new,
        event,
        "state_changed",
        {
            "from_status": old.status.value,
            "to_status": new.status.value,
            "source": source,
        },
    )


def _is_stale(state: SessionState, event: AttemptEvent) -> bool:
    return event.attempt_id != state.attempt_id


def _narrate(state: SessionState, purpose: SequencePurpose) -> PlaySequence:
    return PlaySequence(
        attempt_id=state.attempt_id,
        step_index=state.step_index,
        cues=state.commands_for_step,
        availability=dict(state.audio_availability),
        purpose=purpose,
    )


# =============================================================================
# Transition handlers
# =============================================================================

def _on_level_generated(
    state: SessionState, event: LevelGenerated
) -> tuple[SessionState, tuple[Command, ...]]:
    # Wholesale replacement: nothing from the previous attempt survives
    new_state = SessionState(
        attempt_id=state.attempt_id + 1,
        level=event.level,
        config=event.config,
        path=event.path,
        goal=event.goal,
        pose=ORIGIN_POSE,
        step_index=0,
        commands_for_step=(),
        moves_accepted=0,
        status=GameStatus.START,
        preloading=True,
        replaying=False,
        pending=None,
        audio_availability=no_audio_available(),
    )
    return new_state, _logs_last((
        CancelTimer(timer_id=TIMER_STEP_PACING),
        StartPreload(attempt_id=new_state.attempt_id),
        _log(
            new_state,
            event,
            "level_generated",
            {
                "path_len": len(event.path),
                "goal": {"x": event.goal.x, "z": event.goal.z},
            },
        ),
        _state_changed(state, new_state, event, "level_generated"),
    ))


def _on_begin_step(
    state: SessionState, event: BeginStep
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.status is not GameStatus.START:
        return _ignore(state, event, "not_in_start")
    if state.preloading:
        return _ignore(state, event, "preloading")
    if not state.path:
        return _ignore(state, event, "no_path")

    new_state = replace(
        state,
        commands_for_step=step_slice(state.path, state.config, state.step_index),
        moves_accepted=0,
        status=GameStatus.LISTENING,
    )
    return new_state, _logs_last((
        _narrate(new_state, SequencePurpose.NARRATION),
        _log(new_state, event, "narrate_step", {"cues": len(new_state.commands_for_step)}),
        _state_changed(state, new_state, event, "begin_step"),
    ))


def _on_direction_input(
    state: SessionState, event: DirectionInput
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.status is not GameStatus.MOVING:
        return _ignore(state, event, "input_outside_moving")

    expected = state.expected_command
    if event.direction is not expected:
        failed = replace(state, status=GameStatus.FAIL)
        return failed, _logs_last((
            _log(
                failed,
                event,
                "input_mismatch",
                {
                    "expected": expected.value if expected else None,
                    "received": event.direction.value,
                },
            ),
            _state_changed(state, failed, event, "input_mismatch"),
        ))

    moved = replace(
        state,
        pose=apply_move(state.pose, event.direction),
        moves_accepted=state.moves_accepted + 1,
    )
    accepted_log = _log(moved, event, "input_accepted", {"direction": event.direction.value})

    if moved.moves_accepted < len(moved.commands_for_step):
        return moved, (accepted_log,)

    if moved.is_final_step:
        won = replace(moved, status=GameStatus.SUCCESS)
        return won, _logs_last((
            accepted_log,
            _state_changed(state, won, event, "final_step_complete"),
        ))

    next_index = moved.step_index + 1
    advanced = replace(
        moved,
        step_index=next_index,
        commands_for_step=step_slice(moved.path, moved.config, next_index),
        moves_accepted=0,
        status=GameStatus.LISTENING,
        pending=PendingTransition(
            kind=PendingKind.NARRATE_STEP,
            delay_ms=STEP_ADVANCE_DELAY_MS,
        ),
    )
    return advanced, _logs_last((
        accepted_log,
        StartTimer(
            timer_id=TIMER_STEP_PACING,
            duration_ms=STEP_ADVANCE_DELAY_MS,
            timeout_event_type=EventType.STEP_PACING_ELAPSED,
        ),
        _log(advanced, event, "step_complete", {"next_step_index": next_index}),
        _state_changed(state, advanced, event, "step_complete"),
    ))


def _start_pending_narration(
    state: SessionState, event: Event
) -> tuple[SessionState, tuple[Command, ...]]:
    new_state = replace(state, pending=None)
    return new_state, (
        _narrate(new_state, SequencePurpose.NARRATION),
        _log(new_state, event, "narrate_step", {"cues": len(new_state.commands_for_step)}),
    )


def _on_step_pacing_elapsed(
    state: SessionState, event: StepPacingElapsed
) -> tuple[SessionState, tuple[Command, ...]]:
    if _is_stale(state, event):
        return _ignore(state, event, "stale_attempt")
    pending = state.pending
    if pending is None or pending.kind is not PendingKind.NARRATE_STEP:
        return _ignore(state, event, "no_pending_narration")

    if state.replaying:
        # Narration must not overlap the replay; ReplayComplete picks it up
        deferred = replace(state, pending=replace(pending, due=True))
        return deferred, (_log(deferred, event, "narration_deferred_for_replay"),)

    return _start_pending_narration(state, event)


def _on_narration_complete(
    state: SessionState, event: NarrationComplete
) -> tuple[SessionState, tuple[Command, ...]]:
    if _is_stale(state, event):
        return _ignore(state, event, "stale_attempt")
    if state.status is not GameStatus.LISTENING:
        return _ignore(state, event, "not_listening")
    if event.step_index != state.step_index:
        return _ignore(state, event, "stale_step")

    new_state = replace(state, status=GameStatus.MOVING)
    return new_state, (_state_changed(state, new_state, event, "narration_complete"),)


def _on_replay_requested(
    state: SessionState, event: ReplayRequested
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.status is not GameStatus.MOVING:
        return _ignore(state, event, "replay_outside_moving")
    if state.replaying:
        return _ignore(state, event, "replay_in_flight")

    new_state = replace(state, replaying=True)
    return new_state, (
        _narrate(new_state, SequencePurpose.REPLAY),
        _log(new_state, event, "replay_step"),
    )


def _on_replay_complete(
    state: SessionState, event: ReplayComplete
) -> tuple[SessionState, tuple[Command, ...]]:
    if _is_stale(state, event):
        return _ignore(state, event, "stale_attempt")

    new_state = replace(state, replaying=False)
    pending = new_state.pending
    if pending is not None and pending.kind is PendingKind.NARRATE_STEP and pending.due:
        resumed, cmds = _start_pending_narration(new_state, event)
        return resumed, (_log(new_state, event, "replay_complete"),) + cmds

    return new_state, (_log(new_state, event, "replay_complete"),)


def _on_cue_audio_failed(
    state: SessionState, event: CueAudioFailed
) -> tuple[SessionState, tuple[Command, ...]]:
    if _is_stale(state, event):
        return _ignore(state, event, "stale_attempt")

    availability = dict(state.audio_availability)
    availability[event.direction] = False
    new_state = replace(state, audio_availability=availability)
    return new_state, (
        _log(new_state, event, "cue_downgraded_to_speech", {"direction": event.direction.value}),
    )


def _on_preload_complete(
    state: SessionState, event: PreloadComplete
) -> tuple[SessionState, tuple[Command, ...]]:
    if _is_stale(state, event):
        return _ignore(state, event, "stale_attempt")

    availability = no_audio_available()
    availability.update(event.availability)
    new_state = replace(state, preloading=False, audio_availability=availability)
    return new_state, (
        _log(
            new_state,
            event,
            "preload_complete",
            {"availability": {d.value: ok for d, ok in availability.items()}},
        ),
    )


# =============================================================================
# Reducer entrypoint
# =============================================================================

def reduce(
    state: SessionState, event: Event
) -> tuple[SessionState, tuple[Command, ...]]:
    """
    Pure reducer for the trainer session state machine.

    Given the current session state and a single event, returns:
    - the next state
    - a tuple of commands describing required side effects

    Properties:
    - Deterministic: no IO, clocks, or randomness
    - Total: every (status, event) pair is handled or explicitly ignored
    - Attempt-safe: ignores completions carrying a stale attempt_id
    """
    if isinstance(event, LoadLevel):
        return state, (
            _log(state, event, "generate_level", {"level": event.level}),
            GenerateLevel(level=event.level),
        )

    if isinstance(event, LevelGenerated):
        return _on_level_generated(state, event)

    if isinstance(event, PreloadComplete):
        return _on_preload_complete(state, event)

    if isinstance(event, BeginStep):
        return _on_begin_step(state, event)

    if isinstance(event, NarrationComplete):
        return _on_narration_complete(state, event)

    if isinstance(event, DirectionInput):
        return _on_direction_input(state, event)

    if isinstance(event, StepPacingElapsed):
        return _on_step_pacing_elapsed(state, event)

    if isinstance(event, ReplayRequested):
        return _on_replay_requested(state, event)

    if isinstance(event, ReplayComplete):
        return _on_replay_complete(state, event)

    if isinstance(event, CueAudioFailed):
        return _on_cue_audio_failed(state, event)

    if isinstance(event, RetryRequested):
        if state.status is not GameStatus.FAIL:
            return _ignore(state, event, "retry_outside_fail")
        return state, (
            _log(state, event, "retry_level", {"level": state.level}),
            GenerateLevel(level=state.level),
        )

    if isinstance(event, AdvanceLevelRequested):
        if state.status is not GameStatus.SUCCESS:
            return _ignore(state, event, "advance_outside_success")
        level = next_level_id(state.level)
        return state, (
            _log(state, event, "advance_level", {"from_level": state.level, "to_level": level}),
            GenerateLevel(level=level),
        )

    return _ignore(state, event, "unknown_event")
