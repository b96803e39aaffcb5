# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
import json
import random
from typing import Any, Awaitable, Callable, Iterable, MutableMapping

import pytest

from observability import logger
from orchestrator.enums.direction import Direction
from orchestrator.enums.status import GameStatus
from orchestrator.events import (
    AdvanceLevelRequested,
    BeginStep,
    DirectionInput,
    EventType,
    LoadLevel,
    ReplayRequested,
    RetryRequested,
)
from orchestrator.runtime import Runtime
from orchestrator.runtime_context import RuntimeExecutionContext
from orchestrator.state_dataclass import RenderSnapshot, SessionState


# ---------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------

class FakeNarrator:
    """Records every sequence; optionally downgrades, fails or blocks."""

    def __init__(
        self,
        *,
        downgrade: Direction | None = None,
        fail: bool = False,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.sequences: list[tuple[Direction, ...]] = []
        self.downgrade = downgrade
        self.fail = fail
        self.gate = gate

    async def play_sequence(
        self,
        cues: Iterable[Direction],
        availability: MutableMapping[Direction, bool],
        on_downgrade: Callable[[Direction], Awaitable[None]] | None = None,
    ) -> None:
        cues = tuple(cues)
        self.sequences.append(cues)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("speaker unplugged")
        if self.downgrade in cues and availability.get(self.downgrade):
            availability[self.downgrade] = False
            if on_downgrade is not None:
                await on_downgrade(self.downgrade)


class FakeProbe:
    def __init__(self, availability: dict[Direction, bool] | None = None) -> None:
        self.availability = availability or {d: True for d in Direction}
        self.calls = 0

    async def probe(self, directions: Iterable[Direction] = tuple(Direction)) -> dict[Direction, bool]:
        self.calls += 1
        return {d: self.availability[d] for d in directions}


class BrokenProbe:
    async def probe(self, directions: Iterable[Direction] = tuple(Direction)) -> dict[Direction, bool]:
        raise OSError("asset volume unmounted")


async def instant_sleep(_seconds: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def log_lines(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    lines: list[dict[str, Any]] = []
    monkeypatch.setattr(logger, "_print", lambda line: lines.append(json.loads(line)))
    return lines


def make_runtime(narrator: FakeNarrator, probe: FakeProbe | BrokenProbe | None = None, seed: int = 11) -> Runtime:
    return Runtime(
        initial_state=SessionState(),
        context=RuntimeExecutionContext(
            session_id="test-session",
            narrator=narrator,
            probe=probe or FakeProbe(),
            rng=random.Random(seed),
            sleep=instant_sleep,
        ),
    )


# ---------------------------------------------------------------------
# Event helpers
# ---------------------------------------------------------------------

async def load(runtime: Runtime, level: int = 1) -> None:
    await runtime.handle_event(LoadLevel(event_type=EventType.LOAD_LEVEL, ts_ms=0, level=level))
    await runtime.settle()


async def begin(runtime: Runtime) -> None:
    await runtime.handle_event(BeginStep(event_type=EventType.BEGIN_STEP, ts_ms=0))
    await runtime.settle()


async def press(runtime: Runtime, direction: Direction) -> None:
    await runtime.handle_event(
        DirectionInput(event_type=EventType.DIRECTION_INPUT, ts_ms=0, direction=direction)
    )
    await runtime.settle()


async def play_through(runtime: Runtime) -> None:
    """Feed the generated path back, step by step."""
    while runtime.state.status is GameStatus.MOVING:
        await press(runtime, runtime.state.commands_for_step[runtime.state.moves_accepted])


def wrong(direction: Direction) -> Direction:
    return Direction.LEFT if direction is not Direction.LEFT else Direction.RIGHT


# ---------------------------------------------------------------------
# 1. Level start and preload
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_load_level_generates_and_preloads(log_lines: list[dict[str, Any]]):
    probe = FakeProbe({Direction.STRAIGHT: True, Direction.LEFT: False, Direction.RIGHT: True})
    runtime = make_runtime(FakeNarrator(), probe)

    await load(runtime, level=2)

    state = runtime.state
    assert state.attempt_id == 1
    assert state.level == 2
    assert len(state.path) == 20
    assert state.status is GameStatus.START
    assert state.preloading is False
    assert state.audio_availability[Direction.LEFT] is False
    assert probe.calls == 1

    assert all(line["session_id"] == "test-session" for line in log_lines if "decision" in line)
    assert any(line.get("metric") == "preload_ms" for line in log_lines)


@pytest.mark.asyncio
async def test_preload_error_falls_back_to_speech_only(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator(), BrokenProbe())

    await load(runtime)

    assert runtime.state.preloading is False
    assert runtime.state.audio_availability == {d: False for d in Direction}
    (failure,) = [line for line in log_lines if line.get("event_type") == "preload_failed"]
    assert failure["attempt_id"] == 1
    assert "OSError" in failure["error"]

    await begin(runtime)

    assert runtime.state.status is GameStatus.MOVING


@pytest.mark.asyncio
async def test_unknown_level_uses_first_level(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator())

    await load(runtime, level=42)

    assert runtime.state.level == 1
    assert len(runtime.state.path) == 8


# ---------------------------------------------------------------------
# 2. Full play-through
# ---------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("level", [1, 2, 3])
async def test_feeding_the_path_back_wins(level: int, log_lines: list[dict[str, Any]]):
    narrator = FakeNarrator()
    runtime = make_runtime(narrator, seed=level)

    await load(runtime, level)
    await begin(runtime)
    await play_through(runtime)

    state = runtime.state
    assert state.status is GameStatus.SUCCESS
    assert state.step_index == state.config.total_steps - 1
    assert len(narrator.sequences) == state.config.total_steps
    assert tuple(c for seq in narrator.sequences for c in seq) == state.path


@pytest.mark.asyncio
async def test_wrong_input_fails_and_retry_restarts_same_level(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator())

    await load(runtime, level=2)
    await begin(runtime)
    pose_before = runtime.state.pose
    await press(runtime, wrong(runtime.state.expected_command))

    assert runtime.state.status is GameStatus.FAIL
    assert runtime.state.pose == pose_before

    await runtime.handle_event(RetryRequested(event_type=EventType.RETRY_REQUESTED, ts_ms=0))
    await runtime.settle()

    assert runtime.state.attempt_id == 2
    assert runtime.state.level == 2
    assert runtime.state.status is GameStatus.START
    assert runtime.state.preloading is False


@pytest.mark.asyncio
async def test_advance_after_success_goes_to_next_level(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator())

    await load(runtime, level=3)
    await begin(runtime)
    await play_through(runtime)
    await runtime.handle_event(
        AdvanceLevelRequested(event_type=EventType.ADVANCE_LEVEL_REQUESTED, ts_ms=0)
    )
    await runtime.settle()

    assert runtime.state.level == 1
    assert runtime.state.status is GameStatus.START


# ---------------------------------------------------------------------
# 3. Narration side channels
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_downgrade_reaches_session_state(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator(downgrade=Direction.STRAIGHT), seed=5)

    await load(runtime, level=3)
    await begin(runtime)
    await play_through(runtime)

    assert Direction.STRAIGHT in runtime.state.path
    assert runtime.state.audio_availability[Direction.STRAIGHT] is False
    assert any(line.get("decision") == "cue_downgraded_to_speech" for line in log_lines)


@pytest.mark.asyncio
async def test_failed_narration_still_releases_input(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator(fail=True))

    await load(runtime)
    await begin(runtime)

    assert runtime.state.status is GameStatus.MOVING
    assert any(line.get("event_type") == "narration_failed" for line in log_lines)


@pytest.mark.asyncio
async def test_replay_plays_current_step_again(log_lines: list[dict[str, Any]]):
    narrator = FakeNarrator()
    runtime = make_runtime(narrator)

    await load(runtime, level=2)
    await begin(runtime)
    await runtime.handle_event(ReplayRequested(event_type=EventType.REPLAY_REQUESTED, ts_ms=0))
    await runtime.settle()

    assert narrator.sequences == [runtime.state.commands_for_step] * 2
    assert runtime.state.replaying is False
    assert runtime.state.status is GameStatus.MOVING


@pytest.mark.asyncio
async def test_narration_from_abandoned_attempt_is_ignored(log_lines: list[dict[str, Any]]):
    gate = asyncio.Event()
    runtime = make_runtime(FakeNarrator(gate=gate))

    await load(runtime)
    await runtime.handle_event(BeginStep(event_type=EventType.BEGIN_STEP, ts_ms=0))
    assert runtime.state.status is GameStatus.LISTENING

    # New attempt while the first narration is still being voiced
    await runtime.handle_event(LoadLevel(event_type=EventType.LOAD_LEVEL, ts_ms=0, level=1))
    gate.set()
    await runtime.settle()

    assert runtime.state.attempt_id == 2
    assert runtime.state.status is GameStatus.START
    assert any(
        line.get("decision") == "ignore" and line["details"]["reason"] == "stale_attempt"
        for line in log_lines
    )


# ---------------------------------------------------------------------
# 4. Renderer contract
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_subscribers_see_each_status(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator())
    seen: list[RenderSnapshot] = []
    unsubscribe = runtime.subscribe(seen.append)

    await load(runtime)
    await begin(runtime)
    await play_through(runtime)

    statuses = {snapshot.status for snapshot in seen}
    assert statuses == {GameStatus.START, GameStatus.LISTENING, GameStatus.MOVING, GameStatus.SUCCESS}
    assert seen[-1] == runtime.snapshot

    unsubscribe()
    count = len(seen)
    await load(runtime)
    assert len(seen) == count


@pytest.mark.asyncio
async def test_shutdown_cancels_inflight_narration(log_lines: list[dict[str, Any]]):
    runtime = make_runtime(FakeNarrator(gate=asyncio.Event()))

    await load(runtime)
    await runtime.handle_event(BeginStep(event_type=EventType.BEGIN_STEP, ts_ms=0))
    await runtime.shutdown()
    await runtime.settle()

    assert runtime.state.status is GameStatus.LISTENING
