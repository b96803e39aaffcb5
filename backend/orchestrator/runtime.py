"""
Runtime execution shell for a single trainer session.

Responsibilities:
- Own session state
- Call pure reducer
- Execute commands with side effects (generation, preload, narration, timers)
- Convert timer expiry and async completions into events
- Publish render snapshots to subscribers

Non-responsibilities:
- No transition logic (reducer only)
- No presentation
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Callable, Coroutine, Any

from constants import LOADING_MIN_DISPLAY_MS
from observability.logger import log_event
from observability.metrics import timed
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
from orchestrator.enums.direction import Direction
from orchestrator.events import (
    CueAudioFailed,
    Event,
    EventType,
    LevelGenerated,
    NarrationComplete,
    PreloadComplete,
    ReplayComplete,
    StepPacingElapsed,
)
from orchestrator.levels import config_for_level
from orchestrator.path_generator import generate_path
from orchestrator.reducer import reduce
from orchestrator.state_dataclass import RenderSnapshot, SessionState, render_snapshot

if TYPE_CHECKING:
    from orchestrator.runtime_context import RuntimeExecutionContext


SnapshotListener = Callable[[RenderSnapshot], None]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class Runtime:
    """
    Runtime execution boundary for a single trainer session.

    Responsibilities:
    - Own the authoritative session state
    - Act as the universal event sink for the session
      (player input, narration/preload completions, timer events)
    - Invoke the pure reducer deterministically
    - Execute emitted commands with side effects
    - Schedule and cancel timers

    Guarantees:
    - Reducer is always called exactly once per incoming event
    - State is swapped before any side effects execute
    - Commands are executed in reducer-emitted order
    - Async work re-enters through handle_event (single entry point)
    - At most one cue sequence is voiced at a time; a new sequence waits
      for the previous one to finish
    """

    def __init__(
        self,
        *,
        initial_state: SessionState,
        context: RuntimeExecutionContext,
    ) -> None:
        self._state = initial_state
        self._ctx = context
        self._timers: dict[str, asyncio.Task[None]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._narration_task: asyncio.Task[None] | None = None
        self._listeners: list[SnapshotListener] = []
        self._snapshot = render_snapshot(initial_state)

    @property
    def state(self) -> SessionState:
        """
        Return the current immutable session state.

        Consumers must never modify this state directly; it only changes
        through handle_event().
        """
        return self._state

    @property
    def snapshot(self) -> RenderSnapshot:
        """Latest renderer-facing projection of the state."""
        return self._snapshot

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register listener for snapshot changes.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def handle_event(self, event: Event) -> None:
        """
        Process a single event through the session pipeline.

        Processing steps:
        1. Pass the current state and event to the pure reducer
        2. Swap in the new session state
        3. Publish the render snapshot if it changed
        4. Execute all emitted commands sequentially
        """
        new_state, commands = reduce(self._state, event)
        self._state = new_state
        self._publish()

        for cmd in commands:
            await self._execute_command(cmd)

    async def settle(self) -> None:
        """
        Wait until no preload, narration or timer work is outstanding.

        Work started while waiting (e.g. a timer that starts narration)
        is waited for as well.
        """
        current = asyncio.current_task()
        while True:
            pending = [
                task
                for task in (*self._tasks, *self._timers.values())
                if not task.done() and task is not current
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def shutdown(self) -> None:
        """
        Clean shutdown of runtime.

        Cancels all in-flight timers and tasks and waits for them to finish.
        """
        tasks = [*self._tasks, *self._timers.values()]
        for task in tasks:
            task.cancel()
        self._timers.clear()

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Command execution (side effects)
    # ------------------------------------------------------------------

    async def _execute_command(self, cmd: Command) -> None:
        """Execute a single command with side effects."""

        if isinstance(cmd, LogEvent):
            log_event({
                **cmd.event,
                "session_id": self._ctx.session_id,
            })

        elif isinstance(cmd, GenerateLevel):
            config = config_for_level(cmd.level)
            generated = generate_path(config, self._ctx.rng)
            await self.handle_event(
                LevelGenerated(
                    event_type=EventType.LEVEL_GENERATED,
                    ts_ms=_now_ms(),
                    level=config.id,
                    config=config,
                    path=generated.path,
                    goal=generated.goal,
                )
            )

        elif isinstance(cmd, StartPreload):
            self._spawn(self._run_preload(cmd.attempt_id))

        elif isinstance(cmd, PlaySequence):
            self._start_narration(cmd)

        elif isinstance(cmd, StartTimer):
            self._start_timer(
                timer_id=cmd.timer_id,
                duration_ms=cmd.duration_ms,
                timeout_event_type=cmd.timeout_event_type,
            )

        elif isinstance(cmd, CancelTimer):
            self._cancel_timer(cmd.timer_id)

        else:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "COMMAND_NOT_IMPLEMENTED",
                "session_id": self._ctx.session_id,
                "command_type": type(cmd).__name__,
            })

    # ------------------------------------------------------------------
    # Async work
    # ------------------------------------------------------------------

    async def _run_preload(self, attempt_id: int) -> None:
        """
        Probe cue availability alongside the minimum loading display.

        The level is not playable until both have finished.
        """
        availability: dict[Direction, bool] = {}
        try:
            with timed("preload_ms", session_id=self._ctx.session_id):
                availability, _ = await asyncio.gather(
                    self._ctx.probe.probe(tuple(Direction)),
                    self._ctx.sleep(LOADING_MIN_DISPLAY_MS / 1000.0),
                )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Speech-only is still playable; never leave the level loading
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "preload_failed",
                "session_id": self._ctx.session_id,
                "attempt_id": attempt_id,
                "error": f"{type(exc).__name__}: {exc}",
            })

        await self.handle_event(
            PreloadComplete(
                event_type=EventType.PRELOAD_COMPLETE,
                ts_ms=_now_ms(),
                attempt_id=attempt_id,
                availability=availability,
            )
        )

    def _start_narration(self, cmd: PlaySequence) -> None:
        previous = self._narration_task

        async def _downgrade(direction: Direction) -> None:
            await self.handle_event(
                CueAudioFailed(
                    event_type=EventType.CUE_AUDIO_FAILED,
                    ts_ms=_now_ms(),
                    attempt_id=cmd.attempt_id,
                    direction=direction,
                )
            )

        async def _narration_task() -> None:
            if previous is not None and not previous.done():
                await asyncio.gather(previous, return_exceptions=True)

            availability = dict(cmd.availability)
            try:
                with timed(
                    "narration_ms",
                    session_id=self._ctx.session_id,
                    state=self._state.status.value,
                    details={"purpose": cmd.purpose.value, "cues": len(cmd.cues)},
                ):
                    await self._ctx.narrator.play_sequence(cmd.cues, availability, _downgrade)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                # A broken narration must not strand the player in LISTENING
                log_event({
                    "ts_ms": _now_ms(),
                    "event_type": "narration_failed",
                    "session_id": self._ctx.session_id,
                    "attempt_id": cmd.attempt_id,
                    "error": f"{type(exc).__name__}: {exc}",
                })

            await self.handle_event(self._narration_done_event(cmd))

        self._narration_task = self._spawn(_narration_task())

    @staticmethod
    def _narration_done_event(cmd: PlaySequence) -> Event:
        if cmd.purpose is SequencePurpose.REPLAY:
            return ReplayComplete(
                event_type=EventType.REPLAY_COMPLETE,
                ts_ms=_now_ms(),
                attempt_id=cmd.attempt_id,
            )
        return NarrationComplete(
            event_type=EventType.NARRATION_COMPLETE,
            ts_ms=_now_ms(),
            attempt_id=cmd.attempt_id,
            step_index=cmd.step_index,
        )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _publish(self) -> None:
        snapshot = render_snapshot(self._state)
        if snapshot == self._snapshot:
            return
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Timer management
    # ------------------------------------------------------------------

    def _start_timer(
        self,
        *,
        timer_id: str,
        duration_ms: int,
        timeout_event_type: EventType,
    ) -> None:
        """
        Start or replace a timer that emits a timeout event.

        Timer tasks re-enter handle_event() when they expire,
        maintaining the single event entry point invariant.
        """
        self._cancel_timer(timer_id)
        attempt_id = self._state.attempt_id

        async def _timer_task() -> None:
            try:
                await self._ctx.sleep(duration_ms / 1000.0)
                event = self._construct_timeout_event(
                    timer_id=timer_id,
                    timeout_event_type=timeout_event_type,
                    attempt_id=attempt_id,
                )
                await self.handle_event(event)

            except asyncio.CancelledError:
                # Timer was cancelled - this is normal
                return

        self._timers[timer_id] = asyncio.create_task(_timer_task())

    def _cancel_timer(self, timer_id: str) -> None:
        """
        Cancel an in-flight timer if it exists.

        Idempotent: safe to call even if timer doesn't exist. A timer
        never cancels itself while delivering its own event.
        """
        task = self._timers.get(timer_id)
        if task is None or task is asyncio.current_task():
            return
        self._timers.pop(timer_id, None)
        if not task.done():
            task.cancel()

    @staticmethod
    def _construct_timeout_event(
        *,
        timer_id: str,
        timeout_event_type: EventType,
        attempt_id: int,
    ) -> Event:
        """
        Construct the timeout event for an expired timer.

        The attempt_id is the one current when the timer was started, so
        a timer outliving its attempt is dropped as stale by the reducer.
        """
        if timeout_event_type is EventType.STEP_PACING_ELAPSED:
            return StepPacingElapsed(
                event_type=EventType.STEP_PACING_ELAPSED,
                ts_ms=_now_ms(),
                attempt_id=attempt_id,
            )

        raise ValueError(
            f"Unknown timeout event type: {timeout_event_type} "
            f"for timer_id: {timer_id}"
        )
