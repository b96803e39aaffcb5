"""
Trainer session container.

- Owns the runtime (which owns the immutable session state)
- Owns the narration audio output queue
- Translates the input surface into events
- Exposes the renderer contract (snapshot + subscription)
- NOT a state machine; contains no transition logic
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable

from audio.queues import AudioFrameQueue
from orchestrator.enums.direction import Direction
from orchestrator.events import (
    AdvanceLevelRequested,
    BeginStep,
    DirectionInput,
    EventType,
    LoadLevel,
    ReplayRequested,
    RetryRequested,
)
from orchestrator.runtime import Runtime, SnapshotListener
from orchestrator.state_dataclass import RenderSnapshot, SessionState


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class TrainerSession:
    """Mutable runtime container for a single trainer session."""

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    session_id: str
    runtime: Runtime
    audio_out_queue: AudioFrameQueue
    start_level: int = 1
    created_at: float = field(default_factory=time.time)

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------

    async def start(self, level: int | None = None) -> None:
        """
        Generate a fresh attempt of level, or of start_level when omitted.

        Unknown ids use the first level.
        """
        if level is None:
            level = self.start_level
        await self.runtime.handle_event(
            LoadLevel(event_type=EventType.LOAD_LEVEL, ts_ms=_now_ms(), level=level)
        )

    async def retry(self) -> None:
        """Regenerate the current level; only honored after FAIL."""
        await self.runtime.handle_event(
            RetryRequested(event_type=EventType.RETRY_REQUESTED, ts_ms=_now_ms())
        )

    async def advance_level(self) -> None:
        """Move to the next level (wrapping); only honored after SUCCESS."""
        await self.runtime.handle_event(
            AdvanceLevelRequested(
                event_type=EventType.ADVANCE_LEVEL_REQUESTED, ts_ms=_now_ms()
            )
        )

    # ------------------------------------------------------------------
    # Input surface
    # ------------------------------------------------------------------

    async def begin_step(self) -> None:
        """Start narration of the first step (the START screen's button)."""
        await self.runtime.handle_event(
            BeginStep(event_type=EventType.BEGIN_STEP, ts_ms=_now_ms())
        )

    async def press(self, direction: Direction | str) -> None:
        """
        Deliver one symbolic direction from any input source.

        Raises:
            ValueError if direction is not a Direction value.
        """
        await self.runtime.handle_event(
            DirectionInput(
                event_type=EventType.DIRECTION_INPUT,
                ts_ms=_now_ms(),
                direction=Direction(direction),
            )
        )

    async def replay(self) -> None:
        """Hear the current step again; a no-op unless MOVING and idle."""
        await self.runtime.handle_event(
            ReplayRequested(event_type=EventType.REPLAY_REQUESTED, ts_ms=_now_ms())
        )

    # ------------------------------------------------------------------
    # Renderer contract (read-only)
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.runtime.state

    def snapshot(self) -> RenderSnapshot:
        return self.runtime.snapshot

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        return self.runtime.subscribe(listener)

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    async def settle(self) -> None:
        """Wait for outstanding preload, narration and timers."""
        await self.runtime.settle()

    async def close(self) -> None:
        await self.runtime.shutdown()
        self.audio_out_queue.clear()

    def log_context(self) -> dict[str, Any]:
        """Standard logging context for this session."""
        return {
            "session_id": self.session_id,
            "attempt_id": self.runtime.state.attempt_id,
            "level": self.runtime.state.level,
        }
