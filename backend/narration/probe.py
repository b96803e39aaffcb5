"""
Audio availability probe.

Run once per level attempt: checks, concurrently and each under a fixed
timeout, which direction cues have a playable asset. Never raises; any
error or timeout marks the direction unavailable.
"""

from __future__ import annotations

import asyncio
import time
from typing import Iterable

from adapters.cues.base import CuePlaybackError, CueSource
from constants import PROBE_TIMEOUT_MS
from observability.logger import log_event
from orchestrator.enums.direction import Direction


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class AvailabilityProbe:
    """Decides, per Direction, whether recorded audio can be used this attempt."""

    def __init__(
        self,
        cues: CueSource,
        *,
        timeout_ms: int = PROBE_TIMEOUT_MS,
    ) -> None:
        self._cues = cues
        self._timeout_s = timeout_ms / 1000.0

    async def probe(
        self,
        directions: Iterable[Direction] = tuple(Direction),
    ) -> dict[Direction, bool]:
        ordered = tuple(directions)
        results = await asyncio.gather(*(self._probe_one(d) for d in ordered))
        return dict(zip(ordered, results))

    async def _probe_one(self, direction: Direction) -> bool:
        try:
            ok = await asyncio.wait_for(
                self._cues.can_play_through(direction),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError:
            self._log(direction, False, "timeout")
            return False
        except CuePlaybackError as exc:
            self._log(direction, False, exc.reason)
            return False
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self._log(direction, False, f"{type(exc).__name__}: {exc}")
            return False

        self._log(direction, ok, None if ok else "empty_clip")
        return ok

    @staticmethod
    def _log(direction: Direction, available: bool, reason: str | None) -> None:
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "cue_probe_result",
            "direction": direction.value,
            "available": available,
            "reason": reason,
        })
