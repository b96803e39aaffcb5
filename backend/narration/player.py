"""
Narration player.

Voices direction cues one at a time: recorded audio when the cue is marked
available, synthesized speech otherwise.

Fallback policy:
- availability[direction] false at call time  -> speech
- loading or playing the recording fails      -> downgrade + speech
- once downgraded, every later cue of that direction uses speech for the
  rest of the attempt (the caller's availability mapping is mutated and
  on_downgrade is notified)

Bounded waits:
- speech resolves on completion, error or SPEECH_SAFETY_TIMEOUT_MS
- recorded audio resolves on completion or AUDIO_SAFETY_TIMEOUT_MS
Neither timeout aborts the underlying playback. A timed-out utterance is
cancelled before the next cue is voiced, whichever source that cue uses.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Iterable, Mapping, MutableMapping, Protocol

from adapters.cues.base import CuePlaybackError, CueSource
from adapters.tts.base import SpeechSynthesizer
from audio.frames import AudioClip
from constants import (
    AUDIO_SAFETY_TIMEOUT_MS,
    CUE_GAP_MS,
    DIRECTION_PHRASES,
    SPEECH_SAFETY_TIMEOUT_MS,
)
from observability.logger import log_event
from orchestrator.enums.direction import Direction

SleepFn = Callable[[float], Awaitable[None]]
DowngradeFn = Callable[[Direction], Awaitable[None]]


class ClipPlayer(Protocol):
    async def play(self, clip: AudioClip) -> None: ...


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _consume_result(task: asyncio.Task[None]) -> None:
    # Playback outliving its safety timeout may still fail later
    if not task.cancelled() and task.exception() is not None:
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "late_playback_error",
            "error": repr(task.exception()),
        })


class NarrationPlayer:
    """Plays single cues and ordered cue sequences with audio/speech fallback."""

    def __init__(
        self,
        *,
        cues: CueSource,
        speech: SpeechSynthesizer,
        output: ClipPlayer,
        phrases: Mapping[Direction, str] = DIRECTION_PHRASES,
        cue_gap_ms: int = CUE_GAP_MS,
        speech_timeout_ms: int = SPEECH_SAFETY_TIMEOUT_MS,
        audio_timeout_ms: int = AUDIO_SAFETY_TIMEOUT_MS,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._cues = cues
        self._speech = speech
        self._output = output
        self._phrases = dict(phrases)
        self._cue_gap_s = cue_gap_ms / 1000.0
        self._speech_timeout_s = speech_timeout_ms / 1000.0
        self._audio_timeout_s = audio_timeout_ms / 1000.0
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def play_cue(
        self,
        direction: Direction,
        availability: MutableMapping[Direction, bool],
        on_downgrade: DowngradeFn | None = None,
    ) -> None:
        """Voice one cue; resolves once it is fully voiced (or bounded out)."""
        if not availability.get(direction, False):
            await self._speak(direction)
            return

        # A speech utterance that outlived its safety timeout must not
        # overlap the recorded cue
        await self._speech.cancel()

        try:
            clip = await self._cues.load(direction)
            await self._play_bounded(direction, clip)
        except CuePlaybackError as exc:
            reason = exc.reason
        except Exception as exc:  # pylint: disable=broad-exception-caught
            reason = f"{type(exc).__name__}: {exc}"
        else:
            return

        availability[direction] = False
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "cue_playback_failed",
            "direction": direction.value,
            "reason": reason,
        })
        if on_downgrade is not None:
            await on_downgrade(direction)
        await self._speak(direction)

    async def play_sequence(
        self,
        cues: Iterable[Direction],
        availability: MutableMapping[Direction, bool],
        on_downgrade: DowngradeFn | None = None,
    ) -> None:
        """Voice cues strictly in order, each followed by the inter-cue pause."""
        for direction in cues:
            await self.play_cue(direction, availability, on_downgrade)
            await self._sleep(self._cue_gap_s)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _play_bounded(self, direction: Direction, clip: AudioClip) -> None:
        task = asyncio.create_task(self._output.play(clip))
        done, _ = await asyncio.wait({task}, timeout=self._audio_timeout_s)
        if task in done:
            exc = task.exception()
            if exc is not None:
                raise CuePlaybackError(direction, f"{type(exc).__name__}: {exc}") from exc
            return

        task.add_done_callback(_consume_result)
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "audio_playback_timeout",
            "direction": direction.value,
        })

    async def _speak(self, direction: Direction) -> None:
        phrase = self._phrases[direction]

        # One utterance at a time: cut whatever the engine is still voicing
        await self._speech.cancel()

        task = asyncio.create_task(self._speech.speak(phrase))
        done, _ = await asyncio.wait({task}, timeout=self._speech_timeout_s)

        if task not in done:
            task.add_done_callback(_consume_result)
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "speech_timeout",
                "direction": direction.value,
            })
            return

        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "speech_failed",
                "direction": direction.value,
                "error": f"{type(exc).__name__}: {exc}",
            })
