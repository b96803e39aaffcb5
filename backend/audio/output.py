"""
Paced audio output.

Responsibilities:
- Split a clip into 20ms frames and enqueue them for presentation
- Resolve only once the clip has had time to be voiced (real-time pacing)
- Support clearing queued audio when an utterance is cancelled

Non-responsibilities:
- No decoding, no fallback policy, no timeouts (NarrationPlayer owns those)
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from audio.frame_generator import split_pcm_into_frames
from audio.frames import AudioClip, AudioFrame
from audio.queues import AudioFrameQueue
from constants import frames_to_seconds
from observability.logger import log_event

SleepFn = Callable[[float], Awaitable[None]]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class QueuedAudioOutput:
    """
    Audio sink backed by an AudioFrameQueue.

    play() enqueues every frame of the clip up front, then sleeps for the
    clip's duration so callers observe "fully voiced" semantics.
    """

    def __init__(
        self,
        queue: AudioFrameQueue,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._queue = queue
        self._sleep = sleep
        self._next_seq = 1

    async def play(self, clip: AudioClip) -> None:
        frames = split_pcm_into_frames(clip.pcm_bytes)
        dropped = 0
        for pcm in frames:
            frame = AudioFrame(
                sequence_num=self._next_seq,
                pcm_bytes=pcm,
                ts_ms=_now_ms(),
                clip_id=clip.clip_id,
            )
            self._next_seq += 1
            if not self._queue.enqueue(frame):
                dropped += 1

        if dropped:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "audio_out_overflow",
                "clip_id": clip.clip_id,
                "dropped_frames": dropped,
                "queue": self._queue.snapshot(),
            })

        await self._sleep(frames_to_seconds(len(frames)))

    def clear(self) -> None:
        self._queue.clear()
