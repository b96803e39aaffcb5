"""
Narration output queue.

Frames of voiced cues wait here until presentation pulls them. Depth is
measured in seconds of audio; a frame that would push the queue past its
limit is refused (the newest audio is dropped, queued audio is kept).
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from audio.frames import AudioFrame
from constants import AUDIO_FRAME_DURATION_S


class AudioFrameQueue:
    """Bounded FIFO of AudioFrames; synchronous and single-loop."""

    def __init__(self, *, max_depth_s: float) -> None:
        if max_depth_s <= 0:
            raise ValueError("max_depth_s must be > 0")

        self._max_depth_s = max_depth_s
        self._frames: Deque[AudioFrame] = deque()
        self.dropped_overflow = 0

    # -------------------------
    # Producer side
    # -------------------------

    def enqueue(self, frame: AudioFrame) -> bool:
        """Append frame; returns False (and counts a drop) when full."""
        if self.depth_seconds() + AUDIO_FRAME_DURATION_S > self._max_depth_s:
            self.dropped_overflow += 1
            return False
        self._frames.append(frame)
        return True

    def clear(self) -> None:
        """Discard queued audio of a cancelled utterance (not counted as drops)."""
        self._frames.clear()

    # -------------------------
    # Consumer side
    # -------------------------

    def dequeue(self) -> Optional[AudioFrame]:
        return self._frames.popleft() if self._frames else None

    def peek(self) -> Optional[AudioFrame]:
        return self._frames[0] if self._frames else None

    def drain(self) -> list[AudioFrame]:
        """Remove and return every queued frame, oldest first."""
        frames = list(self._frames)
        self._frames.clear()
        return frames

    # -------------------------
    # Introspection
    # -------------------------

    def __len__(self) -> int:
        return len(self._frames)

    def is_empty(self) -> bool:
        return not self._frames

    def depth_seconds(self) -> float:
        return len(self._frames) * AUDIO_FRAME_DURATION_S

    def snapshot(self) -> dict[str, float | int]:
        """Queue stats for log lines."""
        return {
            "frames": len(self._frames),
            "depth_s": self.depth_seconds(),
            "dropped_overflow": self.dropped_overflow,
        }
