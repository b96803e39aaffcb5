"""
Audio primitives.

Pure data containers only.
No behavior, no queues, no timing logic.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class AudioFrame:
    """
    Canonical audio frame used on the narration output path.

    sequence_num:
        Monotonic sequence number assigned by the audio output.
        Used for gap detection and debugging only.

    pcm_bytes:
        Raw PCM16 audio bytes.
        Length MUST equal constants.AUDIO_BYTES_PER_FRAME_PCM.

    ts_ms:
        Wall-clock timestamp (milliseconds) when the frame was produced.
        Used for observability only (not control logic).

    clip_id:
        Identifier of the clip (cue or utterance) the frame belongs to.
    """
    sequence_num: int
    pcm_bytes: bytes
    ts_ms: int
    clip_id: str = ""


@dataclass(frozen=True)
class AudioClip:
    """
    A fully decoded, playable piece of audio (one cue or one utterance).

    pcm_bytes is PCM16 little-endian mono at constants.AUDIO_SAMPLE_RATE_HZ.
    """
    clip_id: str
    pcm_bytes: bytes
