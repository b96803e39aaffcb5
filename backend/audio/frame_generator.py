"""
PCM framing (pure).

Decoded cues and synthesized utterances are cut into fixed 20ms PCM16
mono 16kHz frames before they go onto the AudioFrameQueue. A trailing
partial frame is dropped; at 20ms it is inaudible.
"""

from __future__ import annotations

from constants import (
    AUDIO_CHANNELS,
    AUDIO_FRAME_MS,
    AUDIO_SAMPLE_RATE_HZ,
    AUDIO_SAMPLE_WIDTH_BYTES,
)


def frame_size_bytes(
    *,
    sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
    frame_duration_ms: int = AUDIO_FRAME_MS,
    channels: int = AUDIO_CHANNELS,
    sample_width_bytes: int = AUDIO_SAMPLE_WIDTH_BYTES,
) -> int:
    """
    Bytes in one frame of the given format.

    Raises:
        ValueError if the format cannot produce a non-empty frame.
    """
    size = (sample_rate_hz * frame_duration_ms // 1000) * channels * sample_width_bytes
    if min(sample_rate_hz, frame_duration_ms, channels, sample_width_bytes) <= 0 or size <= 0:
        raise ValueError(
            "invalid PCM format: "
            f"rate={sample_rate_hz} frame_ms={frame_duration_ms} "
            f"channels={channels} width={sample_width_bytes}"
        )
    return size


def split_pcm_into_frames(pcm_bytes: bytes, **pcm_format: int) -> list[bytes]:
    """
    Split raw PCM16 bytes into whole frames.

    pcm_format overrides the frame_size_bytes() defaults.
    """
    size = frame_size_bytes(**pcm_format)
    usable = len(pcm_bytes) - len(pcm_bytes) % size
    return [pcm_bytes[i : i + size] for i in range(0, usable, size)]
