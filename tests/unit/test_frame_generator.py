# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from audio.frame_generator import frame_size_bytes, split_pcm_into_frames
from constants import AUDIO_BYTES_PER_FRAME_PCM


def test_correct_bytes_per_frame():
    # 3 full frames
    pcm = b"\x00" * (AUDIO_BYTES_PER_FRAME_PCM * 3)

    frames = split_pcm_into_frames(pcm)

    assert len(frames) == 3
    for frame in frames:
        assert len(frame) == AUDIO_BYTES_PER_FRAME_PCM


def test_drops_incomplete_trailing_frame():
    pcm = b"\x00" * (AUDIO_BYTES_PER_FRAME_PCM * 2 + 10)

    frames = split_pcm_into_frames(pcm)

    assert len(frames) == 2
    for frame in frames:
        assert len(frame) == AUDIO_BYTES_PER_FRAME_PCM


def test_empty_input_returns_no_frames():
    frames = split_pcm_into_frames(b"")
    assert frames == []


def test_frames_preserve_byte_order():
    pcm = bytes(range(256)) * 5

    frames = split_pcm_into_frames(pcm)

    assert b"".join(frames) == pcm[: len(frames) * AUDIO_BYTES_PER_FRAME_PCM]


def test_default_frame_size_matches_constant():
    assert frame_size_bytes() == AUDIO_BYTES_PER_FRAME_PCM


def test_invalid_format_raises():
    with pytest.raises(ValueError):
        split_pcm_into_frames(b"\x00" * 640, sample_rate_hz=0)

    with pytest.raises(ValueError):
        frame_size_bytes(channels=0)
