"""PCM conversion utilities."""
import numpy as np

from constants import AUDIO_SAMPLE_RATE_HZ


def float32_to_pcm16le(samples: np.ndarray) -> bytes:
    """Convert float samples in [-1.0, 1.0] to PCM16 little-endian bytes (clipped)."""
    clipped = np.clip(samples, -1.0, 1.0)
    return (clipped * 32767.0).astype("<i2").tobytes()


def downmix_to_mono(samples: np.ndarray) -> np.ndarray:
    """Average channels of a (frames, channels) array; 1-D input passes through."""
    if samples.ndim == 1:
        return samples
    return samples.mean(axis=1)


def resample_linear(
    samples: np.ndarray,
    *,
    src_rate_hz: int,
    dst_rate_hz: int = AUDIO_SAMPLE_RATE_HZ,
) -> np.ndarray:
    """
    Resample mono audio by linear interpolation.

    Good enough for short spoken cues; not a general-purpose resampler.
    """
    if src_rate_hz <= 0:
        raise ValueError("src_rate_hz must be > 0")
    if src_rate_hz == dst_rate_hz or samples.size == 0:
        return samples.astype(np.float32)

    duration_s = samples.size / src_rate_hz
    dst_len = max(1, int(round(duration_s * dst_rate_hz)))
    src_t = np.arange(samples.size) / src_rate_hz
    dst_t = np.arange(dst_len) / dst_rate_hz
    return np.interp(dst_t, src_t, samples).astype(np.float32)
