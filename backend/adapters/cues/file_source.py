"""
File-backed cue source.

Decodes cue assets from a directory with soundfile (libsndfile) and
normalizes them to PCM16 16kHz mono.

Concurrency:
- Decoding is blocking; it runs in a worker thread via asyncio.to_thread.
- Decoded clips are cached per source instance. A source is created per
  session, so a cached clip never outlives the session.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Mapping

import soundfile as sf  # pyright: ignore[reportMissingTypeStubs]

from adapters.cues.base import CuePlaybackError, CueSource
from audio.frames import AudioClip
from audio.pcm import downmix_to_mono, float32_to_pcm16le, resample_linear
from constants import AUDIO_SAMPLE_RATE_HZ, CUE_AUDIO_FILES
from orchestrator.enums.direction import Direction


class FileCueSource(CueSource):
    """Cue source reading one audio file per Direction from asset_dir."""

    def __init__(
        self,
        asset_dir: str | Path,
        *,
        files: Mapping[Direction, str] = CUE_AUDIO_FILES,
    ) -> None:
        self._asset_dir = Path(asset_dir)
        self._files = dict(files)
        self._clips: dict[Direction, AudioClip] = {}

    def path_for(self, direction: Direction) -> Path:
        return self._asset_dir / self._files[direction]

    async def load(self, direction: Direction) -> AudioClip:
        cached = self._clips.get(direction)
        if cached is not None:
            return cached

        clip = await asyncio.to_thread(self._decode, direction)
        self._clips[direction] = clip
        return clip

    def _decode(self, direction: Direction) -> AudioClip:
        path = self.path_for(direction)
        if not path.is_file():
            raise CuePlaybackError(direction, f"asset not found: {path}")

        try:
            samples, sample_rate = sf.read(str(path), dtype="float32", always_2d=True)
        except (sf.LibsndfileError, RuntimeError, OSError) as exc:
            raise CuePlaybackError(direction, f"{type(exc).__name__}: {exc}") from exc

        mono = downmix_to_mono(samples)
        if mono.size == 0:
            raise CuePlaybackError(direction, f"asset is empty: {path}")

        resampled = resample_linear(
            mono,
            src_rate_hz=int(sample_rate),
            dst_rate_hz=AUDIO_SAMPLE_RATE_HZ,
        )
        return AudioClip(
            clip_id=f"cue:{direction.value}",
            pcm_bytes=float32_to_pcm16le(resampled),
        )
