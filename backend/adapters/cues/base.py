"""
Cue asset source contract.

This module defines the *interface only*: no fallback policy, no timeouts,
no availability caching live here.

Key invariants:
- Sources decode assets into PCM16 16kHz mono AudioClips.
- Every failure to produce a playable clip is reported as CuePlaybackError,
  never as a provider-specific exception.
- Sources never touch session state; NarrationPlayer decides what a
  failure means.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from audio.frames import AudioClip
from orchestrator.enums.direction import Direction


class CuePlaybackError(Exception):
    """A cue asset is missing, unreadable or cannot be played."""

    def __init__(self, direction: Direction, reason: str) -> None:
        super().__init__(f"{direction.value}: {reason}")
        self.direction = direction
        self.reason = reason


class CueSource(ABC):
    """
    Abstract provider of pre-recorded direction cues.

    Implementations are responsible for:
    - Locating the asset for a Direction
    - Decoding it into an AudioClip
    - Reporting failures as CuePlaybackError
    """

    @abstractmethod
    async def load(self, direction: Direction) -> AudioClip:
        """
        Return the playable clip for direction.

        Raises:
            CuePlaybackError if the asset cannot be played.
        """
        raise NotImplementedError

    async def can_play_through(self, direction: Direction) -> bool:
        """
        Check that direction's asset decodes to a non-empty clip.

        Used by the availability probe; callers bound it with a timeout.

        Raises:
            CuePlaybackError if the asset cannot be played.
        """
        clip = await self.load(direction)
        return len(clip.pcm_bytes) > 0
