"""
Speech synthesis contract (narration fallback voice).

This module defines the *interface only*: no fallback policy, no safety
timeouts and no availability decisions live here.

Key invariants:
- speak() resolves once the utterance has been fully voiced.
- Failures are raised; the NarrationPlayer treats any failure as
  "cue delivered" and moves on.
- cancel() stops the in-flight utterance (if any) so a new one can start;
  at most one utterance is voiced at a time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SpeechSynthesizer(ABC):
    """
    Abstract interface for a text-to-speech voice.

    Implementations are responsible for:
    - Turning a short phrase into audio
    - Voicing it through the session's audio output
    - Supporting cancellation via cancel()

    Non-responsibilities:
    - No timeouts (callers bound waits)
    - No state machine logic
    """

    @abstractmethod
    async def speak(self, text: str) -> None:
        """
        Voice text and resolve when playback has finished.

        Contract:
        - Raises on synthesis or playback failure.
        - MUST NOT retry internally.
        """
        raise NotImplementedError

    @abstractmethod
    async def cancel(self) -> None:
        """
        Stop the in-flight utterance, if any.

        Contract:
        - Idempotent: safe to call when nothing is being voiced.
        - After cancel() returns, no audio from the cancelled utterance
          remains queued for output.
        """
        raise NotImplementedError
