"""
Authoritative game status enumeration.

Rules:
- This enum defines ONLY the control-plane states of an attempt.
- No behavior, no helper methods, no side effects.
- Transitions are defined exclusively in the reducer.
"""

from __future__ import annotations

from enum import Enum


class GameStatus(str, Enum):
    """
    High-level deterministic states for a single level attempt.

    START:
        Level generated; waiting for the player to begin.

    LISTENING:
        Current step's cues are being (or are about to be) narrated.
        Input is ignored.

    MOVING:
        Narration finished; the only state in which input is accepted.

    SUCCESS / FAIL:
        Terminal for the attempt.
    """

    START = "START"
    LISTENING = "LISTENING"
    MOVING = "MOVING"
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"

