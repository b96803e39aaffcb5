"""
Direction vocabulary.

Rules:
- Closed set: no additional variants.
- Shared by path generation, narration, movement and input.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    """One symbolic navigation command (a single cue)."""

    STRAIGHT = "STRAIGHT"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
