"""
BEHAVIOR-AS-CONSTANTS
---------------------
Single source of truth for all behavioral values of the trainer.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final, Mapping, Tuple

from orchestrator.enums.direction import Direction

# =============================================================================
# World geometry
# =============================================================================

GRID_SIZE: Final[float] = 5.0  # Distance of one block
TURN_ANGLE_DEG: Final[float] = 90.0

# Goal lands at the center of a cell, origin sits on a grid vertex
GOAL_CELL_OFFSET: Final[float] = GRID_SIZE / 2

ORIGIN_X: Final[float] = 0.0
ORIGIN_Z: Final[float] = 0.0
ORIGIN_ROTATION_DEG: Final[float] = 0.0

# =============================================================================
# Path generation
# =============================================================================

# 4-way draw: STRAIGHT occupies two of four equally likely outcomes
PATH_DRAW_TABLE: Final[Tuple[Direction, ...]] = (
    Direction.STRAIGHT,
    Direction.STRAIGHT,
    Direction.LEFT,
    Direction.RIGHT,
)

# =============================================================================
# Level catalog (id, command_count_per_step, total_steps)
# =============================================================================

LEVEL_CATALOG: Final[Tuple[Tuple[int, int, int], ...]] = (
    (1, 1, 8),
    (2, 2, 10),
    (3, 3, 12),
)

# =============================================================================
# Cue tables
# =============================================================================

DIRECTION_PHRASES: Final[Mapping[Direction, str]] = {
    Direction.STRAIGHT: "Go straight.",
    Direction.LEFT: "Turn left.",
    Direction.RIGHT: "Turn right.",
}

CUE_AUDIO_FILES: Final[Mapping[Direction, str]] = {
    Direction.STRAIGHT: "go-straight.mp3",
    Direction.LEFT: "turn-left.mp3",
    Direction.RIGHT: "turn-right.mp3",
}

SPEECH_VOICE_DEFAULT: Final[str] = "sarah"

# =============================================================================
# Timing
# =============================================================================

# Preload
PROBE_TIMEOUT_MS: Final[int] = 1_000
LOADING_MIN_DISPLAY_MS: Final[int] = 500

# Narration
CUE_GAP_MS: Final[int] = 400
SPEECH_SAFETY_TIMEOUT_MS: Final[int] = 3_000
AUDIO_SAFETY_TIMEOUT_MS: Final[int] = 4_000

# Step pacing (delay between step completion and next narration)
STEP_ADVANCE_DELAY_MS: Final[int] = 600

# =============================================================================
# Audio Format (PCM16 mono @ 16kHz, 20ms frames)
# =============================================================================

AUDIO_SAMPLE_RATE_HZ: Final[int] = 16_000
AUDIO_CHANNELS: Final[int] = 1
AUDIO_SAMPLE_WIDTH_BYTES: Final[int] = 2  # PCM16 (signed 16-bit)
AUDIO_FRAME_MS: Final[int] = 20

AUDIO_SAMPLES_PER_FRAME: Final[int] = (AUDIO_SAMPLE_RATE_HZ * AUDIO_FRAME_MS) // 1000
AUDIO_BYTES_PER_FRAME_PCM: Final[int] = AUDIO_SAMPLES_PER_FRAME * AUDIO_SAMPLE_WIDTH_BYTES
AUDIO_FRAME_DURATION_S: Final[float] = AUDIO_FRAME_MS / 1000.0

PROVIDER_CHUNK_SIZE: Final[int] = 4096

AUDIO_OUT_Q_MAX_S_DEFAULT: Final[float] = 10.0

# =============================================================================
# Helper Functions
# =============================================================================

def frames_to_seconds(num_frames: int) -> float:
    """
    Convert a number of PCM frames to duration in seconds.

    Defensive behavior:
    - Negative input returns 0.0 instead of propagating an error.
    """
    if num_frames <= 0:
        return 0.0
    return num_frames * AUDIO_FRAME_DURATION_S
