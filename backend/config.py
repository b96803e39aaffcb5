"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No orchestration logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import AUDIO_OUT_Q_MAX_S_DEFAULT, SPEECH_VOICE_DEFAULT


def _optional_int(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed to the session factory.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str

    # ------------------------------------------------------------------
    # Cues
    # ------------------------------------------------------------------

    cue_asset_dir: str

    # ------------------------------------------------------------------
    # Speech fallback (TTS)
    # ------------------------------------------------------------------

    speechmatics_api_key: str | None
    speechmatics_voice: str

    # ------------------------------------------------------------------
    # Gameplay
    # ------------------------------------------------------------------

    # None -> nondeterministic paths; an int makes every session reproducible
    rng_seed: int | None
    start_level: int

    # ------------------------------------------------------------------
    # Audio output
    # ------------------------------------------------------------------

    audio_out_max_depth_s: float

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable cannot be parsed.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            cue_asset_dir=os.environ.get("CUE_ASSET_DIR", "assets"),
            speechmatics_api_key=os.environ.get("SPEECHMATICS_API_KEY"),
            speechmatics_voice=os.environ.get("SPEECHMATICS_VOICE", SPEECH_VOICE_DEFAULT),
            rng_seed=_optional_int(os.environ.get("RNG_SEED")),
            start_level=int(os.environ.get("START_LEVEL", "1")),
            audio_out_max_depth_s=float(
                os.environ.get("AUDIO_OUT_MAX_DEPTH_S", str(AUDIO_OUT_Q_MAX_S_DEFAULT))
            ),
        )
