"""
Session bootstrap.

Wires concrete adapters (file cues, Speechmatics voice, queued audio
output, random source) into a TrainerSession. Tests build sessions with
fakes through build_runtime() instead.
"""

from __future__ import annotations

import asyncio
import random
import uuid

from adapters.cues.file_source import FileCueSource
from adapters.tts.speechmatics import SpeechmaticsSpeechSynthesizer
from audio.output import QueuedAudioOutput
from audio.queues import AudioFrameQueue
from config import AppConfig
from narration.player import NarrationPlayer
from narration.probe import AvailabilityProbe
from observability.logger import log_event
from orchestrator.path_generator import RandomSource
from orchestrator.runtime import Runtime
from orchestrator.runtime_context import (
    NarratorProtocol,
    ProbeProtocol,
    RuntimeExecutionContext,
    SleepFn,
)
from orchestrator.state_dataclass import SessionState
from session.trainer_session import TrainerSession



def build_runtime(
    *,
    session_id: str,
    narrator: NarratorProtocol,
    probe: ProbeProtocol,
    rng: RandomSource,
    sleep: SleepFn = asyncio.sleep,
) -> Runtime:
    """Create a runtime over a blank session state."""
    return Runtime(
        initial_state=SessionState(),
        context=RuntimeExecutionContext(
            session_id=session_id,
            narrator=narrator,
            probe=probe,
            rng=rng,
            sleep=sleep,
        ),
    )


def build_session(config: AppConfig, *, session_id: str | None = None) -> TrainerSession:
    """
    Build a fully wired session from configuration.

    The caller still has to `await session.start()`, which opens
    config.start_level.

    Raises:
        RuntimeError if the speech fallback has no API key.
    """
    if not config.speechmatics_api_key:
        raise RuntimeError("SPEECHMATICS_API_KEY environment variable not set")

    session_id = session_id or uuid.uuid4().hex
    queue = AudioFrameQueue(max_depth_s=config.audio_out_max_depth_s)
    output = QueuedAudioOutput(queue)
    cues = FileCueSource(config.cue_asset_dir)
    speech = SpeechmaticsSpeechSynthesizer(
        api_key=config.speechmatics_api_key,
        output=output,
        session_id=session_id,
        voice=config.speechmatics_voice,
    )

    runtime = build_runtime(
        session_id=session_id,
        narrator=NarrationPlayer(cues=cues, speech=speech, output=output),
        probe=AvailabilityProbe(cues),
        rng=random.Random(config.rng_seed),
    )

    log_event({
        "event_type": "session_created",
        "session_id": session_id,
        "env": config.env,
        "cue_asset_dir": config.cue_asset_dir,
        "seeded": config.rng_seed is not None,
    })

    return TrainerSession(
        session_id=session_id,
        runtime=runtime,
        audio_out_queue=queue,
        start_level=config.start_level,
    )
