"""
Speechmatics speech synthesizer.

Implements the narration fallback voice using the Speechmatics TTS API.

Role in the system:
- Receives a short cue phrase from the NarrationPlayer.
- Performs one synthesis call per phrase (raw PCM16 16kHz output).
- Voices the result through the session's audio output.

Architectural constraints:
- No retries, timers or fallback logic live in this adapter.
- No state machine transitions or orchestration decisions.

Concurrency & cancellation:
- One asyncio task per utterance; speak() awaits it.
- cancel() cancels that task and clears queued output.
"""
from __future__ import annotations

import asyncio
import time

from speechmatics.tts import AsyncClient, OutputFormat, Voice # pyright: ignore[reportMissingTypeStubs] # pylint: disable=no-name-in-module, import-error

from adapters.tts.base import SpeechSynthesizer
from audio.frames import AudioClip
from audio.output import QueuedAudioOutput
from constants import PROVIDER_CHUNK_SIZE, SPEECH_VOICE_DEFAULT
from observability.logger import log_event


class SpeechmaticsSpeechSynthesizer(SpeechSynthesizer):
    """
    Speechmatics-backed fallback voice.

    Design:
    - Synthesis collects the whole PCM response (cue phrases are short)
    - Playback goes through the same paced output as recorded cues
    """

    _VOICE_MAP: dict[str, Voice] = {
        "sarah": Voice.SARAH,
        "theo": Voice.THEO,
        "megan": Voice.MEGAN,
    }

    def __init__(
        self,
        *,
        api_key: str,
        output: QueuedAudioOutput,
        session_id: str,
        voice: str = SPEECH_VOICE_DEFAULT,
    ) -> None:
        self._api_key = api_key
        self._output = output
        self._session_id = session_id
        self._voice = self._resolve_voice(voice)
        self._utterance_seq = 0
        self._task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Public API (SpeechSynthesizer contract)
    # ------------------------------------------------------------------

    async def speak(self, text: str) -> None:
        self._utterance_seq += 1
        task = asyncio.create_task(self._run_utterance(self._utterance_seq, text))
        self._task = task
        try:
            await task
        finally:
            if self._task is task:
                self._task = None

    async def cancel(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._output.clear()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _run_utterance(self, seq: int, text: str) -> None:
        t0 = time.monotonic_ns()
        pcm = await self._synthesize(text)

        log_event({
            "ts_ms": self._now_ms(),
            "event_type": "speech_synthesized",
            "session_id": self._session_id,
            "utterance": seq,
            "chars": len(text),
            "pcm_bytes": len(pcm),
            "synth_ms": (time.monotonic_ns() - t0) // 1_000_000,
        })

        await self._output.play(AudioClip(clip_id=f"speech:{seq}", pcm_bytes=pcm))

    async def _synthesize(self, text: str) -> bytes:
        carry = b""
        pcm = bytearray()

        async with AsyncClient(api_key=self._api_key) as client:
            async with await client.generate(
                text=text,
                voice=self._voice,
                output_format=OutputFormat.RAW_PCM_16000,
            ) as response:
                async for chunk in response.content.iter_chunked(PROVIDER_CHUNK_SIZE):
                    data = carry + chunk

                    # Keep PCM16 sample alignment across provider chunks
                    if len(data) % 2 == 1:
                        carry = data[-1:]
                        data = data[:-1]
                    else:
                        carry = b""

                    pcm.extend(data)

        return bytes(pcm)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @classmethod
    def _resolve_voice(cls, voice: str) -> Voice:
        """
        Convert user-facing voice string to Speechmatics Voice enum.

        Defaults to SARAH if unknown.
        """
        return cls._VOICE_MAP.get(voice.lower(), Voice.SARAH)

    @staticmethod
    def _now_ms() -> int:
        """Wall-clock timestamp in milliseconds (coarse)."""
        return int(time.time() * 1000)
