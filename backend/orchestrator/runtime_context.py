"""
Runtime execution context.

Provides Runtime with live access to session-owned imperative resources
needed for command execution and side effects (narration, probe, randomness).

This module contains:
- Narrow Protocols (capabilities, not implementations)
- Zero orchestration logic
- Zero state mutation
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, MutableMapping, Protocol, runtime_checkable

from orchestrator.enums.direction import Direction
from orchestrator.path_generator import RandomSource


SleepFn = Callable[[float], Awaitable[None]]


# ---------------------------------------------------------------------
# Capability Protocols
# ---------------------------------------------------------------------

@runtime_checkable
class NarratorProtocol(Protocol):
    """
    Cue sequence player.

    Contract:
    - play_sequence() never voices two cues concurrently
    - downgrades are written into availability AND reported via on_downgrade
    """

    async def play_sequence(
        self,
        cues: Iterable[Direction],
        availability: MutableMapping[Direction, bool],
        on_downgrade: Callable[[Direction], Awaitable[None]] | None = None,
    ) -> None: ...


@runtime_checkable
class ProbeProtocol(Protocol):
    """Per-attempt audio availability check. Must never raise."""

    async def probe(
        self,
        directions: Iterable[Direction] = ...,
    ) -> dict[Direction, bool]: ...


# ---------------------------------------------------------------------
# Context container
# ---------------------------------------------------------------------

@dataclass
class RuntimeExecutionContext:
    """
    Everything Runtime needs to execute commands.

    sleep is injected so timers and pacing can run instantly in tests.
    """
    session_id: str
    narrator: NarratorProtocol
    probe: ProbeProtocol
    rng: RandomSource
    sleep: SleepFn = asyncio.sleep
