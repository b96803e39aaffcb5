"""
Timing metrics.

- One measurement = one METRIC_TIMER log line (no aggregation)
- Durations come from the monotonic clock; ts_ms is wall-clock for correlation
- Measure with `timed()`; it emits even when the measured block raises
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event


def emit_timing(
    name: str,
    value_ms: int,
    *,
    session_id: str | None = None,
    state: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Write a single timing measurement."""
    log_event({
        "ts_ms": time.time_ns() // 1_000_000,
        "event_type": "METRIC_TIMER",
        "metric": name,
        "value_ms": value_ms,
        "session_id": session_id,
        "state": state,
        "details": details or {},
    })


@contextmanager
def timed(
    name: str,
    *,
    session_id: str | None = None,
    state: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[None]:
    """
    Measure the enclosed block.

    Usage:
        with timed("preload_ms", session_id=session_id):
            await probe.probe()
    """
    start_ns = time.monotonic_ns()
    try:
        yield
    finally:
        emit_timing(
            name,
            (time.monotonic_ns() - start_ns) // 1_000_000,
            session_id=session_id,
            state=state,
            details=details,
        )
