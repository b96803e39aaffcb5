# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from enum import Enum
from typing import Any

import pytest

from observability import logger, metrics
from orchestrator.enums.status import GameStatus


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lines: list[str] = []
    # Patch the explicit output sink used by logger
    monkeypatch.setattr(logger, "_print", lines.append)
    return lines


def test_log_event_emits_valid_jsonl(captured: list[str]) -> None:
    """
    - log_event emits exactly one JSONL line
    - payload is serialized as-is
    - output sink is patchable
    """
    payload: dict[str, Any] = {
        "ts_ms": 5,
        "event_type": "TEST",
        "value": 123,
    }

    logger.log_event(payload)

    assert len(captured) == 1
    assert json.loads(captured[0]) == payload


def test_log_event_fills_missing_timestamp(captured: list[str]) -> None:
    logger.log_event({"event_type": "TEST"})

    decoded = json.loads(captured[0])
    assert isinstance(decoded["ts_ms"], int)


def test_enums_serialize_by_value(captured: list[str]) -> None:
    logger.log_event({"ts_ms": 1, "status": GameStatus.MOVING})

    assert json.loads(captured[0])["status"] == "MOVING"


def test_unserializable_event_never_raises(captured: list[str]) -> None:
    class Opaque(Enum):
        THING = object()

    logger.log_event({"ts_ms": 1, "event_type": "TEST", "blob": Opaque.THING})

    decoded = json.loads(captured[0])
    assert decoded["event_type"] == "LOGGER_SERIALIZATION_ERROR"
    assert decoded["ts_ms"] == 1


def test_timed_emits_one_metric_even_on_error(captured: list[str]) -> None:
    with pytest.raises(RuntimeError):
        with metrics.timed("narration_ms", session_id="s1", details={"cues": 2}):
            raise RuntimeError("boom")

    (line,) = captured
    decoded = json.loads(line)
    assert decoded["event_type"] == "METRIC_TIMER"
    assert decoded["metric"] == "narration_ms"
    assert decoded["session_id"] == "s1"
    assert decoded["value_ms"] >= 0


def test_emit_timing_writes_metric_line(captured: list[str]) -> None:
    metrics.emit_timing("preload_ms", 512, state="START")

    decoded = json.loads(captured[0])
    assert decoded["metric"] == "preload_ms"
    assert decoded["value_ms"] == 512
    assert decoded["state"] == "START"
    assert decoded["details"] == {}
