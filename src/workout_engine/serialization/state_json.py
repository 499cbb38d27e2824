"""ExecutionState ⇄ JSON-compatible dict.

The record uses the camelCase field names shared with other front-ends of
the tracker, so a paused run written by one host can be resumed by another.
"""

from __future__ import annotations

import json
from typing import Any

from workout_engine.exceptions import SerializationError
from workout_engine.models.execution_state import ExecutionState

# (attribute, record key, required)
_FIELDS: tuple[tuple[str, str, bool], ...] = (
    ("session_id", "sessionId", True),
    ("queue_index", "queueIndex", True),
    ("is_paused", "isPaused", False),
    ("paused_at_ms", "pausedAtEpochMs", False),
    ("timer_remaining_sec", "timerRemainingSec", False),
    ("timer_start_ms", "timerStartEpochMs", False),
    ("started_at_ms", "startedAtEpochMs", True),
    ("paused_total_ms", "pausedTotalMs", False),
    ("queue_signature", "queueSignature", False),
)

_INT_FIELDS = frozenset({
    "queue_index",
    "paused_at_ms",
    "timer_remaining_sec",
    "timer_start_ms",
    "started_at_ms",
    "paused_total_ms",
})


def execution_state_to_dict(state: ExecutionState) -> dict[str, Any]:
    """Convert an ExecutionState to its persisted record."""
    return {key: getattr(state, attr) for attr, key, _ in _FIELDS}


def execution_state_from_dict(data: dict[str, Any]) -> ExecutionState:
    """Rebuild an ExecutionState from a persisted record.

    Raises:
        SerializationError: If required keys are missing or values have the
            wrong type.
    """
    if not isinstance(data, dict):
        raise SerializationError(f"Expected an object, got {type(data).__name__}")

    kwargs: dict[str, Any] = {}
    for attr, key, required in _FIELDS:
        if key not in data or data[key] is None:
            if required:
                raise SerializationError(f"Missing required field {key!r}")
            continue
        value = data[key]
        if attr in _INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SerializationError(f"Field {key!r} must be a number, got {value!r}")
            value = int(value)
        elif attr == "is_paused":
            value = bool(value)
        else:
            value = str(value)
        kwargs[attr] = value

    if kwargs["queue_index"] < 0:
        raise SerializationError("Field 'queueIndex' must be >= 0")
    return ExecutionState(**kwargs)


def execution_state_to_json_string(state: ExecutionState, indent: int = 2) -> str:
    """Serialize an ExecutionState to a JSON string."""
    return json.dumps(execution_state_to_dict(state), indent=indent)
