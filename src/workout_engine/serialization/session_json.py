"""Session definition documents ⇄ Session models.

Reads two shapes:

- current: ``exercises``, ``kind``, ``pauseBetweenRepetitions``,
  ``pauseBetweenExercises``, ``pauseBeforeNextBlock``;
- legacy export: ``exos``, ``type: "reps" | "duration"``, ``betweenExos``
  and a single ``pause`` used both between repetitions and before the next
  block.

All functions are pure except ``load_sessions`` (file read).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from workout_engine.exceptions import InvalidDefinitionError, SerializationError
from workout_engine.models.enums import ExerciseKind
from workout_engine.models.session import Block, Exercise, Session

_KIND_NAMES = {
    "reps": ExerciseKind.REPS,
    "duration": ExerciseKind.DURATION,
}


def exercise_from_dict(data: dict[str, Any], fallback_id: str = "") -> Exercise:
    raw_kind = data.get("kind", data.get("type"))
    kind = _KIND_NAMES.get(str(raw_kind).lower()) if raw_kind is not None else None
    if kind is None:
        raise SerializationError(f"Unknown exercise kind {raw_kind!r}")
    member = data.get("member") or None
    return Exercise(
        id=str(data.get("id") or fallback_id),
        name=str(data["name"]),
        kind=kind,
        value=_as_int(data["value"], "value"),
        member=str(member) if member is not None else None,
    )


def block_from_dict(data: dict[str, Any], fallback_id: str = "") -> Block:
    block_id = str(data.get("id") or fallback_id)
    raw_exercises = data.get("exercises", data.get("exos", []))
    exercises = tuple(
        exercise_from_dict(ex, fallback_id=f"{block_id}-ex{i}")
        for i, ex in enumerate(raw_exercises)
    )

    # Legacy documents have one "pause" for both repetition and block breaks
    legacy_pause = _as_int(data.get("pause", 0), "pause")
    return Block(
        id=block_id,
        name=str(data.get("name", "")),
        repetitions=_as_int(data.get("repetitions", 1), "repetitions"),
        pause_between_repetitions=_as_int(
            data.get("pauseBetweenRepetitions", legacy_pause), "pauseBetweenRepetitions",
        ),
        pause_between_exercises=_as_int(
            data.get("pauseBetweenExercises", data.get("betweenExos", 0)),
            "pauseBetweenExercises",
        ),
        pause_before_next_block=_as_int(
            data.get("pauseBeforeNextBlock", legacy_pause), "pauseBeforeNextBlock",
        ),
        exercises=exercises,
    )


def session_from_dict(data: dict[str, Any]) -> Session:
    """Build a Session from a definition document.

    Raises:
        SerializationError: On missing keys, wrong types or values the
            models reject.
    """
    if not isinstance(data, dict):
        raise SerializationError(f"Expected an object, got {type(data).__name__}")
    try:
        session_id = str(data["id"])
        blocks = tuple(
            block_from_dict(b, fallback_id=f"{session_id}-b{i}")
            for i, b in enumerate(data.get("blocks", []))
        )
        duration = data.get("duration", data.get("durationMin"))
        return Session(
            id=session_id,
            name=str(data.get("name", "")),
            blocks=blocks,
            duration_min=_as_int(duration, "duration") if duration else None,
            created_at_ms=_optional_int(data.get("createdAt")),
            updated_at_ms=_optional_int(data.get("updatedAt")),
        )
    except SerializationError:
        raise
    except KeyError as exc:
        raise SerializationError(f"Missing required field {exc.args[0]!r}") from exc
    except (InvalidDefinitionError, TypeError, AttributeError) as exc:
        raise SerializationError(f"Invalid session {data.get('id')!r}: {exc}") from exc


def session_to_dict(session: Session) -> dict[str, Any]:
    """Convert a Session to a definition document (current shape)."""
    result: dict[str, Any] = {
        "id": session.id,
        "name": session.name,
        "blocks": [
            {
                "id": block.id,
                "name": block.name,
                "repetitions": block.repetitions,
                "pauseBetweenRepetitions": block.pause_between_repetitions,
                "pauseBetweenExercises": block.pause_between_exercises,
                "pauseBeforeNextBlock": block.pause_before_next_block,
                "exercises": [_exercise_to_dict(ex) for ex in block.exercises],
            }
            for block in session.blocks
        ],
    }
    if session.duration_min is not None:
        result["duration"] = session.duration_min
    if session.created_at_ms is not None:
        result["createdAt"] = session.created_at_ms
    if session.updated_at_ms is not None:
        result["updatedAt"] = session.updated_at_ms
    return result


def load_sessions(path: Path | str) -> list[Session]:
    """Load a list of sessions from a JSON file.

    Accepts either a top-level list or an object with a ``sessions`` list.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"{path}: invalid JSON ({exc})") from exc

    if isinstance(data, dict):
        data = data.get("sessions", [])
    if not isinstance(data, list):
        raise SerializationError(f"{path}: expected a list of sessions")
    return [session_from_dict(item) for item in data]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": exercise.id,
        "name": exercise.name,
        "kind": exercise.kind.name.lower(),
        "value": exercise.value,
    }
    if exercise.member:
        result["member"] = exercise.member
    return result


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise SerializationError(f"Field {field_name!r} must be a number, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Field {field_name!r} must be a number, got {value!r}"
        ) from exc


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return _as_int(value, "timestamp")
