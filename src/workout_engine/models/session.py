"""Workout definition models — Session → Block → Exercise.

The definition tree is owned by an external editor and consumed here as
read-only input. All three models are frozen; a running workout keeps its own
queue snapshot, so later edits to the library never reach an in-progress run.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field

from workout_engine.exceptions import InvalidDefinitionError
from workout_engine.models.enums import ExerciseKind


@dataclass(frozen=True)
class Exercise:
    """A single exercise inside a block.

    ``value`` is a rep count for REPS exercises and a number of seconds for
    DURATION exercises. ``member`` names the body part the value applies to
    (e.g. "leg" for "30 seconds per leg").
    """

    id: str
    name: str
    kind: ExerciseKind
    value: int
    member: str | None = None

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise InvalidDefinitionError(
                f"Exercise {self.id!r}: value must be positive, got {self.value}"
            )

    @property
    def is_timed(self) -> bool:
        return self.kind == ExerciseKind.DURATION


@dataclass(frozen=True)
class Block:
    """A named group of exercises repeated ``repetitions`` times.

    Pauses are in seconds:
        pause_between_exercises: after each exercise except the block's last.
        pause_between_repetitions: after each repetition except the last.
        pause_before_next_block: after the block, if another block follows.
    """

    id: str
    name: str
    repetitions: int = 1
    pause_between_repetitions: int = 0
    pause_between_exercises: int = 0
    pause_before_next_block: int = 0
    exercises: tuple[Exercise, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.repetitions < 1:
            raise InvalidDefinitionError(
                f"Block {self.id!r}: repetitions must be >= 1, got {self.repetitions}"
            )
        for name in (
            "pause_between_repetitions",
            "pause_between_exercises",
            "pause_before_next_block",
        ):
            if getattr(self, name) < 0:
                raise InvalidDefinitionError(
                    f"Block {self.id!r}: {name} must be >= 0"
                )

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    @property
    def is_empty(self) -> bool:
        return len(self.exercises) == 0


@dataclass(frozen=True)
class Session:
    """A complete workout definition."""

    id: str
    name: str
    blocks: tuple[Block, ...] = field(default_factory=tuple)
    duration_min: int | None = None   # advertised duration, informational
    created_at_ms: int | None = None
    updated_at_ms: int | None = None

    @property
    def exercise_count(self) -> int:
        """Exercises performed over the whole session, repetitions included."""
        return sum(b.repetitions * b.exercise_count for b in self.blocks)

    @property
    def is_empty(self) -> bool:
        return all(b.is_empty for b in self.blocks)


def session_signature(session: Session) -> str:
    """Stable fingerprint of the session's playback structure.

    Covers everything that shapes the action queue (repetitions, pauses,
    exercise ids, kinds and values). Names and members only change cue
    wording, so renaming an exercise does not invalidate a paused run.
    """
    structure = [
        [
            block.id,
            block.repetitions,
            block.pause_between_repetitions,
            block.pause_between_exercises,
            block.pause_before_next_block,
            [[ex.id, int(ex.kind), ex.value] for ex in block.exercises],
        ]
        for block in session.blocks
    ]
    payload = json.dumps(structure, separators=(",", ":"))
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()
