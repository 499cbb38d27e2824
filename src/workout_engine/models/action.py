"""Action — one step of a flattened workout queue."""

from __future__ import annotations

from dataclasses import dataclass

from workout_engine.models.enums import PAUSE_KINDS, ActionKind, ExerciseKind
from workout_engine.models.session import Block, Exercise


@dataclass(frozen=True)
class Action:
    """A single scheduled exercise or pause.

    Coordinates follow the kind:
        EXERCISE: the exercise's own block, repetition (1-indexed) and index.
        PAUSE_BETWEEN_EXERCISES: same block/repetition, index of the *next*
            exercise.
        PAUSE_BETWEEN_REPETITIONS: same block, the *next* repetition, index 0.
        PAUSE_BEFORE_BLOCK: the *next* block, repetition 1, index 0.

    A pause and the exercise that follows it share coordinates, so a position
    in the queue is only ever identified by its queue index.
    """

    kind: ActionKind
    block_index: int
    block_repetition: int
    exercise_index: int
    block_repetitions: int = 1             # total repetitions of the block
    exercise: Exercise | None = None       # EXERCISE only
    duration_sec: int = 0                  # pauses only
    next_exercise: Exercise | None = None  # pauses only
    next_block: Block | None = None        # PAUSE_BEFORE_BLOCK only

    @property
    def is_pause(self) -> bool:
        return self.kind in PAUSE_KINDS

    @property
    def is_timed(self) -> bool:
        """True if the action ends by countdown rather than manual completion."""
        if self.is_pause:
            return True
        return self.exercise is not None and self.exercise.kind == ExerciseKind.DURATION

    @property
    def requires_manual_completion(self) -> bool:
        return (
            self.kind == ActionKind.EXERCISE
            and self.exercise is not None
            and self.exercise.kind == ExerciseKind.REPS
        )

    @property
    def timer_duration_sec(self) -> int | None:
        """Countdown length in seconds, or None for REPS exercises."""
        if self.is_pause:
            return self.duration_sec
        if self.is_timed:
            return self.exercise.value  # type: ignore[union-attr]
        return None
