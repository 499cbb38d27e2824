"""Spoken cue texts — one English announcement per action kind.

Each entry is a ``str.format`` template; the fields are filled from the
action in ``cue_text``.
"""

from __future__ import annotations

from workout_engine.models.action import Action
from workout_engine.models.enums import ActionKind, ExerciseKind

COMPLETION_CUE = "Workout complete."

# ---------------------------------------------------------------------------
# Template lookup: (ActionKind, ExerciseKind | None) -> announcement
# Pauses use None for the exercise kind.
# ---------------------------------------------------------------------------

_TEMPLATES: dict[tuple[ActionKind, ExerciseKind | None], str] = {
    (ActionKind.EXERCISE, ExerciseKind.DURATION): (
        "Do {name} for {value} {seconds}{member}."
    ),
    (ActionKind.EXERCISE, ExerciseKind.REPS): (
        "Do {name} {value} {times}{member}, then confirm completion."
    ),
    (ActionKind.PAUSE_BETWEEN_EXERCISES, None): (
        "Pause for {duration} {seconds} before {next_exercise}. Get ready."
    ),
    (ActionKind.PAUSE_BETWEEN_REPETITIONS, None): (
        "Well done, pause for {duration} {seconds}, then repetition "
        "{repetition} of {repetitions} starting with {next_exercise}."
    ),
    (ActionKind.PAUSE_BEFORE_BLOCK, None): (
        "Great block, pause for {duration} {seconds}, then next block "
        "{next_block} starting with {next_exercise}."
    ),
}


def cue_text(action: Action) -> str | None:
    """Return the announcement for *action*, or None if it has none.

    Zero-second pauses are passed through silently.
    """
    if action.is_pause:
        if action.duration_sec <= 0:
            return None
        template = _TEMPLATES[(action.kind, None)]
        return template.format(
            duration=action.duration_sec,
            seconds=_plural(action.duration_sec, "second"),
            next_exercise=_name_of(action.next_exercise),
            next_block=action.next_block.name if action.next_block else "",
            repetition=action.block_repetition,
            repetitions=action.block_repetitions,
        )

    exercise = action.exercise
    if exercise is None:
        return None
    template = _TEMPLATES[(ActionKind.EXERCISE, exercise.kind)]
    return template.format(
        name=exercise.name,
        value=exercise.value,
        seconds=_plural(exercise.value, "second"),
        times=_plural(exercise.value, "time"),
        member=f" per {exercise.member}" if exercise.member else "",
    )


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def _name_of(exercise) -> str:
    return exercise.name if exercise is not None else ""
