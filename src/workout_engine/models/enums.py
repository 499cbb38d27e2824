"""Enumerations and constants for the workout execution engine."""

from enum import IntEnum, auto


class ExerciseKind(IntEnum):
    """How an exercise's ``value`` is measured."""

    REPS = auto()      # value = rep count, completed manually
    DURATION = auto()  # value = seconds, completed by countdown


class ActionKind(IntEnum):
    """One scheduled step in a flattened workout queue."""

    EXERCISE = auto()
    PAUSE_BETWEEN_EXERCISES = auto()
    PAUSE_BETWEEN_REPETITIONS = auto()
    PAUSE_BEFORE_BLOCK = auto()


class PlaybackStatus(IntEnum):
    """Scheduler state, derived from the current action and ``is_paused``."""

    EXERCISE_REPS = auto()
    EXERCISE_DURATION_RUNNING = auto()
    EXERCISE_DURATION_PAUSED = auto()
    PAUSE_RUNNING = auto()
    PAUSE_PAUSED = auto()
    COMPLETED = auto()


class DisplayPhase(IntEnum):
    """Coarse phase shown to the user by the display projection."""

    EXERCISE = auto()
    BETWEEN_EXERCISES = auto()
    BETWEEN_BLOCKS = auto()
    COMPLETED = auto()


class EventKind(IntEnum):
    """Playback events published by the scheduler."""

    STARTED = auto()
    ACTION_STARTED = auto()
    PAUSED = auto()
    RESUMED = auto()
    COMPLETED = auto()
    ABANDONED = auto()


PAUSE_KINDS = frozenset({
    ActionKind.PAUSE_BETWEEN_EXERCISES,
    ActionKind.PAUSE_BETWEEN_REPETITIONS,
    ActionKind.PAUSE_BEFORE_BLOCK,
})

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------
MS_PER_SECOND = 1000

# Rough time per repetition, used only for duration estimates of REPS
# exercises (they have no countdown of their own).
SECONDS_PER_REP_ESTIMATE = 3

# ---------------------------------------------------------------------------
# Cue delivery
# ---------------------------------------------------------------------------
DEFAULT_CUE_DELAY_MS = 0
