"""Utility helpers bridging the Streamlit UI and the workout engine.

Pure functions for formatting, labels and start-position choices.
"""

from __future__ import annotations

from workout_engine.models.enums import DisplayPhase, ExerciseKind
from workout_engine.models.session import Exercise, Session

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_elapsed(ms: int) -> str:
    """Convert milliseconds to 'M:SS' or 'H:MM:SS'. e.g. 754000 -> '12:34'."""
    total = max(0, int(ms)) // 1000
    h, rest = divmod(total, 3600)
    m, s = divmod(rest, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def format_duration(seconds: int) -> str:
    """Convert seconds to a short human string. e.g. 3720 -> '1h 2m'."""
    if seconds <= 0:
        return "0m"
    minutes = -(-int(seconds) // 60)  # round up
    h = minutes // 60
    m = minutes % 60
    if h > 0 and m > 0:
        return f"{h}h {m}m"
    if h > 0:
        return f"{h}h"
    return f"{m}m"


def format_paused_since(paused_at_ms: int, now_ms: int) -> str:
    """How long ago a workout was paused. e.g. 'just now', '5 min ago', '2 h ago'."""
    minutes = max(0, now_ms - paused_at_ms) // 60_000
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"
    hours = minutes // 60
    if hours < 48:
        return f"{hours} h ago"
    return f"{hours // 24} days ago"


def describe_exercise(exercise: Exercise | None) -> str:
    """e.g. 'Push-ups x10', 'Plank 30 s', 'Lunges x12 per leg'."""
    if exercise is None:
        return "--"
    if exercise.kind == ExerciseKind.DURATION:
        text = f"{exercise.name} {exercise.value} s"
    else:
        text = f"{exercise.name} x{exercise.value}"
    if exercise.member:
        text += f" per {exercise.member}"
    return text


# ---------------------------------------------------------------------------
# Color maps
# ---------------------------------------------------------------------------

PHASE_COLORS: dict[DisplayPhase, str] = {
    DisplayPhase.EXERCISE: "#2ECC71",           # green
    DisplayPhase.BETWEEN_EXERCISES: "#AED6F1",  # pastel blue
    DisplayPhase.BETWEEN_BLOCKS: "#F9E79F",     # yellow
    DisplayPhase.COMPLETED: "#D7BDE2",          # lavender
}

PHASE_LABELS: dict[DisplayPhase, str] = {
    DisplayPhase.EXERCISE: "Exercise",
    DisplayPhase.BETWEEN_EXERCISES: "Rest",
    DisplayPhase.BETWEEN_BLOCKS: "Block break",
    DisplayPhase.COMPLETED: "Done",
}


# ---------------------------------------------------------------------------
# Start position
# ---------------------------------------------------------------------------


def block_options(session: Session) -> list[tuple[int, str]]:
    """(block index, label) for every block that has exercises."""
    return [
        (index, f"{index + 1}. {block.name or 'Block'}")
        for index, block in enumerate(session.blocks)
        if not block.is_empty
    ]


def exercise_options(session: Session, block_index: int) -> list[tuple[int, str]]:
    """(exercise index, label) for the exercises of one block."""
    block = session.blocks[block_index]
    return [
        (index, describe_exercise(exercise))
        for index, exercise in enumerate(block.exercises)
    ]
