"""Queue summaries — counts and duration estimates for start screens."""

from __future__ import annotations

from dataclasses import dataclass

from workout_engine.models.action import Action
from workout_engine.models.enums import SECONDS_PER_REP_ESTIMATE, ActionKind, ExerciseKind
from workout_engine.models.session import Session


@dataclass(frozen=True)
class QueueSummary:
    """Aggregate figures for a queue (or the remainder of one)."""

    exercise_count: int
    pause_count: int
    timed_exercise_sec: int
    pause_sec: int
    total_reps: int
    estimated_duration_sec: int


def summarize_queue(
    queue: tuple[Action, ...],
    start_index: int = 0,
    seconds_per_rep: int = SECONDS_PER_REP_ESTIMATE,
) -> QueueSummary:
    """Summarize ``queue[start_index:]``.

    REPS exercises have no countdown, so their time is estimated at
    *seconds_per_rep* per repetition.
    """
    exercise_count = 0
    pause_count = 0
    timed_exercise_sec = 0
    pause_sec = 0
    total_reps = 0

    for action in queue[start_index:]:
        if action.is_pause:
            pause_count += 1
            pause_sec += action.duration_sec
            continue
        exercise_count += 1
        if action.exercise.kind == ExerciseKind.DURATION:  # type: ignore[union-attr]
            timed_exercise_sec += action.exercise.value  # type: ignore[union-attr]
        else:
            total_reps += action.exercise.value  # type: ignore[union-attr]

    return QueueSummary(
        exercise_count=exercise_count,
        pause_count=pause_count,
        timed_exercise_sec=timed_exercise_sec,
        pause_sec=pause_sec,
        total_reps=total_reps,
        estimated_duration_sec=timed_exercise_sec + pause_sec + total_reps * seconds_per_rep,
    )


def describe_session(session: Session, queue: tuple[Action, ...]) -> str:
    """One-line description, e.g. ``"Full Body — 2 blocks • 7 exercises • ~4 min"``."""
    summary = summarize_queue(queue)
    block_count = sum(1 for b in session.blocks if not b.is_empty)
    minutes = max(1, round(summary.estimated_duration_sec / 60)) if queue else 0

    parts = [
        _plural(block_count, "block"),
        _plural(summary.exercise_count, "exercise"),
    ]
    if session.duration_min:
        parts.append(f"{session.duration_min} min")
    else:
        parts.append(f"~{minutes} min")
    return f"{session.name} — " + " • ".join(parts)


def count_actions(queue: tuple[Action, ...]) -> dict[ActionKind, int]:
    """Number of actions of each kind (kinds with no actions map to 0)."""
    counts = {kind: 0 for kind in ActionKind}
    for action in queue:
        counts[action.kind] += 1
    return counts


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
