"""Display projection — what a host should show right now.

Pure and recomputed on every read; nothing here is stored.
"""

from __future__ import annotations

from dataclasses import dataclass

from workout_engine.models.enums import ActionKind, DisplayPhase
from workout_engine.models.execution_state import ExecutionState
from workout_engine.models.session import Block, Exercise, Session
from workout_engine.playback.transitions import (
    Queue,
    active_elapsed_ms,
    current_action,
    remaining_seconds,
)

_PHASE_BY_KIND: dict[ActionKind, DisplayPhase] = {
    ActionKind.EXERCISE: DisplayPhase.EXERCISE,
    ActionKind.PAUSE_BETWEEN_EXERCISES: DisplayPhase.BETWEEN_EXERCISES,
    ActionKind.PAUSE_BETWEEN_REPETITIONS: DisplayPhase.BETWEEN_EXERCISES,
    ActionKind.PAUSE_BEFORE_BLOCK: DisplayPhase.BETWEEN_BLOCKS,
}


@dataclass(frozen=True)
class DisplaySnapshot:
    """Read-only view of a run at one instant."""

    phase: DisplayPhase
    queue_index: int
    queue_length: int
    is_paused: bool
    elapsed_ms: int
    current_block: Block | None = None
    current_exercise: Exercise | None = None
    next_block: Block | None = None
    next_exercise: Exercise | None = None
    block_repetition: int = 0
    block_repetitions: int = 0
    remaining_sec: int | None = None
    progress: float = 0.0

    @property
    def is_completed(self) -> bool:
        return self.phase == DisplayPhase.COMPLETED

    @property
    def overall_progress(self) -> float:
        """Fraction of the queue already done."""
        if self.queue_length == 0:
            return 1.0
        return min(1.0, self.queue_index / self.queue_length)


def project(
    session: Session,
    queue: Queue,
    state: ExecutionState,
    now_ms: int,
) -> DisplaySnapshot:
    """Compute the display snapshot for *state* at *now_ms*.

    Between blocks, ``current_block`` is the block just finished and
    ``next_block`` the one about to start.
    """
    elapsed = active_elapsed_ms(state, now_ms)
    action = current_action(state, queue)
    if action is None:
        return DisplaySnapshot(
            phase=DisplayPhase.COMPLETED,
            queue_index=state.queue_index,
            queue_length=len(queue),
            is_paused=False,
            elapsed_ms=elapsed,
            progress=1.0,
        )

    remaining = remaining_seconds(state, queue, now_ms)
    duration = action.timer_duration_sec
    progress = 0.0
    if remaining is not None and duration:
        progress = (duration - remaining) / duration

    current_block: Block | None = session.blocks[action.block_index]
    current_exercise = action.exercise
    next_block = action.next_block
    next_exercise = action.next_exercise

    if action.kind == ActionKind.EXERCISE:
        upcoming = _next_exercise_action(queue, state.queue_index)
        next_exercise = upcoming.exercise if upcoming else None
        if upcoming is not None and upcoming.block_index != action.block_index:
            next_block = session.blocks[upcoming.block_index]
    elif action.kind == ActionKind.PAUSE_BEFORE_BLOCK:
        current_block = None
        if state.queue_index > 0:
            current_block = session.blocks[queue[state.queue_index - 1].block_index]

    return DisplaySnapshot(
        phase=_PHASE_BY_KIND[action.kind],
        queue_index=state.queue_index,
        queue_length=len(queue),
        is_paused=state.is_paused,
        elapsed_ms=elapsed,
        current_block=current_block,
        current_exercise=current_exercise,
        next_block=next_block,
        next_exercise=next_exercise,
        block_repetition=action.block_repetition,
        block_repetitions=action.block_repetitions,
        remaining_sec=remaining,
        progress=progress,
    )


def format_clock(seconds: int | None) -> str:
    """Format a countdown as ``m:ss`` (``--:--`` when there is none)."""
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


def _next_exercise_action(queue: Queue, index: int):
    for action in queue[index + 1:]:
        if action.kind == ActionKind.EXERCISE:
            return action
    return None
