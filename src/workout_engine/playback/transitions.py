"""Pure playback transitions over (ExecutionState, queue, now).

Every function returns a new ExecutionState (or the same one when nothing
changes) and never reads the clock itself; callers pass ``now_ms``.

Countdowns are anchored to ``timer_start_ms`` and always recomputed from the
action's original duration:

    elapsed   = floor((now - timer_start_ms) / 1000)
    remaining = max(0, duration - elapsed)

so missed or duplicated ticks cannot make the timer drift, and pausing is
handled by shifting ``timer_start_ms`` forward by the time spent paused.
"""

from __future__ import annotations

import dataclasses

from workout_engine.exceptions import InvalidStartPositionError
from workout_engine.models.action import Action
from workout_engine.models.enums import MS_PER_SECOND, PlaybackStatus
from workout_engine.models.execution_state import ExecutionState

Queue = tuple[Action, ...]


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------


def current_action(state: ExecutionState, queue: Queue) -> Action | None:
    """Return the action under the cursor, or None once completed."""
    if state.queue_index >= len(queue):
        return None
    return queue[state.queue_index]


def is_completed(state: ExecutionState, queue: Queue) -> bool:
    return state.queue_index >= len(queue)


def status_of(state: ExecutionState, queue: Queue) -> PlaybackStatus:
    """Derive the scheduler state from the current action and pause flag."""
    action = current_action(state, queue)
    if action is None:
        return PlaybackStatus.COMPLETED
    if action.is_pause:
        return PlaybackStatus.PAUSE_PAUSED if state.is_paused else PlaybackStatus.PAUSE_RUNNING
    if action.requires_manual_completion:
        return PlaybackStatus.EXERCISE_REPS
    if state.is_paused:
        return PlaybackStatus.EXERCISE_DURATION_PAUSED
    return PlaybackStatus.EXERCISE_DURATION_RUNNING


def remaining_seconds(state: ExecutionState, queue: Queue, now_ms: int) -> int | None:
    """Seconds left on the current countdown.

    Returns None for REPS exercises and completed runs. While paused, time is
    frozen at the pause instant. A timed action whose timer has not been
    armed yet reports its full duration.
    """
    action = current_action(state, queue)
    if action is None or not action.is_timed:
        return None
    duration = action.timer_duration_sec or 0
    if state.timer_start_ms is None:
        return duration

    reference_ms = now_ms
    if state.is_paused and state.paused_at_ms is not None:
        reference_ms = state.paused_at_ms
    elapsed_sec = max(0, (reference_ms - state.timer_start_ms) // MS_PER_SECOND)
    return max(0, duration - elapsed_sec)


def active_elapsed_ms(state: ExecutionState, now_ms: int) -> int:
    """Time spent in the workout since start, excluding paused time."""
    reference_ms = now_ms
    if state.is_paused and state.paused_at_ms is not None:
        reference_ms = state.paused_at_ms
    return max(0, reference_ms - state.started_at_ms - state.paused_total_ms)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def start(
    session_id: str,
    queue: Queue,
    now_ms: int,
    start_index: int = 0,
    signature: str | None = None,
) -> ExecutionState:
    """Create the state for a new run positioned at *start_index*.

    The timer is left unarmed; the first ``tick`` arms it. An empty queue
    only accepts index 0 and yields an already-completed state.
    """
    upper = max(len(queue) - 1, 0)
    if not 0 <= start_index <= upper:
        raise InvalidStartPositionError(
            f"Start index {start_index} out of range for a queue of {len(queue)} actions"
        )
    return ExecutionState(
        session_id=session_id,
        queue_index=start_index,
        started_at_ms=now_ms,
        queue_signature=signature,
    )


def advance(state: ExecutionState, queue: Queue, now_ms: int) -> ExecutionState:
    """Move the cursor one action forward.

    Past the last action the run is completed (``queue_index == len(queue)``).
    Otherwise the timer is reset and, for a timed action, immediately
    re-armed at *now_ms*; REPS exercises wait for manual completion.
    """
    if is_completed(state, queue):
        return state

    next_index = state.queue_index + 1
    state = dataclasses.replace(
        state,
        queue_index=min(next_index, len(queue)),
        timer_start_ms=None,
        timer_remaining_sec=None,
    )
    action = current_action(state, queue)
    if action is not None and action.is_timed:
        state = _arm_timer(state, action, now_ms)
    return state


def tick(state: ExecutionState, queue: Queue, now_ms: int) -> ExecutionState:
    """Re-evaluate the countdown at *now_ms*; advance when it hits zero.

    Idempotent for a given *now_ms*: after an advance the new action's timer
    starts at *now_ms*, so a repeated call sees its full duration. Zero-length
    pauses entered during this call are passed through immediately, which
    keeps that property for them too.
    """
    if state.is_paused:
        return state

    while True:
        action = current_action(state, queue)
        if action is None or not action.is_timed:
            return state
        if state.timer_start_ms is None:
            state = _arm_timer(state, action, now_ms)

        remaining = remaining_seconds(state, queue, now_ms) or 0
        if remaining > 0:
            if remaining != state.timer_remaining_sec:
                state = dataclasses.replace(state, timer_remaining_sec=remaining)
            return state
        state = advance(state, queue, now_ms)


def complete_current(
    state: ExecutionState,
    queue: Queue,
    now_ms: int,
    force: bool = False,
) -> ExecutionState:
    """Manually finish the current action.

    Without *force* only a REPS exercise can be completed. *force* is an
    explicit user skip and accepts any action. Paused or completed runs are
    left unchanged.
    """
    if state.is_paused:
        return state
    action = current_action(state, queue)
    if action is None:
        return state
    if not force and not action.requires_manual_completion:
        return state
    return advance(state, queue, now_ms)


def pause(state: ExecutionState, queue: Queue, now_ms: int) -> ExecutionState:
    """Freeze the run at *now_ms*. Treated the same for every action kind."""
    if state.is_paused:
        return state
    remaining = state.timer_remaining_sec
    if state.timer_start_ms is not None:
        remaining = remaining_seconds(state, queue, now_ms)
    return dataclasses.replace(
        state,
        is_paused=True,
        paused_at_ms=now_ms,
        timer_remaining_sec=remaining,
    )


def resume(state: ExecutionState, now_ms: int) -> ExecutionState:
    """Unfreeze the run; time spent paused does not count against the timer."""
    if not state.is_paused:
        return state
    paused_for = 0
    if state.paused_at_ms is not None:
        paused_for = max(0, now_ms - state.paused_at_ms)

    timer_start = state.timer_start_ms
    if timer_start is not None:
        timer_start += paused_for

    return dataclasses.replace(
        state,
        is_paused=False,
        paused_at_ms=None,
        timer_start_ms=timer_start,
        paused_total_ms=state.paused_total_ms + paused_for,
    )


def _arm_timer(state: ExecutionState, action: Action, now_ms: int) -> ExecutionState:
    return dataclasses.replace(
        state,
        timer_start_ms=now_ms,
        timer_remaining_sec=action.timer_duration_sec,
    )
