"""Execution state — the persisted cursor and timer of a workout run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionState:
    """Where a run is and how much time is left.

    ``queue_index`` points into the run's action queue and is the single
    source of truth for the position; ``queue_index == len(queue)`` means the
    run is completed. Timer fields are epoch milliseconds except
    ``timer_remaining_sec``, which is a cached read of the countdown (the
    authoritative value is always recomputed from ``timer_start_ms``).
    """

    session_id: str
    queue_index: int
    started_at_ms: int
    is_paused: bool = False
    paused_at_ms: int | None = None
    timer_remaining_sec: int | None = None
    timer_start_ms: int | None = None
    paused_total_ms: int = 0
    queue_signature: str | None = None

    @property
    def has_running_timer(self) -> bool:
        return self.timer_start_ms is not None


@dataclass(frozen=True)
class PausedWorkout:
    """Listing entry for a paused run (one per session id)."""

    session_id: str
    state: ExecutionState
    paused_at_ms: int
