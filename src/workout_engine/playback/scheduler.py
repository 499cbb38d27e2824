"""PlaybackScheduler — the single owner of the active workout run.

Wraps the pure transitions with a clock, a state repository and an event
outbox. Only this class mutates execution state; hosts read it through
``state``, ``projection()`` and ``drain_events()``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from workout_engine.exceptions import (
    NoActiveWorkoutError,
    PausedWorkoutNotFoundError,
    SessionNotFoundError,
    StaleResumeError,
    WorkoutAlreadyActiveError,
)
from workout_engine.models.enums import EventKind
from workout_engine.models.execution_state import ExecutionState, PausedWorkout
from workout_engine.models.session import Session, session_signature
from workout_engine.persistence.repository import InMemoryStateRepository, StateRepository
from workout_engine.playback import transitions
from workout_engine.playback.events import PlaybackEvent
from workout_engine.playback.projection import DisplaySnapshot, project
from workout_engine.playback.transitions import Queue
from workout_engine.queue_builder.builder import QueueBuilder, locate_start_index

logger = logging.getLogger(__name__)

SessionLookup = Callable[[str], "Session | None"]
Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


class PlaybackScheduler:
    """Runs one workout at a time.

    Usage::

        scheduler = PlaybackScheduler(catalog, JsonFileStateRepository(path))
        scheduler.start_workout("morning-circuit")
        scheduler.tick()                 # once per second
        scheduler.complete_current()     # user finished a REPS exercise
        events = scheduler.drain_events()

    A paused run leaves the active slot; its record stays in the repository
    until it is resumed or removed. Within one process the queue snapshot of
    a paused run is kept, so resuming it never rebuilds the queue.
    """

    def __init__(
        self,
        sessions: SessionLookup,
        repository: StateRepository | None = None,
        clock: Clock | None = None,
        queue_builder: QueueBuilder | None = None,
    ) -> None:
        self._lookup = sessions
        self.repository = repository or InMemoryStateRepository()
        self._clock = clock or wall_clock_ms
        self._builder = queue_builder or QueueBuilder()

        self._session: Session | None = None
        self._queue: Queue = ()
        self._state: ExecutionState | None = None
        self._snapshots: dict[str, tuple[Session, Queue]] = {}
        self._events: list[PlaybackEvent] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> ExecutionState | None:
        """The current run's state (a completed run is kept until replaced)."""
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def queue(self) -> Queue:
        return self._queue

    @property
    def is_active(self) -> bool:
        """True while a run is in progress (not completed, not paused away)."""
        return self._state is not None and not transitions.is_completed(self._state, self._queue)

    def now(self) -> int:
        """The scheduler's clock reading, epoch ms."""
        return self._clock()

    def projection(self) -> DisplaySnapshot | None:
        """Display snapshot of the current run, or None if there is none."""
        if self._state is None or self._session is None:
            return None
        return project(self._session, self._queue, self._state, self._clock())

    def paused_workouts(self) -> list[PausedWorkout]:
        return self.repository.paused()

    def drain_events(self) -> list[PlaybackEvent]:
        """Return and clear the pending events, oldest first."""
        events, self._events = self._events, []
        return events

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_workout(
        self,
        session_id: str,
        start_block_index: int = 0,
        start_block_repetition: int = 1,
        start_exercise_index: int = 0,
    ) -> ExecutionState:
        """Begin a new run of *session_id* at the given position.

        Raises:
            SessionNotFoundError: Unknown session id.
            WorkoutAlreadyActiveError: Another run is in progress.
            InvalidStartPositionError: The position does not exist.
        """
        session = self._lookup(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._ensure_slot_free()

        queue = self._builder.build(session)
        now = self._clock()
        signature = session_signature(session)

        if not queue:
            state = transitions.start(session_id, queue, now, 0, signature)
            self._install(session, queue, state)
            self._discard_paused_record(session_id)
            logger.info("Session %s has no exercises; completed immediately", session_id)
            self._emit(EventKind.STARTED, now)
            self._emit(EventKind.COMPLETED, now)
            return state

        start_index = locate_start_index(
            session, queue,
            start_block_index, start_block_repetition, start_exercise_index,
        )
        self._discard_paused_record(session_id)

        state = transitions.start(session_id, queue, now, start_index, signature)
        state = transitions.tick(state, queue, now)
        self._install(session, queue, state)
        logger.info(
            "Started session %s at queue index %d of %d",
            session_id, start_index, len(queue),
        )
        self._emit(EventKind.STARTED, now)
        self._emit(EventKind.ACTION_STARTED, now)
        self._after_progress(start_index, now)
        return state

    def restore_active(self) -> ExecutionState | None:
        """Reinstate a running record left in the repository by a previous process.

        The countdown keeps its wall-clock anchor, so time spent while the
        process was down counts as elapsed.

        Raises:
            StaleResumeError: The record no longer matches its session.
        """
        if self.is_active:
            return self._state
        record = self.repository.active()
        if record is None:
            return None

        session, queue = self._rebuild_for(record)
        now = self._clock()
        self._install(session, queue, record)
        logger.info(
            "Restored active session %s at queue index %d",
            record.session_id, record.queue_index,
        )
        self._emit(EventKind.STARTED, now)
        self._emit(EventKind.ACTION_STARTED, now)
        self._advance_with(transitions.tick(record, queue, now), now)
        return self._state

    def tick(self) -> ExecutionState | None:
        """Re-evaluate the countdown. Safe to call at any rate; no-op when idle."""
        if not self.is_active or self._state.is_paused:
            return self._state
        now = self._clock()
        return self._advance_with(transitions.tick(self._state, self._queue, now), now)

    def complete_current(self, force: bool = False) -> bool:
        """Finish the current action by hand.

        Without *force* only REPS exercises accept this; *force* skips any
        action. Returns False when nothing changed (no run, paused, or a
        countdown action without *force*).
        """
        if not self.is_active:
            logger.debug("complete_current ignored: no active workout")
            return False
        now = self._clock()
        updated = transitions.complete_current(self._state, self._queue, now, force=force)
        if updated is self._state:
            logger.debug(
                "complete_current ignored at queue index %d", self._state.queue_index,
            )
            return False
        # Pass through any zero-length pause the advance landed on
        updated = transitions.tick(updated, self._queue, now)
        self._advance_with(updated, now)
        return True

    def on_complete_key(self) -> bool:
        """Manual-completion key binding; only acts on a running REPS exercise."""
        return self.complete_current(force=False)

    def pause(self) -> ExecutionState:
        """Pause the active run and release the active slot.

        Raises:
            NoActiveWorkoutError: Nothing is running.
        """
        if not self.is_active:
            raise NoActiveWorkoutError("No active workout to pause")
        now = self._clock()
        state = transitions.pause(self._state, self._queue, now)
        self.repository.save(state)
        self._state = state
        self._emit(EventKind.PAUSED, now)
        logger.info(
            "Paused session %s at queue index %d (remaining %s s)",
            state.session_id, state.queue_index, state.timer_remaining_sec,
        )

        self._snapshots[state.session_id] = (self._session, self._queue)
        self._clear()
        return state

    def resume(self, session_id: str) -> ExecutionState:
        """Resume a paused run, or restore a running record of the same session.

        Raises:
            WorkoutAlreadyActiveError: Another run is in progress.
            PausedWorkoutNotFoundError: No paused record for *session_id*.
            StaleResumeError: The session was deleted or changed since the
                record was written. The record is kept.
        """
        if not self.is_active:
            stored = self.repository.active()
            if stored is not None and stored.session_id == session_id:
                # Left running by a previous process
                return self.restore_active()
        self._ensure_slot_free()
        record = self.repository.load(session_id)
        if record is None or not record.is_paused:
            raise PausedWorkoutNotFoundError(session_id)

        snapshot = self._snapshots.get(session_id)
        if snapshot is not None:
            session, queue = snapshot
        else:
            session, queue = self._rebuild_for(record)

        now = self._clock()
        state = transitions.resume(record, now)
        self._install(session, queue, state)
        self._snapshots.pop(session_id, None)
        self.repository.save(state)
        logger.info("Resumed session %s at queue index %d", session_id, state.queue_index)
        self._emit(EventKind.RESUMED, now)
        self._advance_with(transitions.tick(state, queue, now), now)
        return self._state

    def abandon(self) -> None:
        """Stop the active run and delete its record.

        Raises:
            NoActiveWorkoutError: Nothing is running.
        """
        if not self.is_active:
            raise NoActiveWorkoutError("No active workout to abandon")
        now = self._clock()
        session_id = self._state.session_id
        self._emit(EventKind.ABANDONED, now)
        self.repository.remove(session_id)
        self._clear()
        logger.info("Abandoned session %s", session_id)

    def abandon_paused(self, session_id: str) -> None:
        """Delete the stored record of *session_id* without resuming it.

        Paused records and running records left behind by a previous
        process (including stale ones) are both removed. The run in
        progress in this process is stopped with ``abandon`` instead.

        Raises:
            PausedWorkoutNotFoundError: Nothing is stored for *session_id*.
            WorkoutAlreadyActiveError: *session_id* is the run in progress.
        """
        if self.is_active and self._state.session_id == session_id:
            raise WorkoutAlreadyActiveError(session_id)
        record = self.repository.load(session_id)
        if record is None:
            raise PausedWorkoutNotFoundError(session_id)
        self.repository.remove(session_id)
        self._snapshots.pop(session_id, None)
        logger.info(
            "Removed %s workout for session %s",
            "paused" if record.is_paused else "running", session_id,
        )

    remove_paused = abandon_paused

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_slot_free(self) -> None:
        if self.is_active:
            raise WorkoutAlreadyActiveError(self._state.session_id)
        stored = self.repository.active()
        if stored is not None:
            raise WorkoutAlreadyActiveError(stored.session_id)

    def _discard_paused_record(self, session_id: str) -> None:
        record = self.repository.load(session_id)
        if record is not None and record.is_paused:
            self.repository.remove(session_id)
            logger.info("Discarded paused workout for session %s", session_id)
        self._snapshots.pop(session_id, None)

    def _rebuild_for(self, record: ExecutionState) -> tuple[Session, Queue]:
        session = self._lookup(record.session_id)
        if session is None:
            self._stale(record, "session no longer exists")
        queue = self._builder.build(session)
        if (
            record.queue_signature is not None
            and record.queue_signature != session_signature(session)
        ):
            self._stale(record, "session was edited")
        if record.queue_index >= len(queue):
            self._stale(
                record,
                f"queue index {record.queue_index} beyond queue of {len(queue)} actions",
            )
        return session, queue

    @staticmethod
    def _stale(record: ExecutionState, reason: str) -> None:
        logger.warning("Cannot resume session %s: %s", record.session_id, reason)
        raise StaleResumeError(
            f"Saved workout for session {record.session_id} is stale: {reason}",
            session_id=record.session_id,
            record=record,
        )

    def _install(self, session: Session, queue: Queue, state: ExecutionState) -> None:
        self._session = session
        self._queue = queue
        self._state = state

    def _clear(self) -> None:
        self._session = None
        self._queue = ()
        self._state = None

    def _advance_with(self, updated: ExecutionState, now: int) -> ExecutionState:
        """Commit *updated*, publishing and persisting what changed."""
        previous = self._state
        if updated == previous:
            return updated
        self._state = updated
        self._after_progress(previous.queue_index, now)
        return updated

    def _after_progress(self, previous_index: int, now: int) -> None:
        state = self._state
        for index in range(previous_index + 1, min(state.queue_index, len(self._queue) - 1) + 1):
            self._emit(EventKind.ACTION_STARTED, now, queue_index=index)
            logger.debug("Advanced session %s to queue index %d", state.session_id, index)

        if transitions.is_completed(state, self._queue):
            self.repository.remove(state.session_id)
            self._emit(EventKind.COMPLETED, now)
            logger.info("Completed session %s", state.session_id)
        else:
            self.repository.save(state)

    def _emit(self, kind: EventKind, now: int, queue_index: int | None = None) -> None:
        state = self._state
        index = state.queue_index if queue_index is None else queue_index
        action = self._queue[index] if index < len(self._queue) else None
        self._events.append(PlaybackEvent(
            kind=kind,
            session_id=state.session_id,
            queue_index=index,
            at_ms=now,
            action=action,
        ))
