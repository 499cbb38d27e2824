"""WorkoutPlayer — host-facing wiring of scheduler and cue emitter."""

from __future__ import annotations

import logging

from workout_engine.cues.emitter import Cue, CueEmitter
from workout_engine.models.execution_state import ExecutionState, PausedWorkout
from workout_engine.playback.projection import DisplaySnapshot
from workout_engine.playback.scheduler import PlaybackScheduler

logger = logging.getLogger(__name__)


class WorkoutPlayer:
    """Runs a scheduler operation, then lets the emitter drain its events.

    Every method returns after due cues have been handed to the sink, so a
    host only has to call ``tick()`` on a timer and forward user input.
    """

    def __init__(self, scheduler: PlaybackScheduler, emitter: CueEmitter) -> None:
        self.scheduler = scheduler
        self.emitter = emitter
        self.announced: list[Cue] = []

    @property
    def state(self) -> ExecutionState | None:
        return self.scheduler.state

    @property
    def is_active(self) -> bool:
        return self.scheduler.is_active

    def snapshot(self) -> DisplaySnapshot | None:
        return self.scheduler.projection()

    def paused_workouts(self) -> list[PausedWorkout]:
        return self.scheduler.paused_workouts()

    def start(
        self,
        session_id: str,
        block_index: int = 0,
        block_repetition: int = 1,
        exercise_index: int = 0,
    ) -> ExecutionState:
        state = self.scheduler.start_workout(
            session_id, block_index, block_repetition, exercise_index,
        )
        self._flush()
        return state

    def tick(self) -> ExecutionState | None:
        state = self.scheduler.tick()
        self._flush()
        return state

    def complete(self) -> bool:
        """The manual-completion key."""
        changed = self.scheduler.on_complete_key()
        self._flush()
        return changed

    def skip(self) -> bool:
        changed = self.scheduler.complete_current(force=True)
        self._flush()
        return changed

    def pause(self) -> ExecutionState:
        state = self.scheduler.pause()
        self._flush()
        return state

    def resume(self, session_id: str) -> ExecutionState:
        state = self.scheduler.resume(session_id)
        self._flush()
        return state

    def restore(self) -> ExecutionState | None:
        state = self.scheduler.restore_active()
        self._flush()
        return state

    def abandon(self) -> None:
        self.scheduler.abandon()
        self._flush()

    def remove_paused(self, session_id: str) -> None:
        self.scheduler.remove_paused(session_id)

    def take_announced(self) -> list[Cue]:
        """Return and clear the cues delivered since the last call."""
        cues, self.announced = self.announced, []
        return cues

    def _flush(self) -> None:
        events = self.scheduler.drain_events()
        if events:
            logger.debug("Dispatching %d playback events", len(events))
            self.emitter.consume(events)
        self.announced.extend(self.emitter.deliver(self.scheduler.now()))
