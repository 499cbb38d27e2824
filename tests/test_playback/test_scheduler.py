"""Tests for PlaybackScheduler — lifecycle, persistence and events."""

from __future__ import annotations

import dataclasses

import pytest

from workout_engine.catalog import SessionCatalog
from workout_engine.exceptions import (
    InvalidStartPositionError,
    NoActiveWorkoutError,
    PausedWorkoutNotFoundError,
    SessionNotFoundError,
    StaleResumeError,
    WorkoutAlreadyActiveError,
)
from workout_engine.models.enums import DisplayPhase, EventKind
from workout_engine.models.session import Session
from workout_engine.persistence import InMemoryStateRepository
from workout_engine.playback import PlaybackScheduler


def _kinds(scheduler: PlaybackScheduler) -> list[EventKind]:
    return [e.kind for e in scheduler.drain_events()]


class TestStartWorkout:
    def test_start_persists_state(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository
    ) -> None:
        state = scheduler.start_workout("s1")
        assert state.queue_index == 0
        assert scheduler.is_active
        assert repository.load("s1") == state
        assert state.queue_signature is not None

    def test_start_emits_started_and_first_action(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1")
        events = scheduler.drain_events()
        assert [e.kind for e in events] == [EventKind.STARTED, EventKind.ACTION_STARTED]
        assert events[1].queue_index == 0
        assert events[1].action.exercise.name == "Push-ups"
        assert scheduler.drain_events() == []

    def test_start_at_second_repetition(self, scheduler: PlaybackScheduler) -> None:
        state = scheduler.start_workout("s1", 0, 2, 0)
        assert state.queue_index == 4

    def test_start_arms_first_timer(self, scheduler: PlaybackScheduler, clock) -> None:
        state = scheduler.start_workout("s1", 0, 1, 1)
        assert state.queue_index == 2
        assert state.timer_start_ms == clock.now_ms
        assert state.timer_remaining_sec == 20

    def test_unknown_session(self, scheduler: PlaybackScheduler) -> None:
        with pytest.raises(SessionNotFoundError) as excinfo:
            scheduler.start_workout("nope")
        assert excinfo.value.session_id == "nope"
        assert isinstance(excinfo.value, KeyError)

    def test_invalid_position_does_not_start(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository
    ) -> None:
        with pytest.raises(InvalidStartPositionError):
            scheduler.start_workout("s1", 0, 3, 0)
        assert not scheduler.is_active
        assert repository.list_states() == []

    def test_second_start_rejected(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1")
        with pytest.raises(WorkoutAlreadyActiveError) as excinfo:
            scheduler.start_workout("multi")
        assert excinfo.value.active_session_id == "s1"

    def test_empty_session_completes_immediately(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository
    ) -> None:
        state = scheduler.start_workout("empty")
        assert state.queue_index == 0
        assert scheduler.queue == ()
        assert not scheduler.is_active
        assert repository.load("empty") is None
        assert _kinds(scheduler) == [EventKind.STARTED, EventKind.COMPLETED]
        assert scheduler.projection().phase == DisplayPhase.COMPLETED

    def test_start_after_completion_allowed(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("empty")
        scheduler.start_workout("s1")
        assert scheduler.is_active


class TestProgress:
    def test_complete_reps_exercise(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1")
        scheduler.drain_events()
        assert scheduler.complete_current() is True
        assert scheduler.state.queue_index == 1
        events = scheduler.drain_events()
        assert [(e.kind, e.queue_index) for e in events] == [(EventKind.ACTION_STARTED, 1)]

    def test_complete_ignored_during_countdown(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1", 0, 1, 1)
        assert scheduler.complete_current() is False
        assert scheduler.on_complete_key() is False
        assert scheduler.state.queue_index == 2

    def test_forced_skip(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1", 0, 1, 1)
        assert scheduler.complete_current(force=True) is True
        assert scheduler.state.queue_index == 3

    def test_complete_without_active_workout(self, scheduler: PlaybackScheduler) -> None:
        assert scheduler.complete_current() is False

    def test_tick_advances_after_countdown(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository, clock
    ) -> None:
        scheduler.start_workout("s1")
        scheduler.on_complete_key()
        scheduler.drain_events()
        clock.advance(5)
        state = scheduler.tick()
        assert state.queue_index == 2
        assert repository.load("s1").queue_index == 2
        assert [e.queue_index for e in scheduler.drain_events()] == [2]

    def test_tick_without_workout_is_noop(self, scheduler: PlaybackScheduler) -> None:
        assert scheduler.tick() is None
        assert scheduler.drain_events() == []

    def test_repeated_tick_same_instant(self, scheduler: PlaybackScheduler, clock) -> None:
        scheduler.start_workout("s1", 0, 1, 1)
        clock.advance(20)
        first = scheduler.tick()
        second = scheduler.tick()
        assert first == second
        assert first.queue_index == 3

    def test_zero_pause_emits_event_and_passes_through(
        self, scheduler: PlaybackScheduler, clock
    ) -> None:
        scheduler.start_workout("zero")
        scheduler.drain_events()
        clock.advance(10)
        state = scheduler.tick()
        assert state.queue_index == 2
        assert [e.queue_index for e in scheduler.drain_events()] == [1, 2]

    def test_natural_completion_removes_record(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository, clock
    ) -> None:
        scheduler.start_workout("zero")
        clock.advance(10)
        scheduler.tick()
        scheduler.drain_events()
        assert scheduler.complete_current() is True
        assert not scheduler.is_active
        assert scheduler.state.queue_index == 3
        assert repository.load("zero") is None
        events = scheduler.drain_events()
        assert events[-1].kind == EventKind.COMPLETED
        assert events[-1].queue_index == 3
        assert events[-1].action is None


class TestAbandon:
    def test_abandon_during_countdown_removes_state(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository, clock
    ) -> None:
        scheduler.start_workout("multi")
        clock.advance(10)
        scheduler.tick()
        scheduler.abandon()
        assert repository.load("multi") is None
        assert not scheduler.is_active
        assert scheduler.state is None
        assert _kinds(scheduler)[-1] == EventKind.ABANDONED

    def test_abandon_without_workout(self, scheduler: PlaybackScheduler) -> None:
        with pytest.raises(NoActiveWorkoutError):
            scheduler.abandon()


class TestPauseResume:
    def test_pause_stores_record_and_frees_slot(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository, clock
    ) -> None:
        scheduler.start_workout("s1", 0, 1, 1)
        clock.advance(5)
        paused = scheduler.pause()
        assert paused.is_paused
        assert paused.timer_remaining_sec == 15
        assert repository.load("s1") == paused
        assert scheduler.state is None
        assert [p.session_id for p in scheduler.paused_workouts()] == ["s1"]
        scheduler.start_workout("multi")
        assert scheduler.is_active

    def test_resume_restores_remaining_time(self, scheduler: PlaybackScheduler, clock) -> None:
        scheduler.start_workout("s1", 0, 1, 1)
        clock.advance(5)
        scheduler.pause()
        clock.advance(300)
        state = scheduler.resume("s1")
        assert not state.is_paused
        assert state.queue_index == 2
        assert scheduler.projection().remaining_sec == 15
        assert state.paused_total_ms == 300_000

    def test_pause_resume_events(self, scheduler: PlaybackScheduler, clock) -> None:
        scheduler.start_workout("s1")
        scheduler.drain_events()
        scheduler.pause()
        clock.advance(30)
        scheduler.resume("s1")
        assert _kinds(scheduler) == [EventKind.PAUSED, EventKind.RESUMED]

    def test_pause_without_workout(self, scheduler: PlaybackScheduler) -> None:
        with pytest.raises(NoActiveWorkoutError):
            scheduler.pause()

    def test_resume_unknown_record(self, scheduler: PlaybackScheduler) -> None:
        with pytest.raises(PausedWorkoutNotFoundError):
            scheduler.resume("s1")

    def test_resume_while_other_active(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1")
        scheduler.pause()
        scheduler.start_workout("multi")
        with pytest.raises(WorkoutAlreadyActiveError):
            scheduler.resume("s1")

    def test_start_discards_paused_record(self, scheduler: PlaybackScheduler) -> None:
        scheduler.start_workout("s1", 0, 2, 0)
        scheduler.pause()
        state = scheduler.start_workout("s1")
        assert state.queue_index == 0
        assert scheduler.paused_workouts() == []

    def test_remove_paused(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository
    ) -> None:
        scheduler.start_workout("s1")
        scheduler.pause()
        scheduler.remove_paused("s1")
        assert repository.load("s1") is None
        with pytest.raises(PausedWorkoutNotFoundError):
            scheduler.abandon_paused("s1")

    def test_paused_list_most_recent_first(self, scheduler: PlaybackScheduler, clock) -> None:
        scheduler.start_workout("s1")
        scheduler.pause()
        clock.advance(60)
        scheduler.start_workout("multi")
        scheduler.pause()
        assert [p.session_id for p in scheduler.paused_workouts()] == ["multi", "s1"]

    def test_in_process_resume_keeps_queue_snapshot(
        self,
        scheduler: PlaybackScheduler,
        catalog: SessionCatalog,
        sample_session: Session,
    ) -> None:
        scheduler.start_workout("s1", 0, 1, 1)
        scheduler.pause()
        block = sample_session.blocks[0]
        longer = dataclasses.replace(block.exercises[1], value=90)
        catalog.put(dataclasses.replace(
            sample_session,
            blocks=(dataclasses.replace(block, exercises=(block.exercises[0], longer)),),
        ))
        scheduler.resume("s1")
        assert scheduler.queue[2].exercise.value == 20


class TestStaleResume:
    def _paused_record(self, catalog, repository, clock) -> None:
        first = PlaybackScheduler(catalog, repository, clock=clock)
        first.start_workout("s1", 0, 2, 0)
        first.pause()

    def test_edited_session_is_stale(
        self,
        catalog: SessionCatalog,
        repository: InMemoryStateRepository,
        clock,
        sample_session: Session,
    ) -> None:
        self._paused_record(catalog, repository, clock)
        block = dataclasses.replace(sample_session.blocks[0], repetitions=3)
        catalog.put(dataclasses.replace(sample_session, blocks=(block,)))

        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        with pytest.raises(StaleResumeError) as excinfo:
            restarted.resume("s1")
        assert excinfo.value.session_id == "s1"
        assert excinfo.value.record.queue_index == 4
        assert repository.load("s1") is not None
        assert not restarted.is_active

    def test_deleted_session_is_stale(
        self, catalog: SessionCatalog, repository: InMemoryStateRepository, clock
    ) -> None:
        self._paused_record(catalog, repository, clock)
        catalog.delete("s1")
        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        with pytest.raises(StaleResumeError):
            restarted.resume("s1")

    def test_unchanged_session_resumes_after_restart(
        self, catalog: SessionCatalog, repository: InMemoryStateRepository, clock
    ) -> None:
        self._paused_record(catalog, repository, clock)
        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        assert restarted.resume("s1").queue_index == 4
        assert restarted.is_active


class TestRestoreActive:
    def test_restore_running_record(
        self, catalog: SessionCatalog, repository: InMemoryStateRepository, clock
    ) -> None:
        first = PlaybackScheduler(catalog, repository, clock=clock)
        first.start_workout("multi")
        clock.advance(10)
        first.tick()

        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        state = restarted.restore_active()
        assert state.queue_index == 0
        assert restarted.projection().remaining_sec == 20
        clock.advance(25)
        assert restarted.tick().queue_index == 1

    def test_restore_with_nothing_stored(self, scheduler: PlaybackScheduler) -> None:
        assert scheduler.restore_active() is None

    def test_stored_running_record_blocks_new_start(
        self, catalog: SessionCatalog, repository: InMemoryStateRepository, clock
    ) -> None:
        PlaybackScheduler(catalog, repository, clock=clock).start_workout("multi")
        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        with pytest.raises(WorkoutAlreadyActiveError):
            restarted.start_workout("s1")
        assert restarted.resume("multi").queue_index == 0

    def test_stale_running_record_can_be_removed(
        self,
        catalog: SessionCatalog,
        repository: InMemoryStateRepository,
        clock,
        sample_session: Session,
    ) -> None:
        PlaybackScheduler(catalog, repository, clock=clock).start_workout("s1")
        block = dataclasses.replace(sample_session.blocks[0], repetitions=3)
        catalog.put(dataclasses.replace(sample_session, blocks=(block,)))

        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        with pytest.raises(StaleResumeError):
            restarted.restore_active()
        with pytest.raises(WorkoutAlreadyActiveError):
            restarted.start_workout("multi")

        restarted.remove_paused("s1")
        assert repository.load("s1") is None
        assert restarted.start_workout("multi").session_id == "multi"

    def test_left_over_running_record_can_be_discarded(
        self, catalog: SessionCatalog, repository: InMemoryStateRepository, clock
    ) -> None:
        PlaybackScheduler(catalog, repository, clock=clock).start_workout("multi")
        restarted = PlaybackScheduler(catalog, repository, clock=clock)
        restarted.abandon_paused("multi")
        assert repository.active() is None
        assert restarted.start_workout("multi").queue_index == 0

    def test_run_in_progress_is_not_discarded(
        self, scheduler: PlaybackScheduler, repository: InMemoryStateRepository
    ) -> None:
        scheduler.start_workout("s1")
        with pytest.raises(WorkoutAlreadyActiveError):
            scheduler.abandon_paused("s1")
        assert repository.load("s1") is not None
        assert scheduler.is_active
