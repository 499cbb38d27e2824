"""Shared test fixtures: sample sessions, a manual clock, wired schedulers."""

from __future__ import annotations

import pytest

from workout_engine.catalog import SessionCatalog
from workout_engine.models.enums import ExerciseKind
from workout_engine.models.session import Block, Exercise, Session
from workout_engine.persistence import InMemoryStateRepository
from workout_engine.playback import PlaybackScheduler

T0 = 1_700_000_000_000


class ManualClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start_ms: int = T0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float = 0, ms: int = 0) -> int:
        self.now_ms += int(seconds * 1000) + ms
        return self.now_ms


@pytest.fixture
def sample_session() -> Session:
    """One block, 2 repetitions: Push-ups x10 (reps), Plank 20 s (duration).

    Queue (7 actions):
        0 Push-ups r1 | 1 pause 5 s | 2 Plank r1 | 3 rep pause 10 s |
        4 Push-ups r2 | 5 pause 5 s | 6 Plank r2
    """
    return Session(
        id="s1",
        name="Morning circuit",
        blocks=(
            Block(
                id="b1",
                name="Circuit",
                repetitions=2,
                pause_between_repetitions=10,
                pause_between_exercises=5,
                exercises=(
                    Exercise(id="pushups", name="Push-ups", kind=ExerciseKind.REPS, value=10),
                    Exercise(id="plank", name="Plank", kind=ExerciseKind.DURATION, value=20),
                ),
            ),
        ),
    )


@pytest.fixture
def multi_block_session() -> Session:
    """Warm-up (1x), an empty block, Main (2x).

    Queue (11 actions):
        0 Jacks 30 s | 1 pause 5 s | 2 Circles x10 per arm | 3 block pause 15 s |
        4 Squats r1 | 5 pause 10 s | 6 Plank 40 s r1 | 7 rep pause 20 s |
        8 Squats r2 | 9 pause 10 s | 10 Plank 40 s r2
    """
    return Session(
        id="multi",
        name="Full body",
        blocks=(
            Block(
                id="warmup",
                name="Warm-up",
                repetitions=1,
                pause_between_exercises=5,
                pause_before_next_block=15,
                exercises=(
                    Exercise(id="jacks", name="Jacks", kind=ExerciseKind.DURATION, value=30),
                    Exercise(
                        id="circles", name="Circles", kind=ExerciseKind.REPS,
                        value=10, member="arm",
                    ),
                ),
            ),
            Block(id="empty", name="Empty", repetitions=3, pause_before_next_block=60),
            Block(
                id="main",
                name="Main",
                repetitions=2,
                pause_between_repetitions=20,
                pause_between_exercises=10,
                exercises=(
                    Exercise(id="squats", name="Squats", kind=ExerciseKind.REPS, value=15),
                    Exercise(id="plank", name="Plank", kind=ExerciseKind.DURATION, value=40),
                ),
            ),
        ),
    )


@pytest.fixture
def zero_pause_session() -> Session:
    """Plank 10 s, then a 0 s pause, then Squats x5."""
    return Session(
        id="zero",
        name="No rest",
        blocks=(
            Block(
                id="b",
                name="Block",
                pause_between_exercises=0,
                exercises=(
                    Exercise(id="plank", name="Plank", kind=ExerciseKind.DURATION, value=10),
                    Exercise(id="squats", name="Squats", kind=ExerciseKind.REPS, value=5),
                ),
            ),
        ),
    )


@pytest.fixture
def empty_session() -> Session:
    return Session(
        id="empty",
        name="Nothing yet",
        blocks=(Block(id="b", name="Empty block"),),
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def catalog(
    sample_session: Session,
    multi_block_session: Session,
    zero_pause_session: Session,
    empty_session: Session,
) -> SessionCatalog:
    return SessionCatalog(
        [sample_session, multi_block_session, zero_pause_session, empty_session]
    )


@pytest.fixture
def repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def scheduler(
    catalog: SessionCatalog,
    repository: InMemoryStateRepository,
    clock: ManualClock,
) -> PlaybackScheduler:
    return PlaybackScheduler(catalog, repository, clock=clock)
