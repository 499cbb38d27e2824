"""Data models for the workout engine."""

from workout_engine.models.action import Action
from workout_engine.models.enums import (
    ActionKind,
    DisplayPhase,
    EventKind,
    ExerciseKind,
    PlaybackStatus,
)
from workout_engine.models.execution_state import ExecutionState, PausedWorkout
from workout_engine.models.session import Block, Exercise, Session, session_signature

__all__ = [
    "Action",
    "ActionKind",
    "Block",
    "DisplayPhase",
    "EventKind",
    "ExecutionState",
    "Exercise",
    "ExerciseKind",
    "PausedWorkout",
    "PlaybackStatus",
    "Session",
    "session_signature",
]
