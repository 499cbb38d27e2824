"""Custom exception hierarchy for the workout engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workout_engine.models.execution_state import ExecutionState


class WorkoutEngineError(Exception):
    """Base exception for all workout_engine errors."""


class InvalidDefinitionError(WorkoutEngineError, ValueError):
    """An Exercise, Block or Session carries out-of-range values."""


class InvalidStartPositionError(WorkoutEngineError, ValueError):
    """The requested start position does not exist in the session."""


class SessionNotFoundError(WorkoutEngineError, KeyError):
    """No session definition exists for the given id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session not found: {self.session_id}"


class WorkoutAlreadyActiveError(WorkoutEngineError):
    """Another workout is already running; pause or abandon it first."""

    def __init__(self, active_session_id: str) -> None:
        super().__init__(f"Workout already active for session {active_session_id}")
        self.active_session_id = active_session_id


class NoActiveWorkoutError(WorkoutEngineError):
    """The operation needs a running workout and there is none."""


class PausedWorkoutNotFoundError(WorkoutEngineError, KeyError):
    """No paused workout is stored for the given session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"No paused workout for session {self.session_id}"


class StaleResumeError(WorkoutEngineError):
    """A paused record no longer matches its session definition.

    The record is left in storage; callers should offer to remove it.
    """

    def __init__(
        self,
        message: str,
        session_id: str,
        record: ExecutionState | None = None,
    ) -> None:
        super().__init__(message)
        self.session_id = session_id
        self.record = record


class SerializationError(WorkoutEngineError, ValueError):
    """A persisted record or session document could not be decoded."""
