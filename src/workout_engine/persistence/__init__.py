"""Execution-state persistence."""

from workout_engine.persistence.repository import (
    InMemoryStateRepository,
    JsonFileStateRepository,
    StateRepository,
)

__all__ = [
    "InMemoryStateRepository",
    "JsonFileStateRepository",
    "StateRepository",
]
