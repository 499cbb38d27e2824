"""Serialization module — execution-state records and session documents."""

from workout_engine.serialization.session_json import (
    load_sessions,
    session_from_dict,
    session_to_dict,
)
from workout_engine.serialization.state_json import (
    execution_state_from_dict,
    execution_state_to_dict,
    execution_state_to_json_string,
)

__all__ = [
    "execution_state_from_dict",
    "execution_state_to_dict",
    "execution_state_to_json_string",
    "load_sessions",
    "session_from_dict",
    "session_to_dict",
]
