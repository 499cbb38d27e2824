"""Playback events — the scheduler's outbox entries."""

from __future__ import annotations

from dataclasses import dataclass

from workout_engine.models.action import Action
from workout_engine.models.enums import EventKind


@dataclass(frozen=True)
class PlaybackEvent:
    """Something that happened to the active run.

    ``action`` is the action at ``queue_index`` when the event fired; it is
    None for COMPLETED (``queue_index == len(queue)``) and for ABANDONED
    runs that had already finished.
    """

    kind: EventKind
    session_id: str
    queue_index: int
    at_ms: int
    action: Action | None = None
