"""Circuit workout execution engine."""

from workout_engine.catalog import SessionCatalog
from workout_engine.playback import PlaybackScheduler
from workout_engine.cues import CueEmitter
from workout_engine.playback.player import WorkoutPlayer

__all__ = ["CueEmitter", "PlaybackScheduler", "SessionCatalog", "WorkoutPlayer"]
