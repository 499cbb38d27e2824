"""Playback — transitions, the scheduler and the display projection.

``WorkoutPlayer`` lives in ``workout_engine.playback.player``; it depends on
the cues package and is re-exported from ``workout_engine``.
"""

from workout_engine.playback.events import PlaybackEvent
from workout_engine.playback.projection import DisplaySnapshot, format_clock, project
from workout_engine.playback.scheduler import PlaybackScheduler, wall_clock_ms

__all__ = [
    "DisplaySnapshot",
    "PlaybackEvent",
    "PlaybackScheduler",
    "format_clock",
    "project",
    "wall_clock_ms",
]
