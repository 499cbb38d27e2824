"""Spoken cues for workout playback."""

from workout_engine.cues.emitter import (
    ActionIdentity,
    Cue,
    CueEmitter,
    SpeechSink,
    cue_for,
    identity_of,
)
from workout_engine.cues.texts import COMPLETION_CUE, cue_text

__all__ = [
    "COMPLETION_CUE",
    "ActionIdentity",
    "Cue",
    "CueEmitter",
    "SpeechSink",
    "cue_for",
    "cue_text",
    "identity_of",
]
