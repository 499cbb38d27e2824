"""Tests for the pure formatting helpers behind the Streamlit player."""

from __future__ import annotations

from streamlit_app.helpers import (
    PHASE_COLORS,
    PHASE_LABELS,
    block_options,
    describe_exercise,
    exercise_options,
    format_duration,
    format_elapsed,
    format_paused_since,
)
from workout_engine.models.enums import DisplayPhase, ExerciseKind
from workout_engine.models.session import Exercise


class TestFormatting:
    def test_elapsed(self) -> None:
        assert format_elapsed(0) == "0:00"
        assert format_elapsed(754_000) == "12:34"
        assert format_elapsed(3_725_000) == "1:02:05"
        assert format_elapsed(-5) == "0:00"

    def test_duration_rounds_up_to_minutes(self) -> None:
        assert format_duration(0) == "0m"
        assert format_duration(61) == "2m"
        assert format_duration(3_600) == "1h"
        assert format_duration(3_720) == "1h 2m"

    def test_paused_since(self) -> None:
        now = 10_000_000_000
        assert format_paused_since(now - 30_000, now) == "just now"
        assert format_paused_since(now - 5 * 60_000, now) == "5 min ago"
        assert format_paused_since(now - 3 * 3_600_000, now) == "3 h ago"
        assert format_paused_since(now - 72 * 3_600_000, now) == "3 days ago"

    def test_describe_exercise(self) -> None:
        reps = Exercise(id="l", name="Lunges", kind=ExerciseKind.REPS, value=12, member="leg")
        timed = Exercise(id="p", name="Plank", kind=ExerciseKind.DURATION, value=30)
        assert describe_exercise(reps) == "Lunges x12 per leg"
        assert describe_exercise(timed) == "Plank 30 s"
        assert describe_exercise(None) == "--"


class TestPhaseMaps:
    def test_every_phase_has_label_and_color(self) -> None:
        for phase in DisplayPhase:
            assert phase in PHASE_LABELS
            assert PHASE_COLORS[phase].startswith("#")


class TestStartPosition:
    def test_block_options_skip_empty(self, multi_block_session) -> None:
        assert block_options(multi_block_session) == [(0, "1. Warm-up"), (2, "3. Main")]

    def test_exercise_options(self, multi_block_session) -> None:
        assert exercise_options(multi_block_session, 0) == [
            (0, "Jacks 30 s"),
            (1, "Circles x10 per arm"),
        ]
