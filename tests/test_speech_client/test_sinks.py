"""Tests for the speech sinks."""

from __future__ import annotations

import io
import logging
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from speech_client import (
    CallableSink,
    ConsoleSink,
    FallbackSink,
    LoggingSink,
    QuotaLimitedSink,
    QuotaTracker,
    SpeechQuotaExceeded,
    SpeechSinkError,
)


class TestLoggingSink:
    def test_logs_text(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="speech"):
            LoggingSink().announce("Do Plank for 30 seconds.")
        assert "Do Plank for 30 seconds." in caplog.text


class TestConsoleSink:
    def test_writes_line(self) -> None:
        stream = io.StringIO()
        ConsoleSink(stream).announce("Workout complete.")
        assert stream.getvalue() == ">> Workout complete.\n"

    def test_closed_stream(self) -> None:
        stream = io.StringIO()
        stream.close()
        with pytest.raises(SpeechSinkError):
            ConsoleSink(stream).announce("hello")


class TestCallableSink:
    def test_forwards_text(self) -> None:
        func = MagicMock()
        CallableSink(func).announce("hello")
        func.assert_called_once_with("hello")

    def test_wraps_backend_errors(self) -> None:
        func = MagicMock(side_effect=ConnectionError("tts down"))
        with pytest.raises(SpeechSinkError, match="tts down"):
            CallableSink(func).announce("hello")


class TestFallbackSink:
    def test_primary_used_when_healthy(self) -> None:
        primary, fallback = MagicMock(), MagicMock()
        FallbackSink(primary, fallback).announce("hello")
        primary.announce.assert_called_once_with("hello")
        fallback.announce.assert_not_called()

    def test_falls_back_on_speech_error(self) -> None:
        primary = CallableSink(MagicMock(side_effect=RuntimeError("quota")))
        fallback = MagicMock()
        FallbackSink(primary, fallback).announce("hello")
        fallback.announce.assert_called_once_with("hello")

    def test_other_errors_propagate(self) -> None:
        primary, fallback = MagicMock(), MagicMock()
        primary.announce.side_effect = TypeError("bug")
        with pytest.raises(TypeError):
            FallbackSink(primary, fallback).announce("hello")


class TestQuotaLimitedSink:
    def _tracker(self, limit: int) -> QuotaTracker:
        return QuotaTracker(limit=limit, now=lambda: datetime(2026, 10, 17, 9, 0))

    def test_forwards_within_budget(self) -> None:
        inner = MagicMock()
        tracker = self._tracker(20)
        QuotaLimitedSink(inner, tracker).announce("hello")
        inner.announce.assert_called_once_with("hello")
        assert tracker.usage.characters_used == 5

    def test_refuses_over_budget(self) -> None:
        inner = MagicMock()
        sink = QuotaLimitedSink(inner, self._tracker(8))
        sink.announce("hello")
        with pytest.raises(SpeechQuotaExceeded) as excinfo:
            sink.announce("again")
        assert excinfo.value.characters_used == 5
        assert excinfo.value.limit == 8
        assert inner.announce.call_count == 1

    def test_quota_fallback_chain(self) -> None:
        voice, backup = MagicMock(), MagicMock()
        sink = FallbackSink(QuotaLimitedSink(voice, self._tracker(3)), backup)
        sink.announce("too long")
        voice.announce.assert_not_called()
        backup.announce.assert_called_once_with("too long")
