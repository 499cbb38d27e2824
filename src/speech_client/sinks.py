"""Speech sinks — everything with ``announce(text) -> None``."""

from __future__ import annotations

import logging
import sys
from typing import Callable, Protocol, TextIO

from speech_client.exceptions import SpeechClientError, SpeechQuotaExceeded, SpeechSinkError
from speech_client.quota import QuotaTracker

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def announce(self, text: str) -> None: ...


class LoggingSink:
    """Announces through the ``logging`` module (headless hosts, tests)."""

    def __init__(self, name: str = "speech", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(name)
        self.level = level

    def announce(self, text: str) -> None:
        self._logger.log(self.level, "%s", text)


class ConsoleSink:
    """Writes each announcement as a line on a text stream."""

    def __init__(self, stream: TextIO | None = None, prefix: str = ">> ") -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.prefix = prefix

    def announce(self, text: str) -> None:
        try:
            self.stream.write(f"{self.prefix}{text}\n")
            self.stream.flush()
        except (OSError, ValueError) as exc:
            raise SpeechSinkError(f"Could not write announcement: {exc}") from exc


class CallableSink:
    """Adapts a plain function (a TTS binding, ``st.toast``...) into a sink."""

    def __init__(self, func: Callable[[str], object]) -> None:
        self.func = func

    def announce(self, text: str) -> None:
        try:
            self.func(text)
        except SpeechClientError:
            raise
        except Exception as exc:
            raise SpeechSinkError(f"Speech backend failed: {exc}") from exc


class FallbackSink:
    """Tries *primary* first and falls back to *fallback* on a speech error."""

    def __init__(self, primary: Sink, fallback: Sink) -> None:
        self.primary = primary
        self.fallback = fallback

    def announce(self, text: str) -> None:
        try:
            self.primary.announce(text)
        except SpeechClientError as exc:
            logger.info("Primary speech sink failed (%s); using fallback", exc)
            self.fallback.announce(text)


class QuotaLimitedSink:
    """Forwards to *inner* while the monthly character budget allows it."""

    def __init__(self, inner: Sink, tracker: QuotaTracker) -> None:
        self.inner = inner
        self.tracker = tracker

    def announce(self, text: str) -> None:
        if not self.tracker.try_spend(len(text)):
            raise SpeechQuotaExceeded(self.tracker.usage.characters_used, self.tracker.limit)
        self.inner.announce(text)
