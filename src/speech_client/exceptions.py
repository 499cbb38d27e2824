"""Custom exception hierarchy for the speech client."""

from __future__ import annotations


class SpeechClientError(Exception):
    """Base exception for all speech_client errors."""


class SpeechSinkError(SpeechClientError):
    """A sink could not speak the text (backend failure, closed stream, etc.)."""


class SpeechQuotaExceeded(SpeechClientError):
    """The monthly character budget would be exceeded."""

    def __init__(self, characters_used: int, limit: int) -> None:
        super().__init__(
            f"Speech quota reached: {characters_used} / {limit} characters"
        )
        self.characters_used = characters_used
        self.limit = limit
