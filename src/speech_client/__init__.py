"""Speech output for workout cues — sinks and a monthly character budget."""

from speech_client.exceptions import SpeechClientError, SpeechQuotaExceeded, SpeechSinkError
from speech_client.quota import DEFAULT_QUOTA_LIMIT, QuotaTracker, safety_limit
from speech_client.sinks import (
    CallableSink,
    ConsoleSink,
    FallbackSink,
    LoggingSink,
    QuotaLimitedSink,
)

__all__ = [
    "DEFAULT_QUOTA_LIMIT",
    "CallableSink",
    "ConsoleSink",
    "FallbackSink",
    "LoggingSink",
    "QuotaLimitedSink",
    "QuotaTracker",
    "SpeechClientError",
    "SpeechQuotaExceeded",
    "SpeechSinkError",
    "safety_limit",
]
