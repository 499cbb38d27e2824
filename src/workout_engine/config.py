"""Environment-variable-based configuration for the workout hosts.

Read once at import; the engine itself never consults it, only the hosts
(`runner.console`, `streamlit_app`) do.
"""

from __future__ import annotations

import os
from pathlib import Path

from speech_client.quota import DEFAULT_QUOTA_LIMIT

SESSIONS_PATH: Path = Path(os.environ.get("CIRCUIT_SESSIONS_PATH", "sessions.json"))
STATE_DIR: Path = Path(
    os.environ.get("CIRCUIT_STATE_DIR", "~/.circuit-runner/state")
).expanduser()
TICK_SECONDS: int = int(os.environ.get("CIRCUIT_TICK_SECONDS", "1"))
CUE_DELAY_MS: int = int(os.environ.get("CIRCUIT_CUE_DELAY_MS", "0"))
SPEECH_QUOTA_PATH: Path = Path(
    os.environ.get("CIRCUIT_SPEECH_QUOTA_PATH", "~/.circuit-runner/speech_quota.json")
).expanduser()
SPEECH_QUOTA_CHARS: int = int(
    os.environ.get("CIRCUIT_SPEECH_QUOTA_CHARS", str(DEFAULT_QUOTA_LIMIT))
)
