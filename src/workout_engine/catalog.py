"""Read-only session catalog — the definition store as seen by the engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from workout_engine.models.session import Session
from workout_engine.serialization.session_json import load_sessions

logger = logging.getLogger(__name__)


class SessionCatalog:
    """Sessions indexed by id.

    The scheduler only needs ``lookup(session_id) -> Session | None``; a
    catalog instance is callable for that purpose.
    """

    def __init__(self, sessions: Iterable[Session] = ()) -> None:
        self._sessions: dict[str, Session] = {}
        for session in sessions:
            self.put(session)

    @classmethod
    def from_file(cls, path: Path | str) -> SessionCatalog:
        """Load a catalog from a sessions JSON file."""
        sessions = load_sessions(path)
        logger.info("Loaded %d sessions from %s", len(sessions), path)
        return cls(sessions)

    def put(self, session: Session) -> None:
        """Add or replace a session definition."""
        self._sessions[session.id] = session

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def __call__(self, session_id: str) -> Session | None:
        return self.get(session_id)

    def __iter__(self) -> Iterator[Session]:
        return iter(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def session_ids(self) -> list[str]:
        return list(self._sessions.keys())
