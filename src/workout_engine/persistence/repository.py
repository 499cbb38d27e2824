"""Execution-state repositories — key/value storage keyed by session id.

The engine only relies on ``save``, ``load``, ``remove`` and ``list_states``.
Whether a stored record is the active run or a paused one is read from its
``is_paused`` flag.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from workout_engine.exceptions import SerializationError
from workout_engine.models.execution_state import ExecutionState, PausedWorkout
from workout_engine.serialization.state_json import (
    execution_state_from_dict,
    execution_state_to_dict,
)

logger = logging.getLogger(__name__)


class StateRepository(ABC):
    """Base class for execution-state storage."""

    @abstractmethod
    def save(self, state: ExecutionState) -> None:
        """Insert or replace the record for ``state.session_id``."""
        ...

    @abstractmethod
    def load(self, session_id: str) -> ExecutionState | None:
        """Return the stored record, or None."""
        ...

    @abstractmethod
    def remove(self, session_id: str) -> None:
        """Delete the record if present."""
        ...

    @abstractmethod
    def list_states(self) -> list[ExecutionState]:
        """Return every stored record."""
        ...

    def active(self) -> ExecutionState | None:
        """Return the stored running (not paused) record, if any."""
        for state in self.list_states():
            if not state.is_paused:
                return state
        return None

    def paused(self) -> list[PausedWorkout]:
        """Return paused records, most recently paused first."""
        entries = [
            PausedWorkout(
                session_id=s.session_id,
                state=s,
                paused_at_ms=s.paused_at_ms or 0,
            )
            for s in self.list_states()
            if s.is_paused
        ]
        return sorted(entries, key=lambda e: e.paused_at_ms, reverse=True)


class InMemoryStateRepository(StateRepository):
    """Process-local repository (tests, single-page hosts)."""

    def __init__(self) -> None:
        self._states: dict[str, ExecutionState] = {}

    def save(self, state: ExecutionState) -> None:
        self._states[state.session_id] = state

    def load(self, session_id: str) -> ExecutionState | None:
        return self._states.get(session_id)

    def remove(self, session_id: str) -> None:
        self._states.pop(session_id, None)

    def list_states(self) -> list[ExecutionState]:
        return list(self._states.values())


class JsonFileStateRepository(StateRepository):
    """One JSON file per session id inside *directory*; survives restarts."""

    def __init__(self, directory: Path | str) -> None:
        self._dir = Path(directory).expanduser()
        self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._dir

    def save(self, state: ExecutionState) -> None:
        path = self._path_for(state.session_id)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(execution_state_to_dict(state), f, indent=2)
        os.replace(tmp_path, path)
        logger.debug("Saved execution state for %s to %s", state.session_id, path)

    def load(self, session_id: str) -> ExecutionState | None:
        path = self._path_for(session_id)
        if not path.exists():
            return None
        return self._read(path)

    def remove(self, session_id: str) -> None:
        path = self._path_for(session_id)
        if path.exists():
            path.unlink()
            logger.info("Removed execution state for %s", session_id)

    def list_states(self) -> list[ExecutionState]:
        states: list[ExecutionState] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                states.append(self._read(path))
            except SerializationError as exc:
                logger.warning("Skipping unreadable state file %s: %s", path, exc)
        return states

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path_for(self, session_id: str) -> Path:
        # Sanitise for the filename, keep a digest so distinct ids never collide
        safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in session_id)[:48]
        digest = hashlib.sha1(session_id.encode("utf-8")).hexdigest()[:10]
        return self._dir / f"{safe or 'session'}-{digest}.json"

    @staticmethod
    def _read(path: Path) -> ExecutionState:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SerializationError(f"{path}: {exc}") from exc
        return execution_state_from_dict(data)
