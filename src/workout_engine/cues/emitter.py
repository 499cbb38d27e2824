"""Cue emitter — turns queue positions into speech, at most once each.

Deduplication uses two guards together:

- a table of identities already observed during the run, and
- the highest queue index observed so far; nothing below it is announced.

Observed cues are queued and handed to the sink by ``deliver`` in FIFO
order once they are due, so announcements never overlap out of order.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Iterable, Protocol

from workout_engine.cues.texts import COMPLETION_CUE, cue_text
from workout_engine.models.action import Action
from workout_engine.models.enums import DEFAULT_CUE_DELAY_MS, ActionKind, EventKind
from workout_engine.playback.events import PlaybackEvent

logger = logging.getLogger(__name__)


class SpeechSink(Protocol):
    """Anything that can speak a line of text."""

    def announce(self, text: str) -> None: ...


@dataclass(frozen=True)
class ActionIdentity:
    """What makes a cue unique within one run.

    The terminal completion cue uses ``kind=None`` and
    ``queue_index=len(queue)``.
    """

    kind: ActionKind | None
    block_index: int
    block_repetition: int
    exercise_index: int
    queue_index: int


@dataclass(frozen=True)
class Cue:
    """A pending announcement."""

    text: str
    identity: ActionIdentity
    due_ms: int


def identity_of(queue_index: int, action: Action | None) -> ActionIdentity:
    """Identity of the action at *queue_index*; None means completion."""
    if action is None:
        return ActionIdentity(
            kind=None,
            block_index=-1,
            block_repetition=0,
            exercise_index=-1,
            queue_index=queue_index,
        )
    return ActionIdentity(
        kind=action.kind,
        block_index=action.block_index,
        block_repetition=action.block_repetition,
        exercise_index=action.exercise_index,
        queue_index=queue_index,
    )


def cue_for(
    previous_identity: ActionIdentity | None,
    queue_index: int,
    action: Action | None,
) -> str | None:
    """Return the text to announce for *action*, or None.

    None when the action's identity equals *previous_identity* (already
    announced) or when the action has nothing to say. A None *action* stands
    for completion of a queue of length *queue_index*.
    """
    if identity_of(queue_index, action) == previous_identity:
        return None
    if action is None:
        return COMPLETION_CUE
    return cue_text(action)


@dataclass
class _ParkedRun:
    """Cue bookkeeping of a paused run, held until it resumes."""

    seen: set[ActionIdentity]
    last_index: int | None
    pending: deque[Cue]
    completed: bool
    paused_at_ms: int


class CueEmitter:
    """Stateful consumer of playback progress that feeds a speech sink.

    A paused run keeps its undelivered cues; they are held back while the
    run is paused and become due again, shifted by the paused span, once it
    resumes.

    Usage::

        emitter = CueEmitter(LoggingSink())
        emitter.consume(scheduler.drain_events())
        emitter.deliver(now_ms)
    """

    def __init__(self, sink: SpeechSink, delivery_delay_ms: int = DEFAULT_CUE_DELAY_MS) -> None:
        self.sink = sink
        self.delivery_delay_ms = delivery_delay_ms
        self._parked: dict[str, _ParkedRun] = {}
        self.reset()

    @property
    def pending(self) -> tuple[Cue, ...]:
        return tuple(self._pending)

    def reset(self) -> None:
        """Forget everything observed; used when a new run begins."""
        self._seen: set[ActionIdentity] = set()
        self._last_index: int | None = None
        self._pending: deque[Cue] = deque()
        self._completed = False

    def observe(self, queue_index: int, action: Action, now_ms: int) -> Cue | None:
        """Queue the cue for the action at *queue_index* unless already seen."""
        identity = identity_of(queue_index, action)
        if identity in self._seen or (
            self._last_index is not None and queue_index < self._last_index
        ):
            logger.debug("Suppressed duplicate cue for queue index %d", queue_index)
            return None

        self._seen.add(identity)
        self._last_index = queue_index
        text = cue_text(action)
        if text is None:
            return None
        return self._enqueue(text, identity, now_ms)

    def observe_completion(self, queue_length: int, now_ms: int) -> Cue | None:
        """Queue the terminal cue, once per run."""
        if self._completed:
            return None
        self._completed = True
        identity = identity_of(queue_length, None)
        self._seen.add(identity)
        self._last_index = queue_length
        return self._enqueue(COMPLETION_CUE, identity, now_ms)

    def consume(self, events: Iterable[PlaybackEvent]) -> None:
        """Map scheduler events to observations, in order."""
        for event in events:
            if event.kind == EventKind.STARTED:
                self._parked.pop(event.session_id, None)
                self.reset()
            elif event.kind == EventKind.PAUSED:
                self._park(event.session_id, event.at_ms)
            elif event.kind == EventKind.RESUMED:
                self._unpark(event.session_id, event.at_ms)
            elif event.kind == EventKind.ACTION_STARTED and event.action is not None:
                self.observe(event.queue_index, event.action, event.at_ms)
            elif event.kind == EventKind.COMPLETED:
                self.observe_completion(event.queue_index, event.at_ms)
            elif event.kind == EventKind.ABANDONED:
                self._parked.pop(event.session_id, None)
                self._pending.clear()

    def deliver(self, now_ms: int) -> list[Cue]:
        """Hand every due cue to the sink; return the ones handed over."""
        delivered: list[Cue] = []
        while self._pending and self._pending[0].due_ms <= now_ms:
            cue = self._pending.popleft()
            try:
                self.sink.announce(cue.text)
            except Exception:
                logger.warning("Speech sink failed for %r", cue.text, exc_info=True)
            delivered.append(cue)
        return delivered

    def _park(self, session_id: str, now_ms: int) -> None:
        self._parked[session_id] = _ParkedRun(
            seen=self._seen,
            last_index=self._last_index,
            pending=self._pending,
            completed=self._completed,
            paused_at_ms=now_ms,
        )
        if self._pending:
            logger.debug("Holding %d cue(s) for paused session %s", len(self._pending), session_id)
        self.reset()

    def _unpark(self, session_id: str, now_ms: int) -> None:
        parked = self._parked.pop(session_id, None)
        self.reset()
        if parked is None:
            # Resumed from storage by another process; nothing was held
            return
        shift = max(0, now_ms - parked.paused_at_ms)
        self._seen = parked.seen
        self._last_index = parked.last_index
        self._completed = parked.completed
        self._pending = deque(
            replace(cue, due_ms=cue.due_ms + shift) for cue in parked.pending
        )

    def _enqueue(self, text: str, identity: ActionIdentity, now_ms: int) -> Cue:
        due_ms = now_ms + self.delivery_delay_ms
        if self._pending:
            due_ms = max(due_ms, self._pending[-1].due_ms)
        cue = Cue(text=text, identity=identity, due_ms=due_ms)
        self._pending.append(cue)
        logger.debug("Queued cue %r due at %d", text, due_ms)
        return cue
