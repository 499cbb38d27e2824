"""Queue builder — flattens a Session into an ordered tuple of Actions.

The queue is a pure function of the session's block/exercise structure. A run
builds it once and keeps it for its whole life; positions are queue indexes,
never re-derived from block/repetition/exercise coordinates after start.
"""

from __future__ import annotations

import logging

from workout_engine.exceptions import InvalidStartPositionError
from workout_engine.models.action import Action
from workout_engine.models.enums import ActionKind
from workout_engine.models.session import Session

logger = logging.getLogger(__name__)


def build_queue(session: Session) -> tuple[Action, ...]:
    """Expand a session definition into its playback queue.

    Algorithm, per non-empty block in order:
    1. For each repetition r in 1..repetitions, for each exercise:
       emit EXERCISE, then PAUSE_BETWEEN_EXERCISES unless it is the block's
       last exercise.
    2. After repetition r, emit PAUSE_BETWEEN_REPETITIONS if r < repetitions.
    3. After the last repetition, emit PAUSE_BEFORE_BLOCK if another
       non-empty block follows.

    Empty blocks contribute nothing, not even a pause. A session with no
    exercises at all yields an empty queue.

    Args:
        session: The workout definition.

    Returns:
        The ordered, immutable action queue.
    """
    playable = [
        (index, block) for index, block in enumerate(session.blocks)
        if not block.is_empty
    ]
    actions: list[Action] = []

    for position, (block_index, block) in enumerate(playable):
        last_exercise = block.exercise_count - 1

        for repetition in range(1, block.repetitions + 1):
            for exercise_index, exercise in enumerate(block.exercises):
                actions.append(Action(
                    kind=ActionKind.EXERCISE,
                    block_index=block_index,
                    block_repetition=repetition,
                    exercise_index=exercise_index,
                    block_repetitions=block.repetitions,
                    exercise=exercise,
                ))
                if exercise_index < last_exercise:
                    actions.append(Action(
                        kind=ActionKind.PAUSE_BETWEEN_EXERCISES,
                        block_index=block_index,
                        block_repetition=repetition,
                        exercise_index=exercise_index + 1,
                        block_repetitions=block.repetitions,
                        duration_sec=block.pause_between_exercises,
                        next_exercise=block.exercises[exercise_index + 1],
                    ))

            if repetition < block.repetitions:
                actions.append(Action(
                    kind=ActionKind.PAUSE_BETWEEN_REPETITIONS,
                    block_index=block_index,
                    block_repetition=repetition + 1,
                    exercise_index=0,
                    block_repetitions=block.repetitions,
                    duration_sec=block.pause_between_repetitions,
                    next_exercise=block.exercises[0],
                ))

        if position < len(playable) - 1:
            next_index, next_block = playable[position + 1]
            actions.append(Action(
                kind=ActionKind.PAUSE_BEFORE_BLOCK,
                block_index=next_index,
                block_repetition=1,
                exercise_index=0,
                block_repetitions=next_block.repetitions,
                duration_sec=block.pause_before_next_block,
                next_block=next_block,
                next_exercise=next_block.exercises[0],
            ))

    return tuple(actions)


def locate_start_index(
    session: Session,
    queue: tuple[Action, ...],
    block_index: int = 0,
    block_repetition: int = 1,
    exercise_index: int = 0,
) -> int:
    """Translate a user-chosen start position into a queue index.

    This is the only place where the queue is searched by coordinates; the
    search only considers EXERCISE actions, which are unique per
    (block, repetition, exercise).

    Raises:
        InvalidStartPositionError: If the block, repetition or exercise does
            not exist, or the chosen block has no exercises.
    """
    if not 0 <= block_index < len(session.blocks):
        raise InvalidStartPositionError(
            f"Block index {block_index} out of range "
            f"(session has {len(session.blocks)} blocks)"
        )
    block = session.blocks[block_index]
    if block.is_empty:
        raise InvalidStartPositionError(
            f"Block {block_index} ({block.name!r}) has no exercises"
        )
    if not 1 <= block_repetition <= block.repetitions:
        raise InvalidStartPositionError(
            f"Repetition {block_repetition} out of range "
            f"(block {block.name!r} has {block.repetitions})"
        )
    if not 0 <= exercise_index < block.exercise_count:
        raise InvalidStartPositionError(
            f"Exercise index {exercise_index} out of range "
            f"(block {block.name!r} has {block.exercise_count} exercises)"
        )

    for index, action in enumerate(queue):
        if (
            action.kind == ActionKind.EXERCISE
            and action.block_index == block_index
            and action.block_repetition == block_repetition
            and action.exercise_index == exercise_index
        ):
            return index

    # Only reachable when the queue was not built from this session.
    raise InvalidStartPositionError(
        f"Position ({block_index}, {block_repetition}, {exercise_index}) "
        "not found in queue"
    )


class QueueBuilder:
    """Builds queues and memoizes them per session.

    Usage::

        builder = QueueBuilder()
        queue = builder.build(session)   # cached until the session changes
    """

    def __init__(self) -> None:
        self._cache: dict[str, tuple[Session, tuple[Action, ...]]] = {}

    def build(self, session: Session) -> tuple[Action, ...]:
        """Return the queue for *session*, reusing a cached one if unchanged."""
        cached = self._cache.get(session.id)
        if cached is not None and cached[0] == session:
            return cached[1]

        queue = build_queue(session)
        self._cache[session.id] = (session, queue)
        logger.debug("Built queue for session %s: %d actions", session.id, len(queue))
        return queue

    def invalidate(self, session_id: str) -> None:
        """Drop the cached queue for a session."""
        self._cache.pop(session_id, None)
