"""Queue builder — flattens workout definitions into action queues."""

from workout_engine.queue_builder.builder import QueueBuilder, build_queue, locate_start_index
from workout_engine.queue_builder.summary import (
    QueueSummary,
    count_actions,
    describe_session,
    summarize_queue,
)

__all__ = [
    "QueueBuilder",
    "QueueSummary",
    "build_queue",
    "count_actions",
    "describe_session",
    "locate_start_index",
    "summarize_queue",
]
