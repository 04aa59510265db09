"""Bounded-concurrency worker pool over a shared FIFO queue."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TextIO, TypeVar

from .progress import ProgressTracker

T = TypeVar("T")


class ParallelRunner(Generic[T]):
    """Runs items through ``process`` with at most ``concurrency`` in flight.

    Every lane pulls from the same queue, so a lane that finishes early picks
    up the next pending item immediately. A failing item is recorded and the
    lane moves on; nothing is cancelled.
    """

    def __init__(self, concurrency: int, stream: TextIO | None = None):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.concurrency = concurrency
        self.stream = stream
        self.tracker: ProgressTracker[T] | None = None

    async def run(
        self,
        items: Sequence[T],
        process: Callable[[T], Awaitable[object]],
        id_of: Callable[[T], str],
        label_of: Callable[[T], str] | None = None,
    ) -> bool:
        """Process every item. Returns True iff at least one item failed."""
        tracker: ProgressTracker[T] = ProgressTracker(len(items), id_of, label_of, self.stream)
        self.tracker = tracker
        queue: deque[T] = deque(items)

        async def execute(item: T) -> None:
            tracker.task_started(item)
            try:
                await process(item)
            except Exception as e:
                tracker.task_failed(item, e)
            else:
                tracker.task_completed(item)

        async def lane() -> None:
            while queue:
                await execute(queue.popleft())

        lanes = [lane() for _ in range(min(self.concurrency, len(items)))]
        await asyncio.gather(*lanes)

        tracker.print_summary()
        return tracker.state.has_failed


async def run_in_parallel(
    items: Sequence[T],
    concurrency: int,
    process: Callable[[T], Awaitable[object]],
    id_of: Callable[[T], str],
    label_of: Callable[[T], str] | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Run ``process`` over ``items`` with bounded concurrency; True iff any failed."""
    runner: ParallelRunner[T] = ParallelRunner(concurrency, stream=stream)
    return await runner.run(items, process, id_of, label_of)
