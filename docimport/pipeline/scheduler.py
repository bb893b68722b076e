"""Bounded-concurrency FIFO task queue on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Set


logger = logging.getLogger(__name__)

Task = Callable[[], Awaitable[object]]

DEFAULT_CONCURRENCY = 5


class TaskScheduler:
    """Run queued zero-argument coroutine factories, at most `limit` at a time.

    Tasks start in enqueue order as slots free up; completion order is not
    guaranteed. The queue is unbounded and `enqueue` never blocks. Tasks are
    expected to handle their own errors; anything that still escapes is logged
    so the slot is always released.
    """

    def __init__(self, limit: int = DEFAULT_CONCURRENCY):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit
        self.running = 0
        self.max_running = 0
        self._queue: Deque[Task] = deque()
        self._inflight: Set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def enqueue(self, task: Task) -> None:
        self._queue.append(task)
        self._idle.clear()
        self._next()

    def _next(self) -> None:
        logger.debug("Next task (%d tasks left, running %d in parallel)", len(self._queue), self.limit)
        while self._queue and self.running < self.limit:
            task = self._queue.popleft()
            self.running += 1
            self.max_running = max(self.max_running, self.running)
            handle = asyncio.get_running_loop().create_task(self._run(task))
            self._inflight.add(handle)
            handle.add_done_callback(self._inflight.discard)
        if not self._queue and self.running == 0:
            self._idle.set()

    async def _run(self, task: Task) -> None:
        try:
            await task()
        except Exception:
            logger.exception("Unhandled error in queued task")
        finally:
            self.running -= 1
            self._next()

    async def join(self) -> None:
        """Wait until the queue is empty and no task is running."""
        await self._idle.wait()
