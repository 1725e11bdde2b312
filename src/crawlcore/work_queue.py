"""Bounded-concurrency task queue with live idle detection.

Every submitted coroutine function becomes an asyncio task that waits on a
semaphore before running, so at most ``concurrency`` bodies execute at once.
Idleness is tracked with a counter of submitted-but-unfinished tasks and an
event that is set whenever the counter drops to zero. ``wait_idle`` re-checks
the counter after every wake-up, which means work submitted while somebody is
already waiting (including work submitted by running tasks) is drained before
idleness is reported.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Set

logger = logging.getLogger(__name__)

TaskFn = Callable[[], Awaitable[object]]


class WorkQueue:
    def __init__(self, concurrency: int):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._idle = asyncio.Event()
        self._idle.set()
        self._pending = 0
        self._running = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Queued plus running tasks."""
        return self._pending

    @property
    def running(self) -> int:
        return self._running

    @property
    def is_idle(self) -> bool:
        return self._pending == 0

    def submit(self, fn: TaskFn) -> None:
        """Schedule ``fn()`` for execution. Must be called from the event loop."""
        loop = asyncio.get_running_loop()
        self._pending += 1
        self._idle.clear()
        task = loop.create_task(self._run(fn))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, fn: TaskFn) -> None:
        try:
            async with self._semaphore:
                self._running += 1
                try:
                    await fn()
                finally:
                    self._running -= 1
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Queued task failed")
        finally:
            self._pending -= 1
            if self._pending == 0:
                self._idle.set()

    async def wait_idle(self) -> None:
        while self._pending:
            await self._idle.wait()

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
