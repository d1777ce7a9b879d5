"""Bounded-parallelism admission gate for asynchronous tasks.

``ConcurrencyLimiter`` keeps an active-task counter and a FIFO list of
waiting futures.  When a running task finishes, its slot is handed straight
to the oldest waiter, so queued tasks start strictly in submission order.
The gate does not supervise: a failing task neither cancels its siblings nor
leaks its slot.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from contextlib import suppress
from typing import TypeVar

T = TypeVar("T")


class ConcurrencyLimiter:
    """Admit at most *max_concurrency* tasks at a time.

    One limiter is shared by every leaf load of a single loader call, so the
    bound is global to that call rather than per batch.
    """

    def __init__(self, max_concurrency: int) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._max = max_concurrency
        self._active = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def max_concurrency(self) -> int:
        return self._max

    @property
    def active(self) -> int:
        """Number of tasks currently holding a slot."""
        return self._active

    @property
    def waiting(self) -> int:
        """Number of submissions queued for a slot."""
        return sum(1 for fut in self._waiters if not fut.done())

    async def admit(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run *task* once a slot is free and return its result.

        *task* is a zero-argument callable producing an awaitable; it is not
        called until the slot is granted.  Exceptions from the task propagate
        to the caller after the slot has been released.
        """
        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    async def admit_all(self, tasks: Iterable[Callable[[], Awaitable[T]]]) -> list[T]:
        """Admit every task and collect results in submission order.

        Fails with the first exception raised by any task, but only after
        every admitted task has settled.  Siblings are never cancelled, so
        resources they share (an HTTP client, say) may be closed as soon as
        this returns or raises.
        """
        futures = [asyncio.ensure_future(self.admit(task)) for task in tasks]
        if not futures:
            return []

        try:
            done, pending = await asyncio.wait(futures, return_when=asyncio.FIRST_EXCEPTION)
            if pending:
                await asyncio.wait(pending)
        except asyncio.CancelledError:
            for fut in futures:
                fut.cancel()
            raise

        # Failures from the first wave win over later ones.
        for fut in sorted(futures, key=lambda f: f not in done):
            if fut.cancelled() or fut.exception() is not None:
                for other in futures:
                    if not other.cancelled():
                        other.exception()
                fut.result()
        return [fut.result() for fut in futures]

    async def _acquire(self) -> None:
        if self._active < self._max and not self._waiters:
            self._active += 1
            return

        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # The slot was handed over just before cancellation.
                self._release()
            else:
                with suppress(ValueError):
                    self._waiters.remove(fut)
            raise

    def _release(self) -> None:
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                # Slot passes to the waiter; the active count is unchanged.
                fut.set_result(None)
                return
        self._active -= 1
