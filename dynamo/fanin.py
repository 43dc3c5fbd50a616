"""Bounded fan-in queue shared by all generator tasks.

The capacity is the system's only backpressure knob: when the batcher or
the collector falls behind, producers block on ``put`` and their rate
limiters accumulate tokens instead of records being dropped.
"""

import asyncio

from dynamo.errors import QueueClosed

DEFAULT_CAPACITY = 32


class FanInQueue:
    """Multi-producer, single-consumer queue with explicit closure."""

    def __init__(self, maxsize: int = DEFAULT_CAPACITY):
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = asyncio.Event()

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def qsize(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        """Close the queue. Blocked and future producers get QueueClosed;
        the consumer drains what is left, then gets QueueClosed."""
        self._closed.set()

    async def put(self, record) -> None:
        if self._closed.is_set():
            raise QueueClosed("queue is closed")
        try:
            self._queue.put_nowait(record)
            return
        except asyncio.QueueFull:
            pass

        # Full: wait for room, or for closure, whichever comes first.
        if not await self._race(self._queue.put(record), None):
            raise QueueClosed("queue closed while waiting for room")

    async def get(self, timeout: float | None = None):
        """Return the next record.

        Raises asyncio.TimeoutError if nothing arrives within *timeout*
        seconds, and QueueClosed once the queue is closed and empty.
        """
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            if self._closed.is_set():
                raise QueueClosed("queue is closed") from None

        getter = asyncio.ensure_future(self._queue.get())
        if await self._race(getter, timeout):
            return getter.result()
        if self._closed.is_set():
            try:
                return self._queue.get_nowait()
            except asyncio.QueueEmpty:
                raise QueueClosed("queue is closed") from None
        raise asyncio.TimeoutError()

    async def _race(self, operation, timeout: float | None) -> bool:
        """Run *operation* against closure. True if the operation finished."""
        op_task = asyncio.ensure_future(operation)
        closed_task = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait(
                {op_task, closed_task},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            closed_task.cancel()
            if not op_task.done():
                op_task.cancel()
        return op_task.done() and not op_task.cancelled()
