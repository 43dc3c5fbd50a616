"""Batcher — groups queued records into batches bounded by size and age."""

import asyncio
import logging
import time

from dynamo.errors import QueueClosed
from dynamo.fanin import FanInQueue

logger = logging.getLogger(__name__)


class Batcher:
    """Single consumer of the fan-in queue.

    A batch is flushed as soon as it holds *max_size* records, or once
    *max_wait* seconds have passed since its first record arrived, whichever
    comes first. When the queue is closed the partial batch is flushed once
    and the loop ends.

    *on_flush* is awaited with ``(batch, trigger)``; while it runs no further
    records are pulled, so at most one delivery is in flight.
    """

    def __init__(
        self,
        queue: FanInQueue,
        max_size: int,
        max_wait: float,
        on_flush,
        metrics=None,
        time_func=None,
    ):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        if max_wait <= 0:
            raise ValueError("max_wait must be > 0")
        self._queue = queue
        self._max_size = max_size
        self._max_wait = max_wait
        self._on_flush = on_flush
        self._metrics = metrics
        self._time_func = time_func or time.monotonic
        self._batch: list = []
        self._deadline: float | None = None
        self._flushed = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def max_wait(self) -> float:
        return self._max_wait

    @property
    def pending_count(self) -> int:
        return len(self._batch)

    @property
    def batches_flushed(self) -> int:
        return self._flushed

    def _remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return self._deadline - self._time_func()

    def add(self, record) -> bool:
        """Append a record; return True when the batch has reached max_size."""
        if not self._batch:
            self._deadline = self._time_func() + self._max_wait
        self._batch.append(record)
        return len(self._batch) >= self._max_size

    def expired(self) -> bool:
        remaining = self._remaining()
        return bool(self._batch) and remaining is not None and remaining <= 0

    async def flush(self, trigger: str) -> None:
        if not self._batch:
            return
        batch, self._batch, self._deadline = self._batch, [], None
        self._flushed += 1
        if self._metrics is not None:
            self._metrics.record_flush(trigger)
        logger.debug("Flushing batch of %d records (%s)", len(batch), trigger)
        try:
            await self._on_flush(batch, trigger)
        except Exception:
            logger.exception("Flush handler failed; dropping batch of %d", len(batch))

    async def run(self) -> None:
        while True:
            if self.expired():
                await self.flush("timer")
                continue

            try:
                record = await self._queue.get(timeout=self._remaining())
            except asyncio.TimeoutError:
                await self.flush("timer")
                continue
            except QueueClosed:
                await self.flush("shutdown")
                logger.info("Queue closed, batcher stopped after %d batches", self._flushed)
                return

            if self.add(record):
                await self.flush("size")
            elif self.expired():
                await self.flush("timer")
