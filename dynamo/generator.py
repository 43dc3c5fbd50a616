"""Generator task — paces one category's producer and feeds the fan-in queue."""

import logging
import time

from dynamo.categories import CategoryConfig, normalize
from dynamo.errors import QueueClosed
from dynamo.fanin import FanInQueue
from dynamo.identity import CommonMetadata
from dynamo.merge import stamp_record
from dynamo.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


class GeneratorTask:
    """Runs one category until the fan-in queue is closed.

    Each iteration waits for a rate-limiter token, calls the producer once,
    and pushes every resulting record (merged with the common metadata and
    stamped with the current time) onto the queue in production order.
    """

    def __init__(
        self,
        category: CategoryConfig,
        metadata: CommonMetadata,
        queue: FanInQueue,
        limiter: RateLimiter | None = None,
        metrics=None,
        clock_ms=None,
    ):
        self._category = category
        self._patch = metadata.as_patch()
        self._queue = queue
        self._limiter = limiter or RateLimiter.for_rate(category.rate)
        self._metrics = metrics
        self._clock_ms = clock_ms or now_ms
        self._last_ts = 0
        self._generated = 0

    @property
    def name(self) -> str:
        return self._category.name

    @property
    def generated(self) -> int:
        return self._generated

    def _timestamp(self) -> int:
        # Never step backwards within one task, even if the wall clock does.
        self._last_ts = max(self._last_ts, self._clock_ms())
        return self._last_ts

    async def run(self) -> None:
        logger.info("Starting %s generator at %d/s", self.name, self._category.rate)
        try:
            while True:
                await self._limiter.acquire()
                for record in normalize(self._category.producer()):
                    record = stamp_record(dict(record), self._patch, self._timestamp())
                    await self._queue.put(record)
                    self._generated += 1
                    if self._metrics is not None:
                        self._metrics.record_generated(self.name)
        except QueueClosed:
            logger.info(
                "Queue closed, stopping %s generator after %d records",
                self.name,
                self._generated,
            )
