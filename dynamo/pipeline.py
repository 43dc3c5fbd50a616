"""Pipeline — wires generator tasks, the fan-in queue, the batcher and the sink."""

import asyncio
import logging

from dynamo.batcher import Batcher
from dynamo.categories import CategoryConfig, build_categories
from dynamo.config import GeneratorConfig
from dynamo.fanin import FanInQueue
from dynamo.generator import GeneratorTask
from dynamo.identity import CommonMetadata
from dynamo.metrics import MetricsCollector
from dynamo.sink import DeliverySink

logger = logging.getLogger(__name__)


class Pipeline:
    """Runs every enabled category concurrently into one batched delivery path.

    Generators push into a shared bounded queue; the batcher is its only
    consumer and awaits the sink for each batch. ``stop()`` closes the queue:
    generators exit on their next push and the batcher flushes what is left.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        metadata: CommonMetadata,
        sink: DeliverySink,
        categories: list[CategoryConfig] | None = None,
        metrics: MetricsCollector | None = None,
        limiter_factory=None,
    ):
        self._config = config
        self._metadata = metadata
        self._sink = sink
        self._categories = (
            build_categories(config) if categories is None else
            [c for c in categories if c.rate > 0]
        )
        self._metrics = metrics or MetricsCollector()
        self._limiter_factory = limiter_factory
        self._queue: FanInQueue | None = None
        self._generators: list[GeneratorTask] = []
        self._tasks: list[asyncio.Task] = []
        self._stopped = asyncio.Event()

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def generators(self) -> list[GeneratorTask]:
        return list(self._generators)

    @property
    def categories(self) -> list[CategoryConfig]:
        return list(self._categories)

    def _build(self) -> Batcher:
        self._queue = FanInQueue(self._config.queue_capacity)
        batcher = Batcher(
            self._queue,
            max_size=self._config.batch_size,
            max_wait=self._config.batch_timeout,
            on_flush=self._sink.deliver,
            metrics=self._metrics,
        )
        for category in self._categories:
            limiter = (
                self._limiter_factory(category.rate) if self._limiter_factory else None
            )
            self._generators.append(
                GeneratorTask(
                    category, self._metadata, self._queue,
                    limiter=limiter, metrics=self._metrics,
                )
            )
        return batcher

    @staticmethod
    def _log_task_exit(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Task %s failed; other tasks keep running", task.get_name(),
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def _report_stats(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            logger.info("Metrics: %s", self._metrics.snapshot())

    async def run(self) -> None:
        """Run until stop() is called, then wait for the final flush."""
        batcher = self._build()
        if not self._generators:
            logger.warning("All category rates are 0; nothing will be generated")

        logger.info(
            "Sending to %s: %d categor%s, batch_size=%d, batch_timeout=%.1fs",
            self._sink.url,
            len(self._generators),
            "y" if len(self._generators) == 1 else "ies",
            self._config.batch_size,
            self._config.batch_timeout,
        )

        batcher_task = asyncio.create_task(batcher.run(), name="batcher")
        batcher_task.add_done_callback(self._log_task_exit)
        for generator in self._generators:
            task = asyncio.create_task(generator.run(), name=f"generator-{generator.name}")
            task.add_done_callback(self._log_task_exit)
            self._tasks.append(task)

        reporter = None
        if self._config.stats_interval > 0:
            reporter = asyncio.create_task(
                self._report_stats(self._config.stats_interval), name="stats",
            )

        try:
            await self._stopped.wait()
            self._queue.close()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            await asyncio.gather(batcher_task, return_exceptions=True)
        finally:
            if reporter is not None:
                reporter.cancel()
            for task in [*self._tasks, batcher_task]:
                if not task.done():
                    task.cancel()
            logger.info("Final metrics: %s", self._metrics.snapshot())

    def stop(self) -> None:
        """Request shutdown. Safe to call before run() has started waiting."""
        self._stopped.set()
