"""Entry point for the dynamo traffic generator."""

import asyncio
import logging
import signal
import sys

from dynamo.config import load_config
from dynamo.errors import ConfigError, StartupError
from dynamo.identity import build_common_metadata
from dynamo.metrics import MetricsCollector
from dynamo.pipeline import Pipeline
from dynamo.sink import DeliverySink, create_client

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run(config) -> None:
    metadata = build_common_metadata()
    client = create_client(config.request_timeout)
    metrics = MetricsCollector()
    sink = DeliverySink(config.logs_url, client, compress=config.compress, metrics=metrics)
    pipeline = Pipeline(config, metadata, sink, metrics=metrics)

    loop = asyncio.get_running_loop()

    def handle_signal(signum):
        logger.info("Received signal %d, shutting down...", signum)
        pipeline.stop()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, handle_signal, signum)

    try:
        await pipeline.run()
    finally:
        await sink.aclose()


def main(argv=None) -> int:
    configure_logging()
    try:
        config = load_config(argv)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    configure_logging(config.log_level)
    try:
        asyncio.run(run(config))
    except StartupError as exc:
        logger.error("Startup failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
