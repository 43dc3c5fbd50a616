"""Delivery sink — POSTs each batch to the collector, best effort."""

import logging
import time

import httpx

from dynamo.errors import DeliveryError, StartupError
from dynamo.serializer import serialize_batch

logger = logging.getLogger(__name__)


def create_client(timeout: float) -> httpx.AsyncClient:
    """Build the shared HTTP client, raising StartupError if that fails."""
    try:
        return httpx.AsyncClient(timeout=timeout)
    except Exception as exc:
        raise StartupError(f"could not initialize client: {exc}") from exc


class DeliverySink:
    """Sends one batch per request. Failures are logged and the batch is
    dropped; there is no retry and no buffering."""

    def __init__(self, url: str, client: httpx.AsyncClient, compress: bool = True, metrics=None):
        self._url = url
        self._client = client
        self._compress = compress
        self._metrics = metrics

    @property
    def url(self) -> str:
        return self._url

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self._compress:
            headers["Content-Encoding"] = "gzip"
        return headers

    async def send(self, batch: list[dict]) -> int:
        """POST *batch*; return the body size. Raises DeliveryError on failure."""
        body = serialize_batch(batch, compress=self._compress)
        try:
            response = await self._client.post(self._url, content=body, headers=self._headers())
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Could not connect to Vector: {exc}", len(batch)) from exc
        if response.is_error:
            raise DeliveryError(
                f"Vector rejected batch: HTTP {response.status_code}", len(batch)
            )
        return len(body)

    async def deliver(self, batch: list[dict], trigger: str = "size") -> bool:
        """Flush callback for the batcher. Returns True if the batch was accepted."""
        start = time.monotonic()
        try:
            size = await self.send(batch)
        except DeliveryError as exc:
            logger.warning("%s (dropped %d records)", exc, exc.batch_size)
            if self._metrics is not None:
                self._metrics.record_failure(len(batch))
            return False

        elapsed_ms = (time.monotonic() - start) * 1000
        if self._metrics is not None:
            self._metrics.record_batch(
                batch_size=len(batch), bytes_sent=size, send_time_ms=elapsed_ms,
            )
        logger.debug(
            "Sent %s batch of %d records (%d bytes, %.1fms)",
            trigger, len(batch), size, elapsed_ms,
        )
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
