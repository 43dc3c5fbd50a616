"""Metrics collector — thread-safe counters for generation and delivery."""

import threading
import time
import logging

logger = logging.getLogger(__name__)

TRIGGERS = ("size", "timer", "shutdown")


class MetricsCollector:
    """Collects and reports metrics about record generation and batch delivery."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generated: dict[str, int] = {}
        self._batches_sent: int = 0
        self._batches_failed: int = 0
        self._records_sent: int = 0
        self._records_dropped: int = 0
        self._total_bytes: int = 0
        self._total_send_ms: float = 0.0
        self._max_send_ms: float = 0.0
        self._flush_triggers: dict = {t: 0 for t in TRIGGERS}
        self._start_time = time.monotonic()

    def record_generated(self, category: str, count: int = 1) -> None:
        with self._lock:
            self._generated[category] = self._generated.get(category, 0) + count

    def record_flush(self, trigger: str) -> None:
        with self._lock:
            self._flush_triggers[trigger] = self._flush_triggers.get(trigger, 0) + 1

    def record_batch(
        self,
        batch_size: int,
        bytes_sent: int,
        send_time_ms: float,
    ) -> None:
        """Record a successfully delivered batch.

        Args:
            batch_size: Number of records in the batch.
            bytes_sent: Request body size in bytes (after compression).
            send_time_ms: Time taken by the POST, in milliseconds.
        """
        with self._lock:
            self._batches_sent += 1
            self._records_sent += batch_size
            self._total_bytes += bytes_sent
            self._total_send_ms += send_time_ms
            self._max_send_ms = max(self._max_send_ms, send_time_ms)

    def record_failure(self, batch_size: int) -> None:
        """Record a batch that was dropped after a delivery failure."""
        with self._lock:
            self._batches_failed += 1
            self._records_dropped += batch_size

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all collected metrics."""
        with self._lock:
            sent = self._batches_sent
            return {
                "generated": dict(self._generated),
                "total_generated": sum(self._generated.values()),
                "batches_sent": sent,
                "batches_failed": self._batches_failed,
                "records_sent": self._records_sent,
                "records_dropped": self._records_dropped,
                "total_bytes": self._total_bytes,
                "avg_batch_size": self._records_sent / sent if sent else 0.0,
                "avg_send_time_ms": self._total_send_ms / sent if sent else 0.0,
                "max_send_time_ms": self._max_send_ms,
                "flush_triggers": dict(self._flush_triggers),
                "uptime_seconds": time.monotonic() - self._start_time,
            }
