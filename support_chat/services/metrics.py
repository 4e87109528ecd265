"""CloudWatch metrics for calls to the completion provider.

Every LLM call records a request count and its latency; failed calls also
record an error count tagged with the ``ErrorKind``.  Data points are
buffered in memory and pushed by a daemon thread every
``FLUSH_INTERVAL_SECONDS`` when ``METRICS_ENABLED=true``.  When disabled,
calls are only logged at DEBUG and nothing is buffered.

>>> from support_chat.services.metrics import metrics
>>> metrics.record_call("anthropic", "generate_reply", latency_ms=812.0)
>>> metrics.record_call("anthropic", "generate_reply", latency_ms=30.0, error_kind="RATE_LIMIT_ERROR")
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "SupportChat"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # PutMetricData limit


def _datum(name: str, dimensions: dict[str, str], value: float, unit: str) -> dict[str, Any]:
    return {
        "MetricName": name,
        "Dimensions": [{"Name": k, "Value": v} for k, v in dimensions.items()],
        "Timestamp": datetime.now(UTC),
        "Value": value,
        "Unit": unit,
    }


class MetricsClient:
    """Buffered CloudWatch publisher."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    def record_call(
        self,
        service: str,
        operation: str,
        latency_ms: float,
        error_kind: str | None = None,
    ) -> None:
        """Record one provider call; ``error_kind`` marks it as failed."""
        status = "failure" if error_kind else "success"
        logger.debug(
            "Metric: %s %s %s latency=%.1fms", service, operation, status, latency_ms,
        )
        if not self._enabled:
            return

        batch = [
            _datum(
                "Provider/RequestCount",
                {"Service": service, "Operation": operation, "Status": status},
                1,
                "Count",
            ),
            _datum(
                "Provider/Latency",
                {"Service": service, "Operation": operation},
                latency_ms,
                "Milliseconds",
            ),
        ]
        if error_kind:
            batch.append(
                _datum(
                    "Provider/ErrorCount",
                    {"Service": service, "ErrorKind": error_kind},
                    1,
                    "Count",
                )
            )
        with self._lock:
            self._buffer.extend(batch)

    def flush(self) -> int:
        """Push buffered data points.  Returns how many were sent."""
        with self._lock:
            if not self._buffer:
                return 0
            batch = self._buffer[:]
            self._buffer.clear()

        if not self._enabled:
            logger.debug("Metrics disabled, dropped %d data points", len(batch))
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        threading.Thread(target=_loop, daemon=True, name="metrics-flush").start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)


metrics = MetricsClient()
