"""Prometheus metrics for store access, use cases and the sync loop.

The exporter is never started on import; scripts call
``ensure_metrics_exporter`` once logging and settings are ready.
"""

from __future__ import annotations

import threading
from typing import Final

from prometheus_client import Counter, Histogram, start_http_server

from sitterlink.config.logging_config import get_logger

logger = get_logger(__name__)

STORE_CALL_FAILURES_TOTAL: Final[Counter] = Counter(
    "sitterlink_store_call_failures_total",
    "Entity store calls that raised a store error",
    labelnames=("entity", "operation"),
)

USE_CASE_DURATION_SECONDS: Final[Histogram] = Histogram(
    "sitterlink_use_case_duration_seconds",
    "Duration of use case executions in seconds",
    labelnames=("use_case",),
)

SYNC_CYCLE_DURATION_SECONDS: Final[Histogram] = Histogram(
    "sitterlink_sync_cycle_duration_seconds",
    "Duration of sync loop refresh cycles in seconds",
    labelnames=("outcome",),
)

SYNC_CYCLES_SKIPPED_TOTAL: Final[Counter] = Counter(
    "sitterlink_sync_cycles_skipped_total",
    "Sync triggers skipped or coalesced because a refresh was in flight",
    labelnames=("reason",),
)

_EXPORTER_LOCK = threading.Lock()
_EXPORTER_STARTED = False


def ensure_metrics_exporter(port: int) -> None:
    """Start the Prometheus HTTP exporter once per process."""

    global _EXPORTER_STARTED
    with _EXPORTER_LOCK:
        if _EXPORTER_STARTED:
            return

        try:
            start_http_server(port)
        except OSError as exc:
            logger.error(
                "metrics_exporter_start_failed",
                port=port,
                error=str(exc),
            )
            raise

        _EXPORTER_STARTED = True
        logger.info("metrics_exporter_started", port=port)


__all__ = [
    "STORE_CALL_FAILURES_TOTAL",
    "SYNC_CYCLES_SKIPPED_TOTAL",
    "SYNC_CYCLE_DURATION_SECONDS",
    "USE_CASE_DURATION_SECONDS",
    "ensure_metrics_exporter",
]
