"""Shared failure reporting for entity store adapters."""

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.exceptions import StoreError
from sitterlink.observability.metrics import STORE_CALL_FAILURES_TOTAL

logger = get_logger(__name__)


def store_error(entity: str, operation: str, detail: str = "") -> StoreError:
    """Record a failed store call and build the error to raise."""
    STORE_CALL_FAILURES_TOTAL.labels(entity=entity, operation=operation).inc()
    logger.warning(
        "store_call_failed", entity=entity, operation=operation, detail=detail
    )
    return StoreError(entity, operation, detail)


__all__ = ["store_error"]
