"""Structured logging configuration built on structlog.

JSON output is meant for deployed services, console output for local runs
and scripts. Event names are snake_case and context travels as key/value
pairs rather than being formatted into the message.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "sitterlink"


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every log entry with the application name."""
    event_dict["app"] = APP_NAME
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, render JSON lines. If False, use the colored console renderer

    Example:
        >>> setup_logging(log_level="DEBUG", json_logs=False)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger with context binding support

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("conversations_loaded", user_id="u1", count=3)
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: Any) -> None:
    """Bind context variables for all subsequent log entries in this task.

    Example:
        >>> bind_context(user_id="u1")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Unbind context variables."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
