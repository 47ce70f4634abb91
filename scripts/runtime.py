"""Common runtime helpers for SitterLink scripts."""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass, field

from sitterlink.config.logging_config import get_logger, setup_logging
from sitterlink.config.settings import Settings
from sitterlink.observability.metrics import ensure_metrics_exporter

logger = get_logger(__name__)


@dataclass
class ShutdownController:
    """Shutdown state shared by signal handlers and the running loop."""

    _event: asyncio.Event = field(default_factory=asyncio.Event)

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def request(self, signum: int) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("shutdown_signal_received", signal=sig_name)
        self._event.set()


def create_shutdown_controller() -> ShutdownController:
    return ShutdownController()


def install_signal_handlers(controller: ShutdownController) -> None:
    """Register SIGTERM/SIGINT handlers on the running event loop."""

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(signum, controller.request, signum)


def initialize_logging(settings: Settings, *, json_logs: bool = False) -> None:
    """Initialize structlog-based logging for scripts."""

    json_logs = json_logs or settings.json_logs
    setup_logging(log_level=settings.log_level, json_logs=json_logs)
    logger.info("logging_initialized", level=settings.log_level, json_logs=json_logs)


def start_metrics(settings: Settings, *, enabled: bool) -> None:
    if enabled:
        ensure_metrics_exporter(settings.metrics_port)


__all__ = [
    "ShutdownController",
    "create_shutdown_controller",
    "initialize_logging",
    "install_signal_handlers",
    "start_metrics",
]
