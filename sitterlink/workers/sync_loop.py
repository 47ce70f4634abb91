"""Periodic refresh loop for message synchronization."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Final

from sitterlink.config.logging_config import get_logger
from sitterlink.domain.messaging_constants import DEFAULT_SYNC_INTERVAL_SECONDS
from sitterlink.observability.metrics import (
    SYNC_CYCLE_DURATION_SECONDS,
    SYNC_CYCLES_SKIPPED_TOTAL,
)
from sitterlink.observability.tracing import correlation_scope

logger = get_logger(__name__)

RefreshCallback = Callable[[], Awaitable[object]]

TIMER_TRIGGER: Final[str] = "timer"
USER_ACTION_TRIGGER: Final[str] = "user_action"


class SyncLoop:
    """Drive a refresh callback from a single asyncio timer.

    At most one refresh runs at a time. A timer tick that fires while a
    refresh is in flight is skipped. Any other trigger arriving meanwhile is
    coalesced into a single follow-up refresh. Refresh failures are logged
    and counted; the loop keeps running.

    Example:
        >>> async with SyncLoop(session.refresh, interval_seconds=10) as loop:
        ...     loop.trigger(USER_ACTION_TRIGGER)
    """

    def __init__(
        self,
        refresh: RefreshCallback,
        *,
        interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS,
        name: str = "messages",
    ) -> None:
        if interval_seconds <= 0:
            msg = "interval_seconds must be positive"
            raise ValueError(msg)

        self._refresh = refresh
        self._interval = interval_seconds
        self._name = name
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: asyncio.Task[None] | None = None
        self._rerun_requested = False
        self._stopped = False

        self.cycles_completed = 0
        self.cycles_failed = 0
        self.cycles_skipped = 0

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def busy(self) -> bool:
        """True while a refresh (or its coalesced follow-up) is in flight."""
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> None:
        """Start the timer. Must be called from a running event loop.

        Raises:
            RuntimeError: If the loop was already stopped
        """
        if self._stopped:
            msg = f"Sync loop '{self._name}' was stopped and cannot be restarted"
            raise RuntimeError(msg)
        if self.running:
            return

        self._timer = asyncio.create_task(
            self._run_timer(), name=f"sync-loop-{self._name}"
        )
        logger.info(
            "sync_loop_started", loop=self._name, interval_seconds=self._interval
        )

    def trigger(self, reason: str = TIMER_TRIGGER) -> bool:
        """Request a refresh.

        Returns:
            True if a new refresh was started, False if the request was
            skipped, coalesced or rejected after ``stop``
        """
        if self._stopped:
            logger.debug("sync_trigger_rejected", loop=self._name, reason=reason)
            return False

        if self.busy:
            if reason == TIMER_TRIGGER:
                self.cycles_skipped += 1
                SYNC_CYCLES_SKIPPED_TOTAL.labels(reason="tick_in_flight").inc()
                logger.debug("sync_tick_skipped", loop=self._name)
            else:
                self._rerun_requested = True
                SYNC_CYCLES_SKIPPED_TOTAL.labels(reason="coalesced").inc()
                logger.debug("sync_trigger_coalesced", loop=self._name, reason=reason)
            return False

        self._in_flight = asyncio.create_task(
            self._run_cycles(reason), name=f"sync-refresh-{self._name}"
        )
        return True

    async def refresh_now(self, reason: str = USER_ACTION_TRIGGER) -> None:
        """Trigger a refresh and wait until no refresh is in flight."""
        self.trigger(reason)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        while self.busy:
            assert self._in_flight is not None
            await asyncio.shield(self._in_flight)

    async def stop(self, *, drain: bool = True) -> None:
        """Cancel the timer and reject further triggers.

        With ``drain`` the in-flight refresh is allowed to finish; otherwise
        it is cancelled. A pending coalesced follow-up is dropped either way.
        """
        if self._stopped and not self.busy and not self.running:
            return

        self._stopped = True
        self._rerun_requested = False

        if self._timer is not None:
            self._timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer
            self._timer = None

        if self.busy:
            assert self._in_flight is not None
            if drain:
                await asyncio.shield(self._in_flight)
            else:
                self._in_flight.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._in_flight

        logger.info(
            "sync_loop_stopped",
            loop=self._name,
            completed=self.cycles_completed,
            failed=self.cycles_failed,
            skipped=self.cycles_skipped,
        )

    async def __aenter__(self) -> SyncLoop:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.trigger(TIMER_TRIGGER)

    async def _run_cycles(self, reason: str) -> None:
        await self._run_cycle(reason)
        while self._rerun_requested and not self._stopped:
            self._rerun_requested = False
            await self._run_cycle("coalesced")

    async def _run_cycle(self, reason: str) -> None:
        with correlation_scope() as correlation_id:
            cycle_start = perf_counter()
            outcome = "cancelled"
            try:
                await self._refresh()
            except Exception:  # noqa: BLE001
                outcome = "failure"
                self.cycles_failed += 1
                logger.exception(
                    "sync_cycle_failed",
                    loop=self._name,
                    reason=reason,
                    correlation_id=correlation_id,
                )
            else:
                outcome = "success"
                self.cycles_completed += 1
                logger.debug(
                    "sync_cycle_completed",
                    loop=self._name,
                    reason=reason,
                    correlation_id=correlation_id,
                )
            finally:
                SYNC_CYCLE_DURATION_SECONDS.labels(outcome=outcome).observe(
                    perf_counter() - cycle_start
                )


__all__ = ["SyncLoop", "TIMER_TRIGGER", "USER_ACTION_TRIGGER"]
