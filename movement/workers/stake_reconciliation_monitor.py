"""Stake reconciliation monitor background service.

Periodically sweeps every non-terminal stake: STAKED records past their
refund time become REFUNDABLE, and REFUNDABLE records (including earlier
custody failures) are refunded. Recovers timers lost to restarts.

Note:
    This service should be started with the application lifecycle
    and stopped when the application shuts down.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.stake_escrow_service import (
    StakeEscrowService,
    SweepSummary,
)
from movement.config.engine_config import DEFAULT_SWEEP_INTERVAL_SECONDS


class StakeReconciliationMonitor:
    """Background stake sweep loop.

    Example:
        >>> monitor = StakeReconciliationMonitor(escrow, time_authority)
        >>> await monitor.start()
        >>> # ... application runs ...
        >>> await monitor.stop()
    """

    def __init__(
        self,
        escrow: StakeEscrowService,
        time_authority: TimeAuthorityProtocol,
        interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the monitor.

        Args:
            escrow: Escrow service to sweep.
            time_authority: Clock supplying the sweep time.
            interval_seconds: Sweep period.
        """
        self._escrow = escrow
        self._time = time_authority
        self._interval = interval_seconds
        self._running: bool = False
        self._task: Optional[asyncio.Task[None]] = None
        self._log = structlog.get_logger().bind(service="stake_reconciliation_monitor")

    @property
    def running(self) -> bool:
        """Check if the monitor is running."""
        return self._running

    @property
    def interval_seconds(self) -> int:
        return self._interval

    async def start(self) -> None:
        """Start the sweep loop. Calling start multiple times is safe."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        self._log.info("stake_reconciliation_monitor_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the sweep loop and wait for it to finish."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("stake_reconciliation_monitor_stopped")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                started = self._time.monotonic()
                summary = await self.run_once()
                elapsed = self._time.monotonic() - started
                self._log.debug(
                    "sweep_cycle_complete",
                    refunded=summary.refunded,
                    refund_failures=summary.refund_failures,
                    elapsed_seconds=elapsed,
                )
                await asyncio.sleep(max(0, self._interval - elapsed))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error("sweep_cycle_failed", error=str(e))
                await asyncio.sleep(self._interval)

    async def run_once(self) -> SweepSummary:
        """Run a single sweep at the current time."""
        return await self._escrow.sweep(self._time.now())
