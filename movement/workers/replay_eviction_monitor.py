"""Replay eviction monitor background service.

Periodically evicts replay keys past the retention horizon (trending
window plus grace) and prunes rate-limit state that can no longer block
an admissible event. Eviction raises the replay guard's low-water mark,
so evicted attestations are still answered DUPLICATE.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.rate_limit_service import RateLimitService
from movement.application.services.replay_guard_service import ReplayGuardService
from movement.config.engine_config import DEFAULT_SWEEP_INTERVAL_SECONDS


@dataclass(frozen=True)
class EvictionSummary:
    """What one eviction cycle removed."""

    replay_keys: int
    rate_timestamps: int


class ReplayEvictionMonitor:
    """Background replay-index eviction loop."""

    def __init__(
        self,
        replay_guard: ReplayGuardService,
        rate_limiter: RateLimitService,
        time_authority: TimeAuthorityProtocol,
        interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the monitor.

        Args:
            replay_guard: Guard whose index is evicted.
            rate_limiter: Limiter whose state is pruned.
            time_authority: Clock supplying the eviction time.
            interval_seconds: Eviction period.
        """
        self._replay_guard = replay_guard
        self._rate_limiter = rate_limiter
        self._time = time_authority
        self._interval = interval_seconds
        self._running: bool = False
        self._task: Optional[asyncio.Task[None]] = None
        self._log = structlog.get_logger().bind(service="replay_eviction_monitor")

    @property
    def running(self) -> bool:
        """Check if the monitor is running."""
        return self._running

    async def start(self) -> None:
        """Start the eviction loop. Calling start multiple times is safe."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        self._log.info("replay_eviction_monitor_started", interval=self._interval)

    async def stop(self) -> None:
        """Stop the eviction loop and wait for it to finish."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._log.info("replay_eviction_monitor_stopped")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.error("eviction_cycle_failed", error=str(e))
                await asyncio.sleep(self._interval)

    async def run_once(self) -> EvictionSummary:
        """Run a single eviction cycle at the current time."""
        now = self._time.now()
        summary = EvictionSummary(
            replay_keys=await self._replay_guard.evict(now),
            rate_timestamps=await self._rate_limiter.prune(now),
        )
        self._log.debug(
            "eviction_cycle_complete",
            replay_keys=summary.replay_keys,
            rate_timestamps=summary.rate_timestamps,
        )
        return summary
