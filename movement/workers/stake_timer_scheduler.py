"""Per-stake refund timers.

Each STAKED record gets one cancellable task that sleeps until its
refundable_at, then evaluates the stake and, if it became REFUNDABLE,
refunds it. Timers are an optimisation: the reconciliation sweep covers
any timer lost to a restart, and evaluate() re-checks state, so a timer
firing late or twice is harmless.

Timers are cancelled when a stake reaches a terminal state through any
path (for example a forfeiture).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.stake_escrow_service import StakeEscrowService
from movement.domain.errors.stake import StakeAlreadyTerminalError, StakeNotFoundError
from movement.domain.models.stake import StakeRecord, StakeState
from movement.infrastructure.observability.logging import get_logger_for_service

Sleeper = Callable[[float], Awaitable[None]]


class StakeTimerScheduler:
    """Schedules and cancels per-stake refund timers."""

    def __init__(
        self,
        escrow: StakeEscrowService,
        time_authority: TimeAuthorityProtocol,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize the scheduler.

        Args:
            escrow: Escrow service whose stakes are timed.
            time_authority: Clock supplying fire times.
            sleep: Awaitable sleep, replaceable in tests.
        """
        self._escrow = escrow
        self._time = time_authority
        self._sleep = sleep
        self._timers: dict[str, asyncio.Task[None]] = {}
        self._log = get_logger_for_service(self.__class__.__name__, component="escrow")

        escrow.add_terminal_listener(self._on_terminal)

    @property
    def pending(self) -> frozenset[str]:
        """Stake ids with an armed timer."""
        return frozenset(self._timers)

    def schedule(self, stake: StakeRecord) -> None:
        """Arm (or re-arm) the refund timer for a STAKED record.

        Must be called from a running event loop.
        """
        if stake.state is not StakeState.STAKED:
            return
        self.cancel(stake.id)
        delay = max(0, stake.refundable_at - self._time.now())
        self._timers[stake.id] = asyncio.create_task(self._fire(stake.id, delay))
        self._log.debug("stake_timer_scheduled", stake_id=stake.id, delay_seconds=delay)

    def cancel(self, stake_id: str) -> bool:
        """Cancel a stake's timer.

        Returns:
            True if a timer was armed.
        """
        task = self._timers.pop(stake_id, None)
        if task is None:
            return False
        task.cancel()
        self._log.debug("stake_timer_cancelled", stake_id=stake_id)
        return True

    def _on_terminal(self, stake: StakeRecord) -> None:
        self.cancel(stake.id)

    async def _fire(self, stake_id: str, delay: float) -> None:
        await self._sleep(delay)
        self._timers.pop(stake_id, None)
        now = self._time.now()
        try:
            stake = await self._escrow.evaluate(stake_id, now)
            if stake.state is StakeState.REFUNDABLE:
                await self._escrow.refund(stake_id, now)
        except StakeNotFoundError:
            self._log.warning("stake_timer_orphaned", stake_id=stake_id)
        except StakeAlreadyTerminalError:
            self._log.debug("stake_timer_superseded", stake_id=stake_id)

    async def shutdown(self) -> None:
        """Cancel every armed timer and wait for them to finish."""
        tasks = list(self._timers.values())
        self._timers.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
