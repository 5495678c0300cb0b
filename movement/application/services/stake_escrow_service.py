"""Stake escrow state machine service.

Drives StakeRecord through its lifecycle:

    STAKED -> REFUNDABLE -> REFUNDED
    STAKED | REFUNDABLE -> FORFEITED

Concurrency:
- Single writer per record: every transition of a stake happens under
  that stake's asyncio.Lock.
- Forfeiture is dominant. forfeit() records the abuse signal before it
  touches any record, and refund() re-checks the signal under the record
  lock immediately before calling custody. A forfeiture that lands while
  a refund is in flight finds the record already REFUNDED and is a no-op.
- A failed custody refund leaves the record REFUNDABLE; the sweep retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from uuid import uuid4

from movement.application.ports.read_model import ReadModelPort
from movement.application.ports.token_custody import RefundOutcome, TokenCustodyPort
from movement.application.services.base import LoggingMixin
from movement.config.engine_config import StakeConfig
from movement.domain.errors.stake import (
    InvalidStakeAmountError,
    InvalidStakeTransitionError,
    StakeAlreadyTerminalError,
    StakeNotFoundError,
)
from movement.domain.models.stake import StakeRecord, StakeState
from movement.infrastructure.monitoring.metrics import get_metrics_collector

TerminalListener = Callable[[StakeRecord], None]


@dataclass(frozen=True)
class SweepSummary:
    """What one reconciliation sweep did.

    Attributes:
        evaluated: STAKED records re-evaluated.
        became_refundable: Records moved to REFUNDABLE.
        refunded: Records moved to REFUNDED.
        refund_failures: Custody refunds that failed and stay REFUNDABLE.
        forfeited: Records moved to FORFEITED by a recorded signal.
    """

    evaluated: int = 0
    became_refundable: int = 0
    refunded: int = 0
    refund_failures: int = 0
    forfeited: int = 0


class StakeEscrowService(LoggingMixin):
    """Owns every stake state transition.

    Attributes:
        _read_model: Where stake records are stored.
        _custody: Token custody collaborator.
        _config: Amount bounds and refund delay.
        _locks: Per-stake locks.
        _forfeiture_signals: Abuse determinations by campaign id.
        _terminal_listeners: Callbacks run when a record becomes terminal.
    """

    def __init__(
        self,
        read_model: ReadModelPort,
        custody: TokenCustodyPort,
        config: StakeConfig | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the escrow service.

        Args:
            read_model: Read model store.
            custody: Token custody adapter.
            config: Stake configuration (defaults to StakeConfig()).
            id_factory: Generates stake ids (defaults to uuid4 strings).
        """
        self._read_model = read_model
        self._custody = custody
        self._config = config or StakeConfig()
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._locks: dict[str, asyncio.Lock] = {}
        self._forfeiture_signals: dict[str, str] = {}
        self._terminal_listeners: list[TerminalListener] = []

        self._init_logger(component="escrow")

    @property
    def config(self) -> StakeConfig:
        return self._config

    def add_terminal_listener(self, listener: TerminalListener) -> None:
        """Register a callback for records reaching REFUNDED or FORFEITED."""
        self._terminal_listeners.append(listener)

    def has_forfeiture_signal(self, campaign_id: str) -> bool:
        return campaign_id in self._forfeiture_signals

    def _lock_for(self, stake_id: str) -> asyncio.Lock:
        lock = self._locks.get(stake_id)
        if lock is None:
            lock = self._locks.setdefault(stake_id, asyncio.Lock())
        return lock

    async def _load(self, stake_id: str) -> StakeRecord:
        stake = await self._read_model.get_stake(stake_id)
        if stake is None:
            raise StakeNotFoundError(stake_id)
        return stake

    async def _store_transition(self, stake: StakeRecord) -> None:
        await self._read_model.put_stake(stake)
        get_metrics_collector().record_stake_transition(stake.state.value)
        if stake.state.is_terminal():
            self._locks.pop(stake.id, None)
            for listener in self._terminal_listeners:
                listener(stake)

    def new_stake(
        self,
        campaign_id: str,
        depositor_key: str,
        amount: int,
        now: int,
        stake_id: str | None = None,
    ) -> StakeRecord:
        """Build a STAKED record without storing it.

        Used when the stake must be written together with its campaign.

        Raises:
            InvalidStakeAmountError: If amount is outside the configured range.
        """
        if not self._config.accepts(amount):
            raise InvalidStakeAmountError(
                amount, self._config.min_amount, self._config.max_amount
            )
        return StakeRecord.open(
            stake_id=stake_id or self._id_factory(),
            campaign_id=campaign_id,
            depositor_key=depositor_key,
            amount=amount,
            staked_at=now,
            refund_delay_seconds=self._config.refund_delay_seconds,
        )

    async def open_stake(
        self,
        campaign_id: str,
        depositor_key: str,
        amount: int,
        now: int,
        stake_id: str | None = None,
    ) -> StakeRecord:
        """Create and store a STAKED record.

        Args:
            campaign_id: Campaign the stake backs.
            depositor_key: Depositor identity key.
            amount: Deposit in sats.
            now: Deposit confirmation time.
            stake_id: Explicit id (generated when omitted).

        Returns:
            The stored record, refundable at now + refund delay.

        Raises:
            InvalidStakeAmountError: If amount is outside the configured range.
        """
        stake = self.new_stake(campaign_id, depositor_key, amount, now, stake_id)
        await self._read_model.put_stake(stake)
        get_metrics_collector().record_stake_transition(stake.state.value)
        self._log_operation(
            "open_stake",
            stake_id=stake.id,
            campaign_id=campaign_id,
        ).info(
            "stake_opened",
            amount=amount,
            refundable_at=stake.refundable_at,
        )
        return stake

    async def evaluate(self, stake_id: str, now: int) -> StakeRecord:
        """Move a STAKED record to REFUNDABLE once its delay has elapsed.

        A recorded forfeiture signal for the campaign forfeits the record
        instead. Records in any other state are returned unchanged, so
        timers and sweeps may call this freely.

        Args:
            stake_id: Stake to evaluate.
            now: Evaluation time.

        Returns:
            The record after evaluation.

        Raises:
            StakeNotFoundError: If no such stake exists.
        """
        async with self._lock_for(stake_id):
            stake = await self._load(stake_id)
            if stake.state is not StakeState.STAKED:
                return stake

            log = self._log_operation(
                "evaluate", stake_id=stake_id, campaign_id=stake.campaign_id
            )
            reason = self._forfeiture_signals.get(stake.campaign_id)
            if reason is not None:
                forfeited = stake.with_state(StakeState.FORFEITED, reason=reason)
                await self._store_transition(forfeited)
                log.info("stake_forfeited", reason=reason)
                return forfeited

            if not stake.is_due(now):
                return stake

            refundable = stake.with_state(StakeState.REFUNDABLE)
            await self._store_transition(refundable)
            log.info("stake_refundable", refundable_at=stake.refundable_at, now=now)
            return refundable

    async def refund(self, stake_id: str, now: int) -> StakeRecord:
        """Refund a REFUNDABLE record through custody.

        Idempotent on REFUNDED records. A failed custody call leaves the
        record REFUNDABLE for a later retry.

        Args:
            stake_id: Stake to refund.
            now: Refund time.

        Returns:
            The record after the attempt (REFUNDED, REFUNDABLE, or FORFEITED
            when a forfeiture signal won the race).

        Raises:
            StakeNotFoundError: If no such stake exists.
            StakeAlreadyTerminalError: If the record is FORFEITED.
            InvalidStakeTransitionError: If the record is still STAKED.
        """
        async with self._lock_for(stake_id):
            stake = await self._load(stake_id)
            if stake.state is StakeState.REFUNDED:
                return stake
            if stake.state is StakeState.FORFEITED:
                raise StakeAlreadyTerminalError(stake.id, stake.state)
            if stake.state is not StakeState.REFUNDABLE:
                raise InvalidStakeTransitionError(
                    stake.id, stake.state, StakeState.REFUNDED
                )

            log = self._log_operation(
                "refund", stake_id=stake_id, campaign_id=stake.campaign_id
            )

            reason = self._forfeiture_signals.get(stake.campaign_id)
            if reason is not None:
                forfeited = stake.with_state(StakeState.FORFEITED, reason=reason)
                await self._store_transition(forfeited)
                log.info("escrow_conflict_resolved", resolution="forfeited", reason=reason)
                return forfeited

            try:
                outcome = await self._custody.refund(stake)
            except Exception as exc:
                log.warning("custody_refund_raised", error=str(exc), exc_info=True)
                outcome = RefundOutcome.failed(str(exc))

            if not outcome.success:
                get_metrics_collector().increment_refund_failures()
                log.warning("stake_refund_failed", error=outcome.error)
                return stake

            refunded = stake.with_state(
                StakeState.REFUNDED,
                refunded_at=now,
                refund_reference=outcome.reference,
            )
            await self._store_transition(refunded)
            log.info("stake_refunded", amount=stake.amount, reference=outcome.reference)
            return refunded

    async def forfeit(self, campaign_id: str, reason: str, now: int) -> list[StakeRecord]:
        """Record an abuse determination and forfeit the campaign's stakes.

        The signal is recorded before any record is touched so a refund
        racing with this call observes it. Terminal records are left alone.

        Args:
            campaign_id: Campaign judged abusive.
            reason: Why the stake is forfeited.
            now: Determination time.

        Returns:
            Records moved to FORFEITED by this call.
        """
        self._forfeiture_signals.setdefault(campaign_id, reason)
        log = self._log_operation("forfeit", campaign_id=campaign_id)
        log.info("forfeiture_signal_recorded", reason=reason, now=now)

        forfeited: list[StakeRecord] = []
        for candidate in await self._read_model.list_stakes():
            if candidate.campaign_id != campaign_id or candidate.state.is_terminal():
                continue
            async with self._lock_for(candidate.id):
                stake = await self._load(candidate.id)
                if stake.state.is_terminal():
                    continue
                record = stake.with_state(
                    StakeState.FORFEITED,
                    reason=self._forfeiture_signals[campaign_id],
                )
                await self._store_transition(record)
                forfeited.append(record)
                log.info("stake_forfeited", stake_id=stake.id, amount=stake.amount)
        return forfeited

    async def sweep(self, now: int) -> SweepSummary:
        """Reconcile every non-terminal record at ``now``.

        Re-evaluates STAKED records, then retries refunds for every
        REFUNDABLE record, including those made refundable in this pass.

        Returns:
            SweepSummary of what changed.
        """
        evaluated = became_refundable = refunded = failures = forfeited = 0

        for stake in await self._read_model.list_stakes(StakeState.STAKED):
            evaluated += 1
            result = await self.evaluate(stake.id, now)
            if result.state is StakeState.REFUNDABLE:
                became_refundable += 1
            elif result.state is StakeState.FORFEITED:
                forfeited += 1

        for stake in await self._read_model.list_stakes(StakeState.REFUNDABLE):
            try:
                result = await self.refund(stake.id, now)
            except StakeAlreadyTerminalError:
                forfeited += 1
                continue
            if result.state is StakeState.REFUNDED:
                refunded += 1
            elif result.state is StakeState.FORFEITED:
                forfeited += 1
            else:
                failures += 1

        summary = SweepSummary(
            evaluated=evaluated,
            became_refundable=became_refundable,
            refunded=refunded,
            refund_failures=failures,
            forfeited=forfeited,
        )
        self._log_operation("sweep").debug(
            "stake_sweep_completed",
            now=now,
            evaluated=summary.evaluated,
            became_refundable=summary.became_refundable,
            refunded=summary.refunded,
            refund_failures=summary.refund_failures,
            forfeited=summary.forfeited,
        )
        return summary
