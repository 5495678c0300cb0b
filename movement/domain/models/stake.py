"""Stake escrow domain model.

A stake is a refundable deposit placed when creating a campaign to make
abusive campaign creation expensive. The record is a small state machine
driven by a timer (refund delay) and by external abuse determinations.

State Machine:
    STAKED -> REFUNDABLE (refund delay elapsed, no forfeiture signal)
    STAKED -> FORFEITED (abuse determination)
    REFUNDABLE -> REFUNDED (custody refund succeeded)
    REFUNDABLE -> FORFEITED (abuse determination before refund)

Terminal States:
    REFUNDED and FORFEITED are final. No reverse transition exists.

Constraints:
- refundable_at is fixed at creation and never recomputed
- Forfeiture dominates a simultaneous refund
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class StakeState(str, Enum):
    """State in the stake escrow lifecycle."""

    STAKED = "staked"
    REFUNDABLE = "refundable"
    REFUNDED = "refunded"
    FORFEITED = "forfeited"

    def is_terminal(self) -> bool:
        """Check if this state is final.

        Returns:
            True for REFUNDED and FORFEITED.
        """
        return self in TERMINAL_STAKE_STATES

    def valid_transitions(self) -> frozenset[StakeState]:
        """Get valid transitions from this state.

        Returns:
            Frozenset of reachable states. Empty for terminal states.
        """
        return STAKE_TRANSITION_MATRIX.get(self, frozenset())


TERMINAL_STAKE_STATES: frozenset[StakeState] = frozenset(
    {
        StakeState.REFUNDED,
        StakeState.FORFEITED,
    }
)

STAKE_TRANSITION_MATRIX: dict[StakeState, frozenset[StakeState]] = {
    StakeState.STAKED: frozenset(
        {
            StakeState.REFUNDABLE,
            StakeState.FORFEITED,
        }
    ),
    StakeState.REFUNDABLE: frozenset(
        {
            StakeState.REFUNDED,
            StakeState.FORFEITED,
        }
    ),
    StakeState.REFUNDED: frozenset(),
    StakeState.FORFEITED: frozenset(),
}


@dataclass(frozen=True, eq=True)
class StakeRecord:
    """A refundable deposit tied to a campaign.

    Attributes:
        id: Stake identifier.
        campaign_id: Campaign the stake backs.
        depositor_key: Key of the depositor (the campaign creator).
        amount: Deposit in satoshis.
        staked_at: Deposit confirmation time (unix seconds).
        refundable_at: staked_at + refund delay. Never recomputed.
        state: Current lifecycle state.
        forfeiture_reason: Reason recorded on forfeiture.
        refunded_at: When the refund completed.
        refund_reference: Custody provider identifier for the refund.
    """

    id: str
    campaign_id: str
    depositor_key: str
    amount: int
    staked_at: int
    refundable_at: int
    state: StakeState = field(default=StakeState.STAKED)
    forfeiture_reason: str | None = None
    refunded_at: int | None = None
    refund_reference: str | None = None

    def __post_init__(self) -> None:
        """Validate stake record fields."""
        if self.amount <= 0:
            raise ValueError("Stake amount must be positive")
        if self.refundable_at < self.staked_at:
            raise ValueError("refundable_at must not precede staked_at")

    @classmethod
    def open(
        cls,
        stake_id: str,
        campaign_id: str,
        depositor_key: str,
        amount: int,
        staked_at: int,
        refund_delay_seconds: int,
    ) -> StakeRecord:
        """Create a new STAKED record with its refund time fixed.

        Args:
            stake_id: Identifier for the new record.
            campaign_id: Campaign being backed.
            depositor_key: Depositor identity key.
            amount: Deposit in satoshis.
            staked_at: Deposit confirmation time.
            refund_delay_seconds: Delay before the stake becomes refundable.

        Returns:
            New StakeRecord in STAKED state.
        """
        return cls(
            id=stake_id,
            campaign_id=campaign_id,
            depositor_key=depositor_key,
            amount=amount,
            staked_at=staked_at,
            refundable_at=staked_at + refund_delay_seconds,
        )

    def is_due(self, now: int) -> bool:
        """Whether the refund delay has elapsed at ``now``."""
        return now >= self.refundable_at

    def with_state(
        self,
        new_state: StakeState,
        *,
        reason: str | None = None,
        refunded_at: int | None = None,
        refund_reference: str | None = None,
    ) -> StakeRecord:
        """Return a copy in ``new_state``, enforcing the transition matrix.

        Args:
            new_state: Target state.
            reason: Forfeiture reason (FORFEITED only).
            refunded_at: Refund completion time (REFUNDED only).
            refund_reference: Custody identifier (REFUNDED only).

        Returns:
            New StakeRecord. refundable_at is carried over unchanged.

        Raises:
            StakeAlreadyTerminalError: If the record is REFUNDED or FORFEITED.
            InvalidStakeTransitionError: If the transition is not allowed.
        """
        # Import here to avoid circular dependency
        from movement.domain.errors.stake import (
            InvalidStakeTransitionError,
            StakeAlreadyTerminalError,
        )

        if self.state.is_terminal():
            raise StakeAlreadyTerminalError(self.id, self.state)

        if new_state not in self.state.valid_transitions():
            raise InvalidStakeTransitionError(self.id, self.state, new_state)

        return replace(
            self,
            state=new_state,
            forfeiture_reason=reason if new_state is StakeState.FORFEITED else None,
            refunded_at=refunded_at if new_state is StakeState.REFUNDED else None,
            refund_reference=(
                refund_reference if new_state is StakeState.REFUNDED else None
            ),
        )
