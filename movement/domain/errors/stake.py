"""Stake escrow errors.

Forfeiture/refund races are not errors: they resolve in favour of
forfeiture inside the escrow service. These errors cover misuse of the
state machine and invalid deposits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from movement.domain.exceptions import MovementError

if TYPE_CHECKING:
    from movement.domain.models.stake import StakeState


class InvalidStakeTransitionError(MovementError):
    """Raised when a transition is not in the stake transition matrix.

    Attributes:
        stake_id: Stake record identifier.
        from_state: Current state.
        to_state: Attempted target state.
    """

    def __init__(
        self,
        stake_id: str,
        from_state: StakeState,
        to_state: StakeState,
    ) -> None:
        self.stake_id = stake_id
        self.from_state = from_state
        self.to_state = to_state
        allowed = sorted(s.value for s in from_state.valid_transitions())
        super().__init__(
            f"Invalid stake transition for {stake_id}: "
            f"{from_state.value} -> {to_state.value}. Valid transitions: {allowed}"
        )


class StakeAlreadyTerminalError(MovementError):
    """Raised when attempting to transition a refunded or forfeited stake."""

    def __init__(self, stake_id: str, terminal_state: StakeState) -> None:
        self.stake_id = stake_id
        self.terminal_state = terminal_state
        super().__init__(
            f"Stake {stake_id} is already {terminal_state.value}. "
            "Terminal states cannot be modified."
        )


class InvalidStakeAmountError(MovementError):
    """Raised when a deposit amount falls outside the configured bounds."""

    def __init__(self, amount: int, min_amount: int, max_amount: int) -> None:
        self.amount = amount
        self.min_amount = min_amount
        self.max_amount = max_amount
        super().__init__(
            f"Stake amount {amount} sats outside allowed range "
            f"[{min_amount}, {max_amount}]"
        )


class StakeNotFoundError(MovementError):
    """Raised when a stake record does not exist."""

    def __init__(self, stake_id: str) -> None:
        self.stake_id = stake_id
        super().__init__(f"Stake not found: {stake_id}")
