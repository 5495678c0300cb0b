"""Token custody stub for development and testing.

Stands in for the external custody provider. Refunds succeed with a
deterministic reference unless failures are switched on, and repeated
refunds of the same stake return the first successful outcome.
"""

from __future__ import annotations

from movement.application.ports.token_custody import RefundOutcome
from movement.domain.models.stake import StakeRecord


class TokenCustodyStub:
    """In-memory TokenCustodyPort implementation.

    Attributes:
        refund_calls: Stake ids passed to refund(), in call order.
    """

    def __init__(self, fail_refunds: bool = False) -> None:
        """Initialize the stub.

        Args:
            fail_refunds: Whether refund() reports failure.
        """
        self._fail_refunds = fail_refunds
        self._completed: dict[str, RefundOutcome] = {}
        self.refund_calls: list[str] = []

    async def refund(self, stake: StakeRecord) -> RefundOutcome:
        self.refund_calls.append(stake.id)
        completed = self._completed.get(stake.id)
        if completed is not None:
            return completed
        if self._fail_refunds:
            return RefundOutcome.failed("custody unavailable")
        outcome = RefundOutcome.succeeded(f"refund-{stake.id}")
        self._completed[stake.id] = outcome
        return outcome

    # Test helpers

    def set_fail_refunds(self, fail: bool) -> None:
        """Switch refund failures on or off."""
        self._fail_refunds = fail

    def was_refunded(self, stake_id: str) -> bool:
        """Whether a refund for ``stake_id`` has completed."""
        return stake_id in self._completed

    def clear(self) -> None:
        """Forget all refunds and calls."""
        self._completed.clear()
        self.refund_calls.clear()
