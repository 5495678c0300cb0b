"""Token Custody Port - refunds of escrowed stake tokens.

Minting and redeeming tokens is the custody provider's business. The
escrow state machine only needs to ask for a refund and learn whether it
went through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from movement.domain.models.stake import StakeRecord


@dataclass(frozen=True)
class RefundOutcome:
    """Result of a custody refund call.

    Attributes:
        success: Whether the refund was completed by the provider.
        reference: Provider-side identifier of the refund (on success).
        error: Failure description (on failure).
    """

    success: bool
    reference: str | None = None
    error: str | None = None

    @classmethod
    def succeeded(cls, reference: str) -> RefundOutcome:
        return cls(success=True, reference=reference)

    @classmethod
    def failed(cls, error: str) -> RefundOutcome:
        return cls(success=False, error=error)


@runtime_checkable
class TokenCustodyPort(Protocol):
    """Protocol for the token custody collaborator.

    Implementations must be idempotent per stake id: asking twice for the
    same stake must not pay out twice.
    """

    async def refund(self, stake: StakeRecord) -> RefundOutcome:
        """Return the stake amount to its depositor.

        Args:
            stake: The REFUNDABLE stake to refund.

        Returns:
            RefundOutcome. Transport failures are reported as
            unsuccessful outcomes, not raised.
        """
        ...
