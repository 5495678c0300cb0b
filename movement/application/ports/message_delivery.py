"""Message Delivery Port - send a message to a representative.

Delivery providers (SendGrid, Mailgun) are opaque remote services with
their own retry and timeout policy.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from movement.domain.models.representative import DeliveryResult


@runtime_checkable
class MessageDeliveryPort(Protocol):
    """Protocol for outbound message delivery."""

    @property
    def provider(self) -> str:
        """Provider name used in DeliveryResult and logs."""
        ...

    async def send(self, recipient: str, subject: str, body: str) -> DeliveryResult:
        """Deliver a message.

        Args:
            recipient: Recipient email address.
            subject: Message subject.
            body: Plain text body.

        Returns:
            DeliveryResult. Provider rejections are reported with
            success=False rather than raised.

        Raises:
            MessageDeliveryError: If the request is invalid before sending.
        """
        ...
