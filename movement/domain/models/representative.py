"""Representative and message delivery models.

These describe the payloads exchanged with the representative-lookup and
message-delivery collaborators. None of this data ever appears in a
broadcast event: ZIP codes, addresses, and representative identities stay
on the caller's side of the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from movement.domain.models.campaign import TargetLevel


@dataclass(frozen=True)
class ContactChannels:
    """How a representative can be reached."""

    email: str | None = None
    phone: str | None = None
    twitter: str | None = None
    webform: str | None = None


@dataclass(frozen=True)
class Representative:
    """An elected representative returned by the lookup collaborator.

    Attributes:
        id: Provider identifier.
        name: Representative name.
        office: Office or position title.
        level: Government level.
        contact: Contact channels.
        party: Political party, when provided.
        accuracy: Provider match accuracy (0..1), when provided.
    """

    id: str
    name: str
    office: str
    level: TargetLevel
    contact: ContactChannels
    party: str | None = None
    accuracy: float | None = None


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a message delivery attempt.

    Attributes:
        success: Whether the provider accepted the message.
        provider: Provider name (sendgrid, mailgun).
        recipient: Recipient address.
        message: Provider message or error detail.
        provider_message_id: Provider-side identifier, when returned.
    """

    success: bool
    provider: str
    recipient: str
    message: str | None = None
    provider_message_id: str | None = None
