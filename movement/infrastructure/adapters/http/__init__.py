"""HTTP adapters for remote collaborators."""

from movement.infrastructure.adapters.http.message_delivery import (
    MailgunMessageDelivery,
    SendGridMessageDelivery,
    build_message_delivery,
)
from movement.infrastructure.adapters.http.representative_lookup import (
    CachingRepresentativeLookup,
    FiveCallsRepresentativeLookup,
)

__all__ = [
    "CachingRepresentativeLookup",
    "FiveCallsRepresentativeLookup",
    "MailgunMessageDelivery",
    "SendGridMessageDelivery",
    "build_message_delivery",
]
