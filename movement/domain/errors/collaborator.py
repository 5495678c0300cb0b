"""Errors raised by external collaborator adapters.

Representative lookup and message delivery are opaque remote services with
their own retry and timeout policy. Adapters translate transport failures
into these errors so callers never see httpx exceptions.
"""

from __future__ import annotations

from movement.domain.exceptions import MovementError


class RepresentativeLookupError(MovementError):
    """Raised when representatives cannot be resolved for a postal code."""

    def __init__(self, postal_code: str, reason: str) -> None:
        self.postal_code = postal_code
        self.reason = reason
        super().__init__(f"Representative lookup failed for {postal_code}: {reason}")


class InvalidPostalCodeError(RepresentativeLookupError):
    """Raised when a postal code is not a 5-digit ZIP code."""

    def __init__(self, postal_code: str) -> None:
        super().__init__(postal_code, "postal code must be 5 digits")


class MessageDeliveryError(MovementError):
    """Raised when no delivery provider is configured or a request is invalid."""

    def __init__(self, reason: str, provider: str | None = None) -> None:
        self.reason = reason
        self.provider = provider
        prefix = f"[{provider}] " if provider else ""
        super().__init__(f"{prefix}Message delivery failed: {reason}")
