"""Event validation errors.

Malformed events are dropped by the ingestion pipeline. They are logged and
counted, and they never abort ingestion of the events that follow.
"""

from __future__ import annotations

from movement.domain.exceptions import MovementError


class MalformedEventError(MovementError):
    """Raised when a raw relay event is structurally invalid.

    Attributes:
        reason: Short machine-friendly reason (e.g. "missing_tag:title").
        event_id: Event id if the envelope carried one.
        kind: Event kind if the envelope carried one.
    """

    def __init__(
        self,
        reason: str,
        event_id: str | None = None,
        kind: int | None = None,
    ) -> None:
        """Initialize malformed event error.

        Args:
            reason: Why the event was rejected.
            event_id: Event id, when known.
            kind: Event kind, when known.
        """
        self.reason = reason
        self.event_id = event_id
        self.kind = kind
        super().__init__(
            f"Malformed event {event_id or '<unknown>'} (kind={kind}): {reason}"
        )
