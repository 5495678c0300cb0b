"""User-initiated action submission.

A local user publishing an attestation is checked against the action
rate limit at wall-clock time first, and told when they may try again.
The attestation then runs through the same ingestion pipeline as events
arriving from relays.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.base import LoggingMixin
from movement.application.services.ingestion_service import (
    IngestionOutcome,
    IngestionService,
    IngestionStatus,
)
from movement.application.services.rate_limit_service import (
    ACTION_SCOPE,
    RateLimitService,
)
from movement.domain.errors.event import MalformedEventError
from movement.domain.errors.rate_limit import RateLimitExceededError
from movement.domain.models.events import ActionAttestationEvent
from movement.domain.services.event_validator import EventValidator
from movement.infrastructure.monitoring.metrics import get_metrics_collector


class ActionSubmissionService(LoggingMixin):
    """Accepts attestations submitted by a local user."""

    def __init__(
        self,
        validator: EventValidator,
        rate_limiter: RateLimitService,
        ingestion: IngestionService,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._validator = validator
        self._rate_limiter = rate_limiter
        self._ingestion = ingestion
        self._time = time_authority

        self._init_logger(component="submission")

    async def submit(self, raw: Mapping[str, Any]) -> IngestionOutcome:
        """Submit a signed attestation event.

        Args:
            raw: Signed kind 31102 event.

        Returns:
            IngestionOutcome (ACCEPTED or DUPLICATE).

        Raises:
            MalformedEventError: If the event is not a valid attestation.
            RateLimitExceededError: If the actor already acted on the
                campaign within the action window.
        """
        parsed = self._validator.classify(raw)
        if not isinstance(parsed, ActionAttestationEvent):
            raise MalformedEventError(
                "expected_attestation", event_id=parsed.raw.id, kind=parsed.raw.kind
            )
        attestation = parsed.attestation
        log = self._log_operation(
            "submit",
            event_id=attestation.event_id,
            campaign_id=attestation.campaign_id,
            actor_key=attestation.actor_key,
        )

        decision = await self._rate_limiter.check_action(
            attestation.actor_key,
            attestation.campaign_id,
            self._time.now(),
        )
        decision.raise_if_denied(attestation.actor_key, attestation.campaign_id)

        outcome = await self._ingestion.ingest_parsed(parsed)
        get_metrics_collector().record_ingestion(outcome.kind, outcome.status.value)
        if outcome.status is IngestionStatus.RATE_LIMITED and outcome.resume_at is not None:
            raise RateLimitExceededError(
                actor_key=attestation.actor_key,
                scope=ACTION_SCOPE,
                resume_at=outcome.resume_at,
                campaign_id=attestation.campaign_id,
            )

        log.info("action_submitted", status=outcome.status.value)
        return outcome
