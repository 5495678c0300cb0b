"""Ingestion pipeline for relay events.

Every raw event goes through:

    validate -> (attestations: duplicate peek -> admit -> count)
             -> aggregate into the read model

and yields exactly one IngestionOutcome. Nothing here raises for a bad
event: malformed, duplicate, rate-limited, and unauthorized events are
logged, counted, and reported as outcomes so one bad event never stops
the events behind it.

Ordering:
- Duplicate peek runs before anything else, so a redelivered attestation
  is reported DUPLICATE rather than RATE_LIMITED
- Every admitted attestation spends its nonce and becomes a counting
  candidate; one the action counting rule leaves out is reported
  RATE_LIMITED, with resume_at from the counted attestations around its
  own timestamp
- Campaign creation limits apply only to slugs not yet known
- A slug stays with its first creator key; other keys claiming it are
  reported UNAUTHORIZED
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from movement.application.ports.read_model import CampaignWriteOutcome, UpdateWriteOutcome
from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.base import LoggingMixin
from movement.application.services.metrics_aggregator_service import (
    MetricsAggregatorService,
)
from movement.application.services.rate_limit_service import RateLimitService
from movement.application.services.replay_guard_service import (
    AdmissionResult,
    ReplayGuardService,
)
from movement.domain.errors.campaign import UnauthorizedUpdateError
from movement.domain.errors.event import MalformedEventError
from movement.domain.models.events import (
    ACTION_ATTESTATION_KIND,
    CAMPAIGN_KIND,
    CAMPAIGN_UPDATE_KIND,
    SOCIAL_SIGNAL_KINDS,
    ActionAttestationEvent,
    CampaignEvent,
    CampaignUpdateEvent,
    ParsedEvent,
    SocialSignalEvent,
)
from movement.domain.services.event_validator import EventValidator
from movement.infrastructure.monitoring.metrics import get_metrics_collector


class IngestionStatus(str, Enum):
    """What the pipeline did with an event."""

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    RATE_LIMITED = "rate_limited"
    MALFORMED = "malformed"
    UNAUTHORIZED = "unauthorized"
    PARKED = "parked"
    IGNORED = "ignored"


@dataclass(frozen=True)
class IngestionOutcome:
    """Result of ingesting one raw event.

    Attributes:
        status: Pipeline outcome.
        kind: Event kind label (campaign, attestation, share, ...).
        event_id: Event id, when the envelope carried one.
        reason: Malformed reason, when status is MALFORMED.
        resume_at: Rate limit resume time, when status is RATE_LIMITED.
    """

    status: IngestionStatus
    kind: str
    event_id: str | None = None
    reason: str | None = None
    resume_at: int | None = None


def kind_label(kind: int | None) -> str:
    """Metric and log label for an event kind."""
    if kind == CAMPAIGN_KIND:
        return "campaign"
    if kind == CAMPAIGN_UPDATE_KIND:
        return "campaign_update"
    if kind == ACTION_ATTESTATION_KIND:
        return "attestation"
    if kind in SOCIAL_SIGNAL_KINDS:
        return SOCIAL_SIGNAL_KINDS[kind].value
    if kind is None:
        return "unknown"
    return "unrecognized"


class IngestionService(LoggingMixin):
    """Runs raw relay events through validation, guards, and aggregation.

    Attributes:
        _validator: Event validator.
        _replay_guard: Attestation replay guard.
        _rate_limiter: Action and campaign-creation limits.
        _aggregator: Metrics aggregator writing the read model.
        _time: Clock for latency measurement.
    """

    def __init__(
        self,
        validator: EventValidator,
        replay_guard: ReplayGuardService,
        rate_limiter: RateLimitService,
        aggregator: MetricsAggregatorService,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        """Initialize the ingestion service.

        Args:
            validator: Event validator.
            replay_guard: Replay guard service.
            rate_limiter: Rate limit service.
            aggregator: Metrics aggregator service.
            time_authority: Clock for latency measurement.
        """
        self._validator = validator
        self._replay_guard = replay_guard
        self._rate_limiter = rate_limiter
        self._aggregator = aggregator
        self._time = time_authority

        self._init_logger(component="ingestion")

    async def ingest(self, raw: Mapping[str, Any]) -> IngestionOutcome:
        """Ingest one raw relay event.

        Args:
            raw: Decoded relay event.

        Returns:
            IngestionOutcome describing what happened.
        """
        started = self._time.monotonic()
        try:
            parsed = self._validator.classify(raw)
        except MalformedEventError as exc:
            outcome = self._malformed(exc)
        else:
            outcome = await self.ingest_parsed(parsed)

        metrics = get_metrics_collector()
        metrics.record_ingestion(outcome.kind, outcome.status.value)
        metrics.observe_ingest_duration(self._time.monotonic() - started)
        return outcome

    async def ingest_many(self, raws: Iterable[Mapping[str, Any]]) -> list[IngestionOutcome]:
        """Ingest events one after another, in the given order."""
        return [await self.ingest(raw) for raw in raws]

    async def ingest_parsed(self, parsed: ParsedEvent) -> IngestionOutcome:
        """Route an already validated event through the pipeline."""
        if isinstance(parsed, ActionAttestationEvent):
            return await self._ingest_attestation(parsed)
        if isinstance(parsed, CampaignEvent):
            return await self._ingest_campaign(parsed)
        if isinstance(parsed, CampaignUpdateEvent):
            return await self._ingest_update(parsed)
        if isinstance(parsed, SocialSignalEvent):
            return await self._ingest_social_signal(parsed)

        self._log_operation("ingest", event_id=parsed.raw.id).debug(
            "event_kind_unrecognized", kind=parsed.raw.kind
        )
        return IngestionOutcome(
            status=IngestionStatus.IGNORED,
            kind=kind_label(parsed.raw.kind),
            event_id=parsed.raw.id,
        )

    def _malformed(self, exc: MalformedEventError) -> IngestionOutcome:
        label = kind_label(exc.kind)
        get_metrics_collector().increment_malformed(label)
        self._log_operation("ingest", event_id=exc.event_id).warning(
            "event_malformed",
            kind=exc.kind,
            reason=exc.reason,
        )
        return IngestionOutcome(
            status=IngestionStatus.MALFORMED,
            kind=label,
            event_id=exc.event_id,
            reason=exc.reason,
        )

    async def _ingest_attestation(self, event: ActionAttestationEvent) -> IngestionOutcome:
        attestation = event.attestation
        label = kind_label(ACTION_ATTESTATION_KIND)
        log = self._log_operation(
            "ingest_attestation",
            event_id=attestation.event_id,
            campaign_id=attestation.campaign_id,
            actor_key=attestation.actor_key,
        )

        if await self._replay_guard.peek(attestation.key, attestation.timestamp):
            # Still offered to the guard so replay attempts are counted.
            await self._replay_guard.admit(attestation)
            log.debug("attestation_duplicate")
            return IngestionOutcome(
                status=IngestionStatus.DUPLICATE,
                kind=label,
                event_id=attestation.event_id,
            )

        if await self._replay_guard.admit(attestation) is AdmissionResult.DUPLICATE:
            log.debug("attestation_duplicate")
            return IngestionOutcome(
                status=IngestionStatus.DUPLICATE,
                kind=label,
                event_id=attestation.event_id,
            )

        if not await self._aggregator.apply_attestation(attestation):
            decision = await self._rate_limiter.check_action(
                attestation.actor_key,
                attestation.campaign_id,
                attestation.timestamp,
            )
            log.info("attestation_rate_limited", resume_at=decision.resume_at)
            return IngestionOutcome(
                status=IngestionStatus.RATE_LIMITED,
                kind=label,
                event_id=attestation.event_id,
                resume_at=decision.resume_at,
            )

        log.info("attestation_accepted", timestamp=attestation.timestamp)
        return IngestionOutcome(
            status=IngestionStatus.ACCEPTED,
            kind=label,
            event_id=attestation.event_id,
        )

    async def _ingest_campaign(self, event: CampaignEvent) -> IngestionOutcome:
        campaign = event.campaign
        label = kind_label(CAMPAIGN_KIND)
        log = self._log_operation(
            "ingest_campaign",
            event_id=campaign.event_id,
            campaign_id=campaign.id,
        )

        existing = await self._aggregator.get_campaign(campaign.id)
        if existing is not None and existing.event_id == campaign.event_id:
            return IngestionOutcome(
                status=IngestionStatus.DUPLICATE,
                kind=label,
                event_id=campaign.event_id,
            )

        if existing is None:
            decision = await self._rate_limiter.check_campaign_creation(
                campaign.creator_key, campaign.created_at
            )
            if not decision.allowed:
                log.info("campaign_rate_limited", resume_at=decision.resume_at)
                return IngestionOutcome(
                    status=IngestionStatus.RATE_LIMITED,
                    kind=label,
                    event_id=campaign.event_id,
                    resume_at=decision.resume_at,
                )

        write = await self._aggregator.apply_campaign(campaign)
        if write is CampaignWriteOutcome.CLAIMED:
            log.warning("campaign_slug_claimed", creator_key=campaign.creator_key)
            return IngestionOutcome(
                status=IngestionStatus.UNAUTHORIZED,
                kind=label,
                event_id=campaign.event_id,
            )
        if write is CampaignWriteOutcome.IGNORED:
            log.debug("campaign_superseded")
            return IngestionOutcome(
                status=IngestionStatus.IGNORED,
                kind=label,
                event_id=campaign.event_id,
            )

        log.info("campaign_accepted", write=write.value)
        return IngestionOutcome(
            status=IngestionStatus.ACCEPTED,
            kind=label,
            event_id=campaign.event_id,
        )

    async def _ingest_update(self, event: CampaignUpdateEvent) -> IngestionOutcome:
        update = event.update
        label = kind_label(CAMPAIGN_UPDATE_KIND)
        log = self._log_operation(
            "ingest_update",
            event_id=update.event_id,
            campaign_id=update.campaign_id,
        )

        try:
            write = await self._aggregator.apply_update(update)
        except UnauthorizedUpdateError as exc:
            get_metrics_collector().increment_unauthorized_updates()
            log.debug(
                "update_unauthorized",
                issuer_key=exc.issuer_key,
                creator_key=exc.creator_key,
            )
            return IngestionOutcome(
                status=IngestionStatus.UNAUTHORIZED,
                kind=label,
                event_id=update.event_id,
            )

        status = {
            UpdateWriteOutcome.APPLIED: IngestionStatus.ACCEPTED,
            UpdateWriteOutcome.PARKED: IngestionStatus.PARKED,
            UpdateWriteOutcome.DUPLICATE: IngestionStatus.DUPLICATE,
        }[write]
        log.debug("update_ingested", write=write.value)
        return IngestionOutcome(status=status, kind=label, event_id=update.event_id)

    async def _ingest_social_signal(self, event: SocialSignalEvent) -> IngestionOutcome:
        counted = await self._aggregator.apply_social_signal(event)
        return IngestionOutcome(
            status=IngestionStatus.ACCEPTED if counted else IngestionStatus.DUPLICATE,
            kind=event.signal_type.value,
            event_id=event.event_id,
        )
