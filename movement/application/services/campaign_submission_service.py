"""User-initiated campaign creation with a refundable stake.

Creating a campaign locally deposits a stake. The campaign and its stake
record are written in one read model call, so no campaign exists without
its stake and no stake without its campaign. The stake's refund timer is
scheduled once both are stored.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from movement.application.ports.read_model import CampaignWriteOutcome, ReadModelPort
from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.base import LoggingMixin
from movement.application.services.rate_limit_service import RateLimitService
from movement.application.services.stake_escrow_service import StakeEscrowService
from movement.domain.errors.campaign import CampaignAlreadyExistsError
from movement.domain.errors.event import MalformedEventError
from movement.domain.models.campaign import Campaign
from movement.domain.models.events import CampaignEvent
from movement.domain.models.stake import StakeRecord
from movement.domain.services.event_validator import EventValidator
from movement.infrastructure.monitoring.metrics import get_metrics_collector

StakeScheduler = Callable[[StakeRecord], None]


@dataclass(frozen=True)
class CampaignSubmission:
    """A created campaign and the stake backing it."""

    campaign: Campaign
    stake: StakeRecord


class CampaignSubmissionService(LoggingMixin):
    """Creates campaigns submitted by a local user."""

    def __init__(
        self,
        validator: EventValidator,
        rate_limiter: RateLimitService,
        escrow: StakeEscrowService,
        read_model: ReadModelPort,
        time_authority: TimeAuthorityProtocol,
        schedule_stake: StakeScheduler | None = None,
    ) -> None:
        """Initialize the submission service.

        Args:
            validator: Event validator.
            rate_limiter: Rate limit service.
            escrow: Stake escrow service (builds the stake record).
            read_model: Read model for the atomic campaign and stake write.
            time_authority: Wall clock.
            schedule_stake: Called with each new stake to arm its refund timer.
        """
        self._validator = validator
        self._rate_limiter = rate_limiter
        self._escrow = escrow
        self._read_model = read_model
        self._time = time_authority
        self._schedule_stake = schedule_stake

        self._init_logger(component="submission")

    async def submit(
        self,
        raw: Mapping[str, Any],
        stake_amount: int | None = None,
    ) -> CampaignSubmission:
        """Create a campaign from a signed kind 31100 event.

        Args:
            raw: Signed campaign event.
            stake_amount: Deposit in sats (configured default when omitted).

        Returns:
            CampaignSubmission with the stored campaign and STAKED record.

        Raises:
            MalformedEventError: If the event is not a valid campaign.
            RateLimitExceededError: If the creator hit the creation limit.
            InvalidStakeAmountError: If the amount is out of range.
            CampaignAlreadyExistsError: If the slug is already taken.
        """
        parsed = self._validator.classify(raw)
        if not isinstance(parsed, CampaignEvent):
            raise MalformedEventError(
                "expected_campaign", event_id=parsed.raw.id, kind=parsed.raw.kind
            )
        campaign = parsed.campaign
        log = self._log_operation(
            "submit",
            campaign_id=campaign.id,
            creator_key=campaign.creator_key,
        )

        now = self._time.now()
        decision = await self._rate_limiter.check_campaign_creation(
            campaign.creator_key, now
        )
        decision.raise_if_denied(campaign.creator_key)

        amount = stake_amount if stake_amount is not None else self._escrow.config.amount
        stake = self._escrow.new_stake(campaign.id, campaign.creator_key, amount, now)

        write = await self._read_model.put_campaign_with_stake(campaign, stake)
        if write is not CampaignWriteOutcome.CREATED:
            log.info("campaign_submission_conflict")
            raise CampaignAlreadyExistsError(campaign.id)

        get_metrics_collector().record_stake_transition(stake.state.value)
        if self._schedule_stake is not None:
            self._schedule_stake(stake)

        log.info(
            "campaign_submitted",
            stake_id=stake.id,
            amount=stake.amount,
            refundable_at=stake.refundable_at,
        )
        return CampaignSubmission(campaign=campaign, stake=stake)
