"""Unit tests for CampaignSubmissionService."""

from unittest.mock import MagicMock

import pytest

from movement.application.services.campaign_submission_service import (
    CampaignSubmissionService,
)
from movement.domain.errors.campaign import CampaignAlreadyExistsError
from movement.domain.errors.event import MalformedEventError
from movement.domain.errors.rate_limit import RateLimitExceededError
from movement.domain.errors.stake import InvalidStakeAmountError
from movement.domain.models.stake import StakeState
from tests.helpers.engine import EngineHarness
from tests.helpers.events import K1, attestation_event, campaign_event
from tests.helpers.metrics import metric_value


@pytest.fixture
def scheduler() -> MagicMock:
    return MagicMock()


@pytest.fixture
def submission(engine: EngineHarness, scheduler: MagicMock) -> CampaignSubmissionService:
    return CampaignSubmissionService(
        validator=engine.validator,
        rate_limiter=engine.rate_limiter,
        escrow=engine.escrow,
        read_model=engine.read_model,
        time_authority=engine.time,
        schedule_stake=scheduler,
    )


class TestSubmit:
    """Tests for campaign creation with a stake."""

    @pytest.mark.asyncio
    async def test_creates_campaign_and_stake(
        self,
        engine: EngineHarness,
        submission: CampaignSubmissionService,
        scheduler: MagicMock,
    ) -> None:
        result = await submission.submit(campaign_event())

        assert result.campaign.id == "save-park"
        assert result.stake.state is StakeState.STAKED
        assert result.stake.amount == engine.config.stake.amount
        assert result.stake.depositor_key == K1
        assert result.stake.refundable_at == (
            engine.time.now() + engine.config.stake.refund_delay_seconds
        )
        assert await engine.read_model.get_campaign("save-park") is not None
        assert await engine.read_model.get_stake_for_campaign("save-park") == result.stake
        scheduler.assert_called_once_with(result.stake)
        assert metric_value("movement_stake_transitions_total", state="staked") == 1

    @pytest.mark.asyncio
    async def test_explicit_amount(self, submission: CampaignSubmissionService) -> None:
        result = await submission.submit(campaign_event(), stake_amount=2500)
        assert result.stake.amount == 2500

    @pytest.mark.asyncio
    async def test_amount_out_of_range(
        self, engine: EngineHarness, submission: CampaignSubmissionService
    ) -> None:
        with pytest.raises(InvalidStakeAmountError):
            await submission.submit(campaign_event(), stake_amount=1)
        assert await engine.read_model.get_campaign("save-park") is None

    @pytest.mark.asyncio
    async def test_taken_slug_conflicts(
        self,
        engine: EngineHarness,
        submission: CampaignSubmissionService,
        scheduler: MagicMock,
    ) -> None:
        await engine.ingestion.ingest(campaign_event(created_at=900))
        with pytest.raises(CampaignAlreadyExistsError):
            await submission.submit(campaign_event(created_at=1000))
        assert await engine.read_model.get_stake_for_campaign("save-park") is None
        scheduler.assert_not_called()

    @pytest.mark.asyncio
    async def test_creation_limit(
        self, engine: EngineHarness, submission: CampaignSubmissionService
    ) -> None:
        for i in range(engine.config.campaigns_per_window):
            await engine.ingestion.ingest(campaign_event(f"c{i}", created_at=990 + i))

        with pytest.raises(RateLimitExceededError) as exc_info:
            await submission.submit(campaign_event("one-more"))
        assert exc_info.value.scope == "campaign_creation"
        assert exc_info.value.resume_at == 990 + engine.config.action_window_seconds

    @pytest.mark.asyncio
    async def test_rejects_non_campaign(self, submission: CampaignSubmissionService) -> None:
        with pytest.raises(MalformedEventError) as exc_info:
            await submission.submit(attestation_event())
        assert exc_info.value.reason == "expected_campaign"
