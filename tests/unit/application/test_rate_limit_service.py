"""Unit tests for RateLimitService."""

import pytest

from movement.application.services.rate_limit_service import (
    ACTION_SCOPE,
    CAMPAIGN_CREATION_SCOPE,
    RateLimitService,
)
from movement.config.engine_config import TEST_ENGINE_CONFIG
from movement.domain.errors.rate_limit import RateLimitExceededError
from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import Campaign, CampaignCategory, TargetLevel
from movement.infrastructure.adapters.memory.read_model_store import (
    InMemoryReadModelStore,
)
from tests.helpers.metrics import metric_value

WINDOW = TEST_ENGINE_CONFIG.action_window_seconds


def _attestation(timestamp: int, nonce: str) -> ActionAttestation:
    return ActionAttestation(
        campaign_id="save-park",
        campaign_event_id="campaign-evt",
        actor_key="k2",
        timestamp=timestamp,
        nonce=nonce,
        event_id=f"evt-{nonce}",
    )


def _campaign(slug: str, created_at: int) -> Campaign:
    return Campaign(
        id=slug,
        creator_key="k1",
        title=slug,
        categories=frozenset({CampaignCategory.COMMUNITY}),
        target_levels=frozenset({TargetLevel.LOCAL}),
        created_at=created_at,
        updated_at=created_at,
        event_id=f"evt-{slug}",
    )


@pytest.fixture
def read_model() -> InMemoryReadModelStore:
    return InMemoryReadModelStore()


@pytest.fixture
def limiter(read_model: InMemoryReadModelStore) -> RateLimitService:
    return RateLimitService(read_model, TEST_ENGINE_CONFIG)


class TestActionLimit:
    """Tests for the per-campaign action limit."""

    @pytest.mark.asyncio
    async def test_first_action_allowed(self, limiter: RateLimitService) -> None:
        decision = await limiter.check_action("k2", "save-park", 1050)
        assert decision.allowed
        assert decision.scope == ACTION_SCOPE
        assert decision.current_count == 0

    @pytest.mark.asyncio
    async def test_second_action_inside_window_denied(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        await read_model.record_attestation(_attestation(1050, "n1"))
        decision = await limiter.check_action("k2", "save-park", 1051)
        assert not decision.allowed
        assert decision.resume_at == 1050 + WINDOW
        assert metric_value("movement_rate_limit_denials_total", scope=ACTION_SCOPE) == 1

    @pytest.mark.asyncio
    async def test_window_boundary(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        await read_model.record_attestation(_attestation(1050, "n1"))
        assert not (await limiter.check_action("k2", "save-park", 1050 + WINDOW - 1)).allowed
        assert (await limiter.check_action("k2", "save-park", 1050 + WINDOW)).allowed

    @pytest.mark.asyncio
    async def test_window_is_symmetric(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        """A late-arriving older attestation is judged against newer ones."""
        await read_model.record_attestation(_attestation(5000, "n1"))
        assert not (await limiter.check_action("k2", "save-park", 4000)).allowed

    @pytest.mark.asyncio
    async def test_other_campaign_unaffected(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        await read_model.record_attestation(_attestation(1050, "n1"))
        assert (await limiter.check_action("k2", "other-campaign", 1051)).allowed

    @pytest.mark.asyncio
    async def test_raise_if_denied(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        await read_model.record_attestation(_attestation(1050, "n1"))
        decision = await limiter.check_action("k2", "save-park", 1051)
        with pytest.raises(RateLimitExceededError) as exc_info:
            decision.raise_if_denied("k2", "save-park")
        assert exc_info.value.resume_at == 1050 + WINDOW
        assert exc_info.value.scope == ACTION_SCOPE


class TestCampaignCreationLimit:
    """Tests for the trailing campaign creation limit."""

    @pytest.mark.asyncio
    async def test_limit_and_resume(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        for i in range(TEST_ENGINE_CONFIG.campaigns_per_window):
            await read_model.put_campaign(_campaign(f"c{i}", 1000 + i))

        denied = await limiter.check_campaign_creation("k1", 1010)
        assert not denied.allowed
        assert denied.scope == CAMPAIGN_CREATION_SCOPE
        assert denied.resume_at == 1000 + WINDOW

        allowed = await limiter.check_campaign_creation("k1", 1000 + WINDOW)
        assert allowed.allowed

    @pytest.mark.asyncio
    async def test_future_creations_do_not_count(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        for i in range(TEST_ENGINE_CONFIG.campaigns_per_window):
            await read_model.put_campaign(_campaign(f"c{i}", 5000 + i))
        assert (await limiter.check_campaign_creation("k1", 1000)).allowed


class TestPrune:
    @pytest.mark.asyncio
    async def test_prune_drops_state_past_horizon(
        self, limiter: RateLimitService, read_model: InMemoryReadModelStore
    ) -> None:
        await read_model.record_attestation(_attestation(1050, "n1"))
        horizon = TEST_ENGINE_CONFIG.replay_retention_seconds + WINDOW
        assert await limiter.prune(1050 + horizon) == 0
        assert await limiter.prune(1051 + horizon) == 1
        assert await read_model.get_action_timestamps("k2", "save-park") == []
