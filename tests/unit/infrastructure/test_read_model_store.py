"""Unit tests for InMemoryReadModelStore."""

import pytest

from movement.application.ports.read_model import (
    CampaignWriteOutcome,
    UpdateWriteOutcome,
)
from movement.domain.errors.campaign import UnauthorizedUpdateError
from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import (
    Campaign,
    CampaignCategory,
    CampaignStatus,
    CampaignUpdate,
    TargetLevel,
)
from movement.domain.models.events import (
    REPOST_KIND,
    RawEvent,
    SocialSignalEvent,
    SocialSignalType,
)
from movement.domain.models.stake import StakeRecord, StakeState
from movement.infrastructure.adapters.memory.read_model_store import (
    InMemoryReadModelStore,
)


def _campaign(created_at: int = 1000, event_id: str = "evt-a", creator: str = "k1") -> Campaign:
    return Campaign(
        id="save-park",
        creator_key=creator,
        title="Save the park",
        categories=frozenset({CampaignCategory.ENVIRONMENT}),
        target_levels=frozenset({TargetLevel.LOCAL}),
        created_at=created_at,
        updated_at=created_at,
        event_id=event_id,
    )


def _update(issuer: str = "k1", event_id: str = "upd-1", updated_at: int = 2000) -> CampaignUpdate:
    return CampaignUpdate(
        campaign_id="save-park",
        issuer_key=issuer,
        updated_at=updated_at,
        event_id=event_id,
        status=CampaignStatus.COMPLETED,
    )


def _stake(stake_id: str, staked_at: int) -> StakeRecord:
    return StakeRecord.open(
        stake_id=stake_id,
        campaign_id="save-park",
        depositor_key="k1",
        amount=1000,
        staked_at=staked_at,
        refund_delay_seconds=86400,
    )


@pytest.fixture
def store() -> InMemoryReadModelStore:
    return InMemoryReadModelStore()


class TestCampaignWrites:
    """Tests for slug precedence."""

    @pytest.mark.asyncio
    async def test_created_then_ignored(self, store: InMemoryReadModelStore) -> None:
        assert await store.put_campaign(_campaign()) is CampaignWriteOutcome.CREATED
        assert await store.put_campaign(_campaign()) is CampaignWriteOutcome.IGNORED
        later = _campaign(created_at=1500, event_id="evt-later")
        assert await store.put_campaign(later) is CampaignWriteOutcome.IGNORED

    @pytest.mark.asyncio
    async def test_earlier_campaign_replaces(self, store: InMemoryReadModelStore) -> None:
        await store.put_campaign(_campaign(created_at=1500, event_id="evt-b"))
        earlier = _campaign(created_at=1000, event_id="evt-a")
        assert await store.put_campaign(earlier) is CampaignWriteOutcome.REPLACED
        assert (await store.get_campaign("save-park")).created_at == 1000

    @pytest.mark.asyncio
    async def test_replacement_swaps_creation_timestamp(
        self, store: InMemoryReadModelStore
    ) -> None:
        await store.put_campaign(_campaign(created_at=1500, event_id="evt-b"))
        await store.put_campaign(_campaign(created_at=1000, event_id="evt-a"))
        assert await store.get_creation_timestamps("k1") == [1000]

    @pytest.mark.asyncio
    async def test_other_creator_cannot_claim_slug(
        self, store: InMemoryReadModelStore
    ) -> None:
        await store.put_campaign(_campaign(created_at=1000))
        backdated = _campaign(created_at=1, event_id="evt-0", creator="k3")

        assert await store.put_campaign(backdated) is CampaignWriteOutcome.CLAIMED
        assert (await store.get_campaign("save-park")).creator_key == "k1"
        assert await store.get_creation_timestamps("k3") == []
        with pytest.raises(UnauthorizedUpdateError):
            await store.apply_update(_update(issuer="k3", event_id="upd-k3"))
        assert await store.apply_update(_update()) is UpdateWriteOutcome.APPLIED

    @pytest.mark.asyncio
    async def test_event_id_breaks_created_at_tie(self, store: InMemoryReadModelStore) -> None:
        await store.put_campaign(_campaign(event_id="evt-b"))
        assert await store.put_campaign(_campaign(event_id="evt-a")) is CampaignWriteOutcome.REPLACED

    @pytest.mark.asyncio
    async def test_campaign_with_stake_is_atomic(self, store: InMemoryReadModelStore) -> None:
        await store.put_campaign(_campaign())
        outcome = await store.put_campaign_with_stake(_campaign(event_id="evt-z"), _stake("s1", 0))
        assert outcome is CampaignWriteOutcome.IGNORED
        assert await store.get_stake("s1") is None


class TestUpdates:
    """Tests for update storage and status derivation."""

    @pytest.mark.asyncio
    async def test_parked_update_applies_on_arrival(self, store: InMemoryReadModelStore) -> None:
        assert await store.apply_update(_update()) is UpdateWriteOutcome.PARKED
        await store.put_campaign(_campaign())
        assert (await store.get_campaign("save-park")).status is CampaignStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_duplicate_update(self, store: InMemoryReadModelStore) -> None:
        await store.put_campaign(_campaign())
        assert await store.apply_update(_update()) is UpdateWriteOutcome.APPLIED
        assert await store.apply_update(_update()) is UpdateWriteOutcome.DUPLICATE

    @pytest.mark.asyncio
    async def test_foreign_update_raises_and_is_ignored(
        self, store: InMemoryReadModelStore
    ) -> None:
        await store.put_campaign(_campaign())
        with pytest.raises(UnauthorizedUpdateError):
            await store.apply_update(_update(issuer="k2"))
        assert (await store.get_campaign("save-park")).status is CampaignStatus.ACTIVE


class TestActivity:
    """Tests for attestation and social signal counters."""

    @pytest.mark.asyncio
    async def test_timestamps_sorted_regardless_of_arrival(
        self, store: InMemoryReadModelStore
    ) -> None:
        for i, ts in enumerate([1300, 1100, 1200]):
            await store.record_attestation(
                ActionAttestation(
                    campaign_id="save-park",
                    campaign_event_id="evt-a",
                    actor_key=f"k{i}",
                    timestamp=ts,
                    nonce="n",
                    event_id=f"att-{i}",
                )
            )
        activity = await store.get_activity("save-park")
        assert activity.timestamps == (1100, 1200, 1300)
        assert activity.total == 3

    @pytest.mark.asyncio
    async def test_late_earlier_attestation_recounts_actor(
        self, store: InMemoryReadModelStore
    ) -> None:
        """Counting per actor follows timestamps, not arrival order."""
        hour = 3600

        def attestation(timestamp: int, nonce: str) -> ActionAttestation:
            return ActionAttestation(
                campaign_id="save-park",
                campaign_event_id="evt-a",
                actor_key="k2",
                timestamp=timestamp,
                nonce=nonce,
                event_id=f"att-{nonce}",
            )

        assert await store.record_attestation(attestation(1050 + 20 * hour, "n2"))
        assert not await store.record_attestation(attestation(1050 + 40 * hour, "n3"))
        assert await store.record_attestation(attestation(1050, "n1"))

        expected = [1050, 1050 + 40 * hour]
        assert list((await store.get_activity("save-park")).timestamps) == expected
        assert await store.get_action_timestamps("k2", "save-park") == expected

    @pytest.mark.asyncio
    async def test_signals_follow_canonical_event(self, store: InMemoryReadModelStore) -> None:
        await store.put_campaign(_campaign(event_id="evt-a"))
        signal = SocialSignalEvent(
            raw=RawEvent(
                id="share-1",
                pubkey="k3",
                created_at=1100,
                kind=REPOST_KIND,
                tags=(("e", "evt-a"),),
            ),
            signal_type=SocialSignalType.SHARE,
            campaign_event_id="evt-a",
        )
        assert await store.record_social_signal(signal)
        assert not await store.record_social_signal(signal)
        assert (await store.get_activity("save-park")).share_count == 1


class TestRateState:
    @pytest.mark.asyncio
    async def test_prune(self, store: InMemoryReadModelStore) -> None:
        await store.put_campaign(_campaign(created_at=100))
        assert await store.prune_rate_state(100) == 0
        assert await store.prune_rate_state(101) == 1
        assert await store.get_creation_timestamps("k1") == []


class TestStakes:
    @pytest.mark.asyncio
    async def test_list_sorted_and_filtered(self, store: InMemoryReadModelStore) -> None:
        await store.put_stake(_stake("b", 10))
        await store.put_stake(_stake("a", 10))
        await store.put_stake(_stake("c", 5).with_state(StakeState.FORFEITED, reason="spam"))

        assert [s.id for s in await store.list_stakes()] == ["c", "a", "b"]
        assert [s.id for s in await store.list_stakes(StakeState.STAKED)] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_latest_stake_backs_campaign(self, store: InMemoryReadModelStore) -> None:
        await store.put_stake(_stake("old", 0))
        await store.put_stake(_stake("new", 50))
        assert (await store.get_stake_for_campaign("save-park")).id == "new"
