"""Unit tests for the Campaign model and status resolution."""

import pytest

from movement.domain.models.campaign import (
    Campaign,
    CampaignCategory,
    CampaignStatus,
    CampaignUpdate,
    TargetLevel,
    resolve_status,
)


def _campaign(**overrides) -> Campaign:
    fields = dict(
        id="save-park",
        creator_key="k1",
        title="Save the park",
        categories=frozenset({CampaignCategory.ENVIRONMENT}),
        target_levels=frozenset({TargetLevel.LOCAL}),
        created_at=1000,
        updated_at=1000,
        event_id="evt-a",
    )
    fields.update(overrides)
    return Campaign(**fields)


def _update(event_id: str, updated_at: int, status=None, issuer: str = "k1") -> CampaignUpdate:
    return CampaignUpdate(
        campaign_id="save-park",
        issuer_key=issuer,
        updated_at=updated_at,
        event_id=event_id,
        status=status,
    )


class TestCampaignValidation:
    """Tests for Campaign invariants."""

    def test_requires_category(self) -> None:
        with pytest.raises(ValueError, match="category"):
            _campaign(categories=frozenset())

    def test_requires_target_level(self) -> None:
        with pytest.raises(ValueError, match="target level"):
            _campaign(target_levels=frozenset())

    def test_requires_id(self) -> None:
        with pytest.raises(ValueError):
            _campaign(id="")


class TestPrecedence:
    """Tests for slug conflict precedence."""

    def test_earlier_created_at_wins(self) -> None:
        early = _campaign(created_at=900, event_id="evt-z")
        late = _campaign(created_at=1000, event_id="evt-a")
        assert early.precedes(late)
        assert not late.precedes(early)

    def test_event_id_breaks_ties(self) -> None:
        a = _campaign(event_id="evt-a")
        b = _campaign(event_id="evt-b")
        assert a.precedes(b)
        assert not b.precedes(a)

    def test_other_creator_never_precedes(self) -> None:
        """A backdated event from another key cannot win the slug."""
        owner = _campaign(created_at=1000)
        backdated = _campaign(created_at=1, event_id="evt-0", creator_key="k3")
        assert not backdated.precedes(owner)
        assert not owner.precedes(backdated)


class TestResolveStatus:
    """Tests for order-independent status derivation."""

    def test_no_updates_is_active(self) -> None:
        assert resolve_status("k1", []) == (CampaignStatus.ACTIVE, None)

    def test_latest_status_wins(self) -> None:
        updates = [
            _update("u2", 3000, CampaignStatus.ARCHIVED),
            _update("u1", 2000, CampaignStatus.COMPLETED),
        ]
        assert resolve_status("k1", updates) == (CampaignStatus.ARCHIVED, 3000)
        assert resolve_status("k1", list(reversed(updates))) == (
            CampaignStatus.ARCHIVED,
            3000,
        )

    def test_updates_without_status_only_move_updated_at(self) -> None:
        updates = [
            _update("u1", 2000, CampaignStatus.COMPLETED),
            _update("u2", 4000),
        ]
        assert resolve_status("k1", updates) == (CampaignStatus.COMPLETED, 4000)

    def test_foreign_updates_are_ignored(self) -> None:
        updates = [_update("u1", 2000, CampaignStatus.ARCHIVED, issuer="mallory")]
        assert resolve_status("k1", updates) == (CampaignStatus.ACTIVE, None)

    def test_same_timestamp_broken_by_event_id(self) -> None:
        updates = [
            _update("u-a", 2000, CampaignStatus.COMPLETED),
            _update("u-b", 2000, CampaignStatus.ARCHIVED),
        ]
        assert resolve_status("k1", updates)[0] is CampaignStatus.ARCHIVED

    def test_with_updates_sets_status_and_updated_at(self) -> None:
        campaign = _campaign().with_updates([_update("u1", 2000, CampaignStatus.COMPLETED)])
        assert campaign.status is CampaignStatus.COMPLETED
        assert campaign.updated_at == 2000

    def test_backdated_update_does_not_move_updated_at_backwards(self) -> None:
        campaign = _campaign().with_updates([_update("u1", 500, CampaignStatus.COMPLETED)])
        assert campaign.status is CampaignStatus.COMPLETED
        assert campaign.updated_at == 1000
