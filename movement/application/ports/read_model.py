"""Read Model Port - derived campaign, activity, and stake state.

The read model is derived, never authoritative: it can always be rebuilt
by re-ingesting events. Writes are short critical sections; reads return
immutable snapshots so a concurrent writer never produces a partial read.

Ordering rules owned by implementations:
- The canonical campaign for a slug is the one with the smallest
  (created_at, event_id). A later-arriving earlier event replaces it.
- Updates are stored whether or not their campaign is known yet, and the
  campaign's status is re-derived from every stored update on each write.
- Attestations are counted by campaign id whether or not the campaign is
  known yet.
- Social signals are counted once per signal event id, against the
  campaign event they reference.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import Campaign, CampaignUpdate
from movement.domain.models.events import SocialSignalEvent
from movement.domain.models.stake import StakeRecord, StakeState


class CampaignWriteOutcome(str, Enum):
    """What a campaign write did to the read model."""

    CREATED = "created"
    REPLACED = "replaced"
    IGNORED = "ignored"
    CLAIMED = "claimed"


class UpdateWriteOutcome(str, Enum):
    """What an update write did to the read model."""

    APPLIED = "applied"
    PARKED = "parked"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class CampaignActivity:
    """Snapshot of the raw inputs to a campaign's metrics.

    Attributes:
        campaign_id: Campaign slug.
        timestamps: Accepted attestation timestamps, ascending.
        share_count: Distinct repost events referencing the campaign event.
        reaction_count: Distinct reaction events referencing the campaign event.
        comment_count: Distinct comment events referencing the campaign event.
    """

    campaign_id: str
    timestamps: tuple[int, ...] = ()
    share_count: int = 0
    reaction_count: int = 0
    comment_count: int = 0

    @property
    def total(self) -> int:
        return len(self.timestamps)


@runtime_checkable
class ReadModelPort(Protocol):
    """Protocol for the derived read model store."""

    async def put_campaign(self, campaign: Campaign) -> CampaignWriteOutcome:
        """Store a campaign, resolving same-creator slug conflicts by precedence.

        A slug belongs to the first creator key stored for it. Events from
        any other key never replace it, whatever created_at they claim.

        Args:
            campaign: Parsed campaign.

        Returns:
            CREATED for a new slug, REPLACED when this event precedes the
            stored one from the same creator, CLAIMED when another key owns
            the slug, IGNORED otherwise (including redelivery).
        """
        ...

    async def put_campaign_with_stake(
        self,
        campaign: Campaign,
        stake: StakeRecord,
    ) -> CampaignWriteOutcome:
        """Store a new campaign and its stake in one critical section.

        Neither is written unless the slug is new.

        Returns:
            CREATED on success, IGNORED if the slug already exists.
        """
        ...

    async def apply_update(self, update: CampaignUpdate) -> UpdateWriteOutcome:
        """Store an update and re-derive its campaign's status.

        Returns:
            APPLIED when the campaign is known, PARKED when it is not yet,
            DUPLICATE when this update event was already stored.

        Raises:
            UnauthorizedUpdateError: If the campaign is known and the issuer
                is not its creator. The update is retained but never affects
                status while that creator owns the slug.
        """
        ...

    async def record_attestation(self, attestation: ActionAttestation) -> bool:
        """Record an admitted attestation as a counting candidate.

        Counted attestations per (actor, campaign) are the canonical subset
        chosen by the action counting rule over every candidate, so a late
        earlier attestation can displace one counted before it arrived.

        Returns:
            Whether this attestation is counted after recording it.
        """
        ...

    async def record_social_signal(self, signal: SocialSignalEvent) -> bool:
        """Record a social signal.

        Returns:
            False if this signal event was already counted.
        """
        ...

    async def get_campaign(self, campaign_id: str) -> Campaign | None:
        """Return the canonical campaign for a slug, or None."""
        ...

    async def list_campaigns(self) -> list[Campaign]:
        """Return every known canonical campaign."""
        ...

    async def get_activity(self, campaign_id: str) -> CampaignActivity:
        """Return the activity snapshot for a campaign id (empty if none)."""
        ...

    async def list_activity(
        self, campaign_ids: Iterable[str]
    ) -> dict[str, CampaignActivity]:
        """Return activity snapshots for several campaign ids at once."""
        ...

    async def get_action_timestamps(self, actor_key: str, campaign_id: str) -> list[int]:
        """Counted attestation timestamps by ``actor_key`` on a campaign."""
        ...

    async def get_creation_timestamps(self, actor_key: str) -> list[int]:
        """created_at of the canonical campaigns created by ``actor_key``."""
        ...

    async def prune_rate_state(self, cutoff: int) -> int:
        """Drop rate-limit state older than ``cutoff``.

        Counted totals are unaffected. Callers must keep ``cutoff`` at least
        one action window below the replay low-water mark so pruned
        candidates can no longer change what is counted.

        Returns:
            Number of timestamps removed.
        """
        ...

    async def put_stake(self, stake: StakeRecord) -> None:
        """Insert or replace a stake record by id."""
        ...

    async def get_stake(self, stake_id: str) -> StakeRecord | None:
        """Return a stake record by id, or None."""
        ...

    async def get_stake_for_campaign(self, campaign_id: str) -> StakeRecord | None:
        """Return the most recent stake backing a campaign, or None."""
        ...

    async def list_stakes(self, state: StakeState | None = None) -> list[StakeRecord]:
        """Return stake records, optionally filtered by state."""
        ...
