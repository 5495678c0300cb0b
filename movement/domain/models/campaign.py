"""Campaign domain model.

A campaign is created by a kind 31100 event and owned by the key that
signed it. Only updates signed by that same key can change its status.
Status is a pure function of the set of valid updates, so replicas that
observe the same updates in any order agree on it.

Constraints:
- Categories and target levels are non-empty
- Status is the status of the most recently timestamped valid update,
  or ACTIVE when no update carries one
- A slug is owned by the first creator key stored for it; among that
  key's events the canonical one has the smallest (created_at, event_id),
  independent of arrival order
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum


class CampaignStatus(str, Enum):
    """Lifecycle status of a campaign."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TargetLevel(str, Enum):
    """Government level a campaign (or representative) belongs to."""

    FEDERAL = "federal"
    STATE = "state"
    LOCAL = "local"


class CampaignCategory(str, Enum):
    """Fixed set of issue categories a campaign may declare."""

    ENVIRONMENT = "environment"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    CIVIL_RIGHTS = "civil_rights"
    ECONOMY = "economy"
    IMMIGRATION = "immigration"
    GUN_CONTROL = "gun_control"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    TECHNOLOGY = "technology"
    CRIMINAL_JUSTICE = "criminal_justice"
    ELECTION_REFORM = "election_reform"
    GOVERNMENT_TRANSPARENCY = "government_transparency"
    PUBLIC_SAFETY = "public_safety"
    COMMUNITY = "community"


@dataclass(frozen=True, eq=True)
class Campaign:
    """A civic campaign parsed from a kind 31100 event.

    Attributes:
        id: Campaign slug (the event's ``d`` tag).
        creator_key: Public key that signed the campaign event.
        title: Campaign title.
        categories: Issue categories (non-empty).
        target_levels: Government levels targeted (non-empty).
        created_at: Creation timestamp (unix seconds).
        updated_at: Timestamp of the latest applied update, or created_at.
        event_id: Id of the campaign event.
        description: Markdown body (event content).
        alt: Human-readable summary (NIP-31 ``alt`` tag).
        status: Derived lifecycle status.
        image: Optional banner image URL.
        video: Optional video URL.
        links: Related links.
    """

    id: str
    creator_key: str
    title: str
    categories: frozenset[CampaignCategory]
    target_levels: frozenset[TargetLevel]
    created_at: int
    updated_at: int
    event_id: str
    description: str = ""
    alt: str = ""
    status: CampaignStatus = field(default=CampaignStatus.ACTIVE)
    image: str | None = None
    video: str | None = None
    links: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate campaign fields."""
        if not self.id:
            raise ValueError("Campaign id must not be empty")
        if not self.categories:
            raise ValueError("Campaign must declare at least one category")
        if not self.target_levels:
            raise ValueError("Campaign must declare at least one target level")

    def precedes(self, other: Campaign) -> bool:
        """Whether this event wins over ``other`` for the same slug and creator."""
        if self.creator_key != other.creator_key:
            return False
        return (self.created_at, self.event_id) < (other.created_at, other.event_id)

    def with_updates(self, updates: Iterable[CampaignUpdate]) -> Campaign:
        """Return a copy whose status and updated_at reflect ``updates``.

        Updates from keys other than the creator are ignored.

        Args:
            updates: All updates observed for this campaign id.

        Returns:
            New Campaign with derived status and last-update timestamp.
        """
        status, updated_at = resolve_status(self.creator_key, updates)
        return replace(
            self,
            status=status,
            updated_at=max(self.created_at, updated_at or self.created_at),
        )


@dataclass(frozen=True, eq=True)
class CampaignUpdate:
    """A campaign update parsed from a kind 31101 event.

    Attributes:
        campaign_id: Slug of the target campaign.
        issuer_key: Key that signed the update.
        updated_at: Update timestamp (``updated_at`` tag or event created_at).
        event_id: Id of the update event.
        message: Update body.
        status: New status, if the update changes it.
        milestone: Optional milestone description.
    """

    campaign_id: str
    issuer_key: str
    updated_at: int
    event_id: str
    message: str = ""
    status: CampaignStatus | None = None
    milestone: str | None = None

    def supersedes(self, other: CampaignUpdate) -> bool:
        """Whether this update is more recent than ``other``.

        Ties on timestamp are broken by the greater event id.
        """
        return (self.updated_at, self.event_id) > (other.updated_at, other.event_id)


def resolve_status(
    creator_key: str,
    updates: Iterable[CampaignUpdate],
) -> tuple[CampaignStatus, int | None]:
    """Derive status and last-update time from a set of updates.

    Args:
        creator_key: Owner of the campaign; other issuers are ignored.
        updates: Updates observed for the campaign, in any order.

    Returns:
        Tuple of (status, latest update timestamp or None).
    """
    latest_status: CampaignUpdate | None = None
    latest_any: int | None = None
    for update in updates:
        if update.issuer_key != creator_key:
            continue
        if latest_any is None or update.updated_at > latest_any:
            latest_any = update.updated_at
        if update.status is None:
            continue
        if latest_status is None or update.supersedes(latest_status):
            latest_status = update

    if latest_status is None or latest_status.status is None:
        return CampaignStatus.ACTIVE, latest_any
    return latest_status.status, latest_any
