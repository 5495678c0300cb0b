"""Feed ranking models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from movement.domain.models.campaign import Campaign
from movement.domain.models.metrics import CampaignMetrics


class RankingTab(str, Enum):
    """Feed tabs.

    NEW: creation time, newest first.
    HOT: attestations in the trailing 24 hours.
    TRENDING: half-life decayed attestation momentum over 7 days.
    """

    NEW = "new"
    HOT = "hot"
    TRENDING = "trending"


@dataclass(frozen=True)
class RankedCampaign:
    """A campaign with the metrics it was ranked by."""

    campaign: Campaign
    metrics: CampaignMetrics


@dataclass(frozen=True)
class FeedPage:
    """One page of a ranked feed.

    Attributes:
        tab: Ranking used.
        items: Ranked campaigns on this page.
        total: Number of campaigns in the full ranking.
        limit: Page size requested.
        offset: Offset of the first item.
        evaluated_at: Query time used for windowed rankings.
    """

    tab: RankingTab
    items: tuple[RankedCampaign, ...]
    total: int
    limit: int
    offset: int
    evaluated_at: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total
