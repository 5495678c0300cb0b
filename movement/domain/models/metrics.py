"""Campaign metrics read model.

Metrics are derived, never authoritative. Counters are maintained
incrementally as attestations and social signals are admitted; the
time-windowed figures (hot, trending) are evaluated against query time.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class CampaignMetrics:
    """Point-in-time metrics for one campaign.

    Attributes:
        campaign_id: Campaign slug.
        total: Count of accepted attestations, all time.
        hot: Accepted attestations with timestamp in the trailing hot window.
        trending_score: Sum of half-life decayed attestation contributions.
        share_count: Distinct repost events referencing the campaign.
        reaction_count: Distinct reaction events referencing the campaign.
        comment_count: Distinct comment events referencing the campaign.
        last_action_at: Most recent accepted attestation timestamp not after
            evaluated_at.
        evaluated_at: Query time the windowed figures were computed for.
    """

    campaign_id: str
    total: int = 0
    hot: int = 0
    trending_score: float = 0.0
    share_count: int = 0
    reaction_count: int = 0
    comment_count: int = 0
    last_action_at: int | None = None
    evaluated_at: int = 0
