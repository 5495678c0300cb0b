"""Campaign API response models.

Timestamps are unix seconds, as carried on the events themselves.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from movement.domain.models.campaign import Campaign
from movement.domain.models.feed import FeedPage, RankedCampaign
from movement.domain.models.metrics import CampaignMetrics
from movement.domain.models.stake import StakeRecord


class CampaignResponse(BaseModel):
    """A campaign as served by the read model."""

    id: str
    creator_key: str
    title: str
    description: str = ""
    alt: str = ""
    status: str
    categories: list[str]
    target_levels: list[str]
    created_at: int
    updated_at: int
    event_id: str
    image: str | None = None
    video: str | None = None
    links: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, campaign: Campaign) -> CampaignResponse:
        return cls(
            id=campaign.id,
            creator_key=campaign.creator_key,
            title=campaign.title,
            description=campaign.description,
            alt=campaign.alt,
            status=campaign.status.value,
            categories=sorted(c.value for c in campaign.categories),
            target_levels=sorted(t.value for t in campaign.target_levels),
            created_at=campaign.created_at,
            updated_at=campaign.updated_at,
            event_id=campaign.event_id,
            image=campaign.image,
            video=campaign.video,
            links=list(campaign.links),
        )


class CampaignMetricsResponse(BaseModel):
    """Campaign metrics evaluated at ``evaluated_at``."""

    campaign_id: str
    total: int
    hot: int
    trending_score: float
    share_count: int
    reaction_count: int
    comment_count: int
    last_action_at: int | None = None
    evaluated_at: int

    @classmethod
    def from_domain(cls, metrics: CampaignMetrics) -> CampaignMetricsResponse:
        return cls(
            campaign_id=metrics.campaign_id,
            total=metrics.total,
            hot=metrics.hot,
            trending_score=metrics.trending_score,
            share_count=metrics.share_count,
            reaction_count=metrics.reaction_count,
            comment_count=metrics.comment_count,
            last_action_at=metrics.last_action_at,
            evaluated_at=metrics.evaluated_at,
        )


class RankedCampaignResponse(BaseModel):
    """One feed entry."""

    campaign: CampaignResponse
    metrics: CampaignMetricsResponse

    @classmethod
    def from_domain(cls, ranked: RankedCampaign) -> RankedCampaignResponse:
        return cls(
            campaign=CampaignResponse.from_domain(ranked.campaign),
            metrics=CampaignMetricsResponse.from_domain(ranked.metrics),
        )


class FeedPageResponse(BaseModel):
    """One page of a ranked feed.

    Attributes:
        tab: Ranking used (new, hot, trending).
        items: Campaigns on this page, in rank order.
        total: Campaigns in the full ranking after filters.
        limit: Page size.
        offset: Offset of the first item.
        has_more: Whether another page exists.
        evaluated_at: Query time used for windowed rankings.
    """

    tab: str
    items: list[RankedCampaignResponse]
    total: int
    limit: int
    offset: int
    has_more: bool
    evaluated_at: int

    @classmethod
    def from_domain(cls, page: FeedPage) -> FeedPageResponse:
        return cls(
            tab=page.tab.value,
            items=[RankedCampaignResponse.from_domain(item) for item in page.items],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            has_more=page.has_more,
            evaluated_at=page.evaluated_at,
        )


class StakeResponse(BaseModel):
    """Escrow state of the stake backing a campaign."""

    id: str
    campaign_id: str
    depositor_key: str
    amount: int
    state: str
    staked_at: int
    refundable_at: int
    forfeiture_reason: str | None = None
    refunded_at: int | None = None
    refund_reference: str | None = None

    @classmethod
    def from_domain(cls, stake: StakeRecord) -> StakeResponse:
        return cls(
            id=stake.id,
            campaign_id=stake.campaign_id,
            depositor_key=stake.depositor_key,
            amount=stake.amount,
            state=stake.state.value,
            staked_at=stake.staked_at,
            refundable_at=stake.refundable_at,
            forfeiture_reason=stake.forfeiture_reason,
            refunded_at=stake.refunded_at,
            refund_reference=stake.refund_reference,
        )


class ErrorResponse(BaseModel):
    """RFC 7807 problem details body.

    Attributes:
        type: URI reference identifying the problem type.
        title: Short summary of the problem type.
        status: HTTP status code.
        detail: Explanation specific to this occurrence.
        instance: Request URL that produced the problem.
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str
