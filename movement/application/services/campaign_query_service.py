"""Read-only campaign queries backing the HTTP API."""

from __future__ import annotations

from movement.application.ports.read_model import ReadModelPort
from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.base import LoggingMixin
from movement.application.services.metrics_aggregator_service import (
    MetricsAggregatorService,
)
from movement.domain.errors.campaign import CampaignNotFoundError
from movement.domain.models.campaign import Campaign, CampaignCategory, TargetLevel
from movement.domain.models.feed import FeedPage, RankingTab
from movement.domain.models.metrics import CampaignMetrics
from movement.domain.models.stake import StakeRecord

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class CampaignQueryService(LoggingMixin):
    """Serves campaigns, feeds, metrics, and stakes from the read model.

    Queries take an explicit ``now`` where windowed figures are involved;
    callers that pass None get the time authority's clock.
    """

    def __init__(
        self,
        read_model: ReadModelPort,
        aggregator: MetricsAggregatorService,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._read_model = read_model
        self._aggregator = aggregator
        self._time = time_authority

        self._init_logger(component="query")

    async def get_campaign(self, campaign_id: str) -> Campaign:
        """Return a campaign by slug.

        Raises:
            CampaignNotFoundError: If the slug is unknown.
        """
        campaign = await self._read_model.get_campaign(campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return campaign

    async def list_campaigns(
        self,
        tab: RankingTab = RankingTab.NEW,
        now: int | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        category: CampaignCategory | None = None,
        target_level: TargetLevel | None = None,
    ) -> FeedPage:
        """Return one page of a ranked feed.

        Args:
            tab: NEW, HOT, or TRENDING.
            now: Query time (defaults to the clock).
            limit: Page size, 1..MAX_PAGE_SIZE.
            offset: Index of the first item.
            category: Optional category filter.
            target_level: Optional target level filter.

        Returns:
            FeedPage.

        Raises:
            ValueError: If limit or offset is out of range.
        """
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        query_time = self._time.now() if now is None else now
        ranked = await self._aggregator.rank(
            tab, query_time, category=category, target_level=target_level
        )
        return FeedPage(
            tab=tab,
            items=tuple(ranked[offset : offset + limit]),
            total=len(ranked),
            limit=limit,
            offset=offset,
            evaluated_at=query_time,
        )

    async def get_metrics(self, campaign_id: str, now: int | None = None) -> CampaignMetrics:
        """Return metrics for a known campaign at query time.

        Raises:
            CampaignNotFoundError: If the slug is unknown.
        """
        await self.get_campaign(campaign_id)
        query_time = self._time.now() if now is None else now
        return await self._aggregator.metrics_for(campaign_id, query_time)

    async def get_stake(self, campaign_id: str) -> StakeRecord | None:
        """Return the stake backing a campaign, if one was deposited."""
        return await self._read_model.get_stake_for_campaign(campaign_id)
