"""Metrics aggregator and feed ranker.

Consumes admitted campaigns, updates, attestations, and social signals,
writing them into the read model where per-campaign inputs are kept
incrementally (sorted attestation timestamps and signal counters).
Windowed figures are evaluated against the query time, never the
ingestion time, and never by replaying event history.

Feeds:
- NEW: created_at desc, then id asc
- HOT: attestations in [now - hot_window, now] desc, then latest
  attestation desc, then id asc
- TRENDING: sum of 0.5 ** (age / half_life) over ages in
  [0, trending_window], with the same tie-breaks as HOT

Only campaigns the read model knows appear in feeds. Attestations for a
not-yet-known campaign are counted and surface once it arrives. Per
(actor, campaign), only the attestations chosen by the action counting
rule enter the figures.
"""

from __future__ import annotations

from movement.application.ports.read_model import (
    CampaignActivity,
    CampaignWriteOutcome,
    ReadModelPort,
    UpdateWriteOutcome,
)
from movement.application.services.base import LoggingMixin
from movement.config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import (
    Campaign,
    CampaignCategory,
    CampaignUpdate,
    TargetLevel,
)
from movement.domain.models.events import SocialSignalEvent
from movement.domain.models.feed import RankedCampaign, RankingTab
from movement.domain.models.metrics import CampaignMetrics
from movement.domain.services.ranking import (
    hot_count,
    hot_sort_key,
    latest_at_or_before,
    new_sort_key,
    trending_score,
    trending_sort_key,
)


class MetricsAggregatorService(LoggingMixin):
    """Maintains campaign metrics and serves ranked feeds.

    Attributes:
        _read_model: Store for campaigns and their activity.
        _config: Ranking windows.
    """

    def __init__(
        self,
        read_model: ReadModelPort,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        """Initialize the aggregator.

        Args:
            read_model: Read model store.
            config: Engine configuration.
        """
        self._read_model = read_model
        self._config = config

        self._init_logger(component="ingestion.aggregator")

    async def get_campaign(self, campaign_id: str) -> Campaign | None:
        return await self._read_model.get_campaign(campaign_id)

    async def apply_campaign(self, campaign: Campaign) -> CampaignWriteOutcome:
        """Record a campaign; same-creator slug conflicts resolve by precedence."""
        outcome = await self._read_model.put_campaign(campaign)
        self._log_operation(
            "apply_campaign",
            campaign_id=campaign.id,
            event_id=campaign.event_id,
        ).debug("campaign_applied", outcome=outcome.value)
        return outcome

    async def apply_update(self, update: CampaignUpdate) -> UpdateWriteOutcome:
        """Record a campaign update.

        Raises:
            UnauthorizedUpdateError: If the issuer does not own the campaign.
        """
        outcome = await self._read_model.apply_update(update)
        self._log_operation(
            "apply_update",
            campaign_id=update.campaign_id,
            event_id=update.event_id,
        ).debug("update_applied", outcome=outcome.value)
        return outcome

    async def apply_attestation(self, attestation: ActionAttestation) -> bool:
        """Record an admitted attestation; True if it is counted."""
        return await self._read_model.record_attestation(attestation)

    async def apply_social_signal(self, signal: SocialSignalEvent) -> bool:
        """Count a social signal once per signal event id."""
        return await self._read_model.record_social_signal(signal)

    def compute_metrics(self, activity: CampaignActivity, now: int) -> CampaignMetrics:
        """Evaluate windowed metrics for an activity snapshot at ``now``.

        Args:
            activity: Snapshot from the read model.
            now: Query time.

        Returns:
            CampaignMetrics with hot and trending evaluated at ``now``.
        """
        timestamps = activity.timestamps
        return CampaignMetrics(
            campaign_id=activity.campaign_id,
            total=activity.total,
            hot=hot_count(timestamps, now, self._config.hot_window_seconds),
            trending_score=trending_score(
                timestamps,
                now,
                self._config.trending_window_seconds,
                self._config.trending_half_life_seconds,
            ),
            share_count=activity.share_count,
            reaction_count=activity.reaction_count,
            comment_count=activity.comment_count,
            last_action_at=latest_at_or_before(timestamps, now),
            evaluated_at=now,
        )

    async def metrics_for(self, campaign_id: str, now: int) -> CampaignMetrics:
        """Metrics for one campaign id at query time ``now``."""
        activity = await self._read_model.get_activity(campaign_id)
        return self.compute_metrics(activity, now)

    async def rank(
        self,
        tab: RankingTab,
        now: int,
        category: CampaignCategory | None = None,
        target_level: TargetLevel | None = None,
    ) -> list[RankedCampaign]:
        """Rank every known campaign for a feed tab.

        Args:
            tab: NEW, HOT, or TRENDING.
            now: Query time for windowed rankings.
            category: Only campaigns declaring this category.
            target_level: Only campaigns targeting this level.

        Returns:
            Full ranking, best first.
        """
        campaigns = [
            campaign
            for campaign in await self._read_model.list_campaigns()
            if (category is None or category in campaign.categories)
            and (target_level is None or target_level in campaign.target_levels)
        ]
        activity = await self._read_model.list_activity(c.id for c in campaigns)

        entries = [
            RankedCampaign(
                campaign=campaign,
                metrics=self.compute_metrics(
                    activity.get(campaign.id, CampaignActivity(campaign_id=campaign.id)),
                    now,
                ),
            )
            for campaign in campaigns
        ]

        if tab is RankingTab.NEW:
            entries.sort(key=lambda entry: new_sort_key(entry.campaign))
        elif tab is RankingTab.HOT:
            entries.sort(key=hot_sort_key)
        else:
            entries.sort(key=trending_sort_key)

        self._log_operation("rank", tab=tab.value).debug(
            "feed_ranked",
            campaigns=len(entries),
            now=now,
        )
        return entries
