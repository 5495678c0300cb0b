"""In-memory read model store.

The read model is derived state, rebuilt by re-ingesting events, so an
in-process store is the production adapter. All writes happen under one
re-entrant lock and are short; every read returns immutable snapshots
(frozen dataclasses and tuples) so callers never observe a partial write.

Every admitted attestation is kept as a candidate for its (actor,
campaign) pair; only the subset chosen by the action counting rule feeds
metrics and rate limits, so totals do not depend on arrival order.
"""

from __future__ import annotations

import threading
from bisect import bisect_left, insort
from collections.abc import Iterable

from movement.application.ports.read_model import (
    CampaignActivity,
    CampaignWriteOutcome,
    UpdateWriteOutcome,
)
from movement.config.engine_config import DEFAULT_ENGINE_CONFIG
from movement.domain.errors.campaign import UnauthorizedUpdateError
from movement.domain.models.attestation import ActionAttestation
from movement.domain.models.campaign import Campaign, CampaignUpdate
from movement.domain.models.events import SocialSignalEvent, SocialSignalType
from movement.domain.models.stake import StakeRecord, StakeState
from movement.domain.services.action_counting import ActionCandidate, ActionCountingRule


class InMemoryReadModelStore:
    """ReadModelPort implementation held in process memory.

    Attributes:
        _base_campaigns: Canonical campaign per slug, as parsed.
        _campaigns: Canonical campaign per slug with updates applied.
        _slug_by_event_id: Canonical campaign event id -> slug.
        _updates: Every stored update, by slug then update event id.
        _timestamps: Sorted counted attestation timestamps per campaign id.
        _activity_cache: Last timestamp snapshot per campaign id.
        _signals: Signal event ids per referenced campaign event, by type.
        _seen_signals: Every counted signal event id.
        _action_candidates: Admitted (timestamp, nonce) per (actor, campaign).
        _action_counted: Counted subset of the candidates per (actor, campaign).
        _creation_timestamps: Campaign created_at per creator key.
        _stakes: Stake records by id.
        _stake_by_campaign: Most recent stake id per campaign.
    """

    def __init__(
        self,
        counting_rule: ActionCountingRule = DEFAULT_ENGINE_CONFIG.action_counting_rule,
    ) -> None:
        self._counting_rule = counting_rule
        self._lock = threading.RLock()
        self._base_campaigns: dict[str, Campaign] = {}
        self._campaigns: dict[str, Campaign] = {}
        self._slug_by_event_id: dict[str, str] = {}
        self._updates: dict[str, dict[str, CampaignUpdate]] = {}
        self._timestamps: dict[str, list[int]] = {}
        self._activity_cache: dict[str, tuple[int, ...]] = {}
        self._signals: dict[str, dict[SocialSignalType, set[str]]] = {}
        self._seen_signals: set[str] = set()
        self._action_candidates: dict[tuple[str, str], list[ActionCandidate]] = {}
        self._action_counted: dict[tuple[str, str], list[ActionCandidate]] = {}
        self._creation_timestamps: dict[str, list[int]] = {}
        self._stakes: dict[str, StakeRecord] = {}
        self._stake_by_campaign: dict[str, str] = {}

    # Campaigns

    def _derive(self, slug: str) -> None:
        base = self._base_campaigns[slug]
        self._campaigns[slug] = base.with_updates(self._updates.get(slug, {}).values())

    def _store_base(self, campaign: Campaign) -> None:
        created = self._creation_timestamps.setdefault(campaign.creator_key, [])
        previous = self._base_campaigns.get(campaign.id)
        if previous is not None:
            self._slug_by_event_id.pop(previous.event_id, None)
            # One creation per slug; pruning may already have dropped it.
            if previous.created_at in created:
                created.remove(previous.created_at)
        self._base_campaigns[campaign.id] = campaign
        self._slug_by_event_id[campaign.event_id] = campaign.id
        created.append(campaign.created_at)
        self._derive(campaign.id)

    async def put_campaign(self, campaign: Campaign) -> CampaignWriteOutcome:
        with self._lock:
            existing = self._base_campaigns.get(campaign.id)
            if existing is None:
                self._store_base(campaign)
                return CampaignWriteOutcome.CREATED
            if existing.creator_key != campaign.creator_key:
                return CampaignWriteOutcome.CLAIMED
            if existing.event_id == campaign.event_id or not campaign.precedes(existing):
                return CampaignWriteOutcome.IGNORED
            self._store_base(campaign)
            return CampaignWriteOutcome.REPLACED

    async def put_campaign_with_stake(
        self,
        campaign: Campaign,
        stake: StakeRecord,
    ) -> CampaignWriteOutcome:
        with self._lock:
            if campaign.id in self._base_campaigns:
                return CampaignWriteOutcome.IGNORED
            self._store_base(campaign)
            self._stakes[stake.id] = stake
            self._stake_by_campaign[stake.campaign_id] = stake.id
            return CampaignWriteOutcome.CREATED

    async def apply_update(self, update: CampaignUpdate) -> UpdateWriteOutcome:
        with self._lock:
            stored = self._updates.setdefault(update.campaign_id, {})
            if update.event_id in stored:
                return UpdateWriteOutcome.DUPLICATE
            stored[update.event_id] = update

            base = self._base_campaigns.get(update.campaign_id)
            if base is None:
                return UpdateWriteOutcome.PARKED
            if update.issuer_key != base.creator_key:
                raise UnauthorizedUpdateError(
                    update.campaign_id, update.issuer_key, base.creator_key
                )
            self._derive(update.campaign_id)
            return UpdateWriteOutcome.APPLIED

    async def get_campaign(self, campaign_id: str) -> Campaign | None:
        with self._lock:
            return self._campaigns.get(campaign_id)

    async def list_campaigns(self) -> list[Campaign]:
        with self._lock:
            return list(self._campaigns.values())

    # Activity

    async def record_attestation(self, attestation: ActionAttestation) -> bool:
        pair = (attestation.actor_key, attestation.campaign_id)
        candidate: ActionCandidate = (attestation.timestamp, attestation.nonce)
        with self._lock:
            candidates = self._action_candidates.setdefault(pair, [])
            position = bisect_left(candidates, candidate)
            if position < len(candidates) and candidates[position] == candidate:
                return candidate in self._action_counted.get(pair, ())
            candidates.insert(position, candidate)

            # Counting before the new candidate is settled; re-sweep the rest.
            previous = self._action_counted.get(pair, [])
            split = bisect_left(previous, candidate)
            counted = self._counting_rule.extend(previous[:split], candidates[position:])
            self._action_counted[pair] = counted
            self._retally(attestation.campaign_id, previous[split:], counted[split:])
            return candidate in counted[split:]

    def _retally(
        self,
        campaign_id: str,
        before: list[ActionCandidate],
        after: list[ActionCandidate],
    ) -> None:
        dropped = set(before) - set(after)
        added = set(after) - set(before)
        if not dropped and not added:
            return
        timestamps = self._timestamps.setdefault(campaign_id, [])
        for timestamp, _ in dropped:
            del timestamps[bisect_left(timestamps, timestamp)]
        for timestamp, _ in added:
            insort(timestamps, timestamp)
        self._activity_cache.pop(campaign_id, None)

    async def record_social_signal(self, signal: SocialSignalEvent) -> bool:
        with self._lock:
            if signal.event_id in self._seen_signals:
                return False
            self._seen_signals.add(signal.event_id)
            by_type = self._signals.setdefault(signal.campaign_event_id, {})
            by_type.setdefault(signal.signal_type, set()).add(signal.event_id)
            return True

    def _snapshot(self, campaign_id: str) -> CampaignActivity:
        timestamps = self._activity_cache.get(campaign_id)
        if timestamps is None:
            timestamps = tuple(self._timestamps.get(campaign_id, ()))
            self._activity_cache[campaign_id] = timestamps

        base = self._base_campaigns.get(campaign_id)
        signals = self._signals.get(base.event_id, {}) if base is not None else {}
        return CampaignActivity(
            campaign_id=campaign_id,
            timestamps=timestamps,
            share_count=len(signals.get(SocialSignalType.SHARE, ())),
            reaction_count=len(signals.get(SocialSignalType.REACTION, ())),
            comment_count=len(signals.get(SocialSignalType.COMMENT, ())),
        )

    async def get_activity(self, campaign_id: str) -> CampaignActivity:
        with self._lock:
            return self._snapshot(campaign_id)

    async def list_activity(
        self, campaign_ids: Iterable[str]
    ) -> dict[str, CampaignActivity]:
        with self._lock:
            return {cid: self._snapshot(cid) for cid in campaign_ids}

    # Rate limit state

    async def get_action_timestamps(self, actor_key: str, campaign_id: str) -> list[int]:
        with self._lock:
            counted = self._action_counted.get((actor_key, campaign_id), ())
            return [timestamp for timestamp, _ in counted]

    async def get_creation_timestamps(self, actor_key: str) -> list[int]:
        with self._lock:
            return list(self._creation_timestamps.get(actor_key, ()))

    async def prune_rate_state(self, cutoff: int) -> int:
        removed = 0
        with self._lock:
            for pair in list(self._action_candidates):
                candidates = self._action_candidates[pair]
                kept = candidates[bisect_left(candidates, (cutoff, "")):]
                removed += len(candidates) - len(kept)
                if kept:
                    self._action_candidates[pair] = kept
                    counted = self._action_counted.get(pair, [])
                    self._action_counted[pair] = counted[bisect_left(counted, (cutoff, "")):]
                else:
                    del self._action_candidates[pair]
                    self._action_counted.pop(pair, None)

            for key in list(self._creation_timestamps):
                created = self._creation_timestamps[key]
                kept_created = [t for t in created if t >= cutoff]
                removed += len(created) - len(kept_created)
                if kept_created:
                    self._creation_timestamps[key] = kept_created
                else:
                    del self._creation_timestamps[key]
        return removed

    # Stakes

    async def put_stake(self, stake: StakeRecord) -> None:
        with self._lock:
            self._stakes[stake.id] = stake
            current = self._stake_by_campaign.get(stake.campaign_id)
            if current is None or current == stake.id:
                self._stake_by_campaign[stake.campaign_id] = stake.id
            elif self._stakes[current].staked_at <= stake.staked_at:
                self._stake_by_campaign[stake.campaign_id] = stake.id

    async def get_stake(self, stake_id: str) -> StakeRecord | None:
        with self._lock:
            return self._stakes.get(stake_id)

    async def get_stake_for_campaign(self, campaign_id: str) -> StakeRecord | None:
        with self._lock:
            stake_id = self._stake_by_campaign.get(campaign_id)
            return self._stakes.get(stake_id) if stake_id is not None else None

    async def list_stakes(self, state: StakeState | None = None) -> list[StakeRecord]:
        with self._lock:
            stakes = [
                stake
                for stake in self._stakes.values()
                if state is None or stake.state is state
            ]
        return sorted(stakes, key=lambda stake: (stake.staked_at, stake.id))
