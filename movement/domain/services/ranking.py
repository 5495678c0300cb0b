"""Feed ranking math.

Pure functions over sorted attestation timestamps. Callers keep each
campaign's timestamps sorted ascending; every function here then gives
the same result regardless of the order attestations were ingested in.

Trending contribution of one attestation:
    0.5 ** (age / half_life)    for 0 <= age <= trending_window
where age = now - timestamp. Contributions are summed in ascending
timestamp order so the float result is reproducible across replicas.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence

from movement.domain.models.campaign import Campaign
from movement.domain.models.feed import RankedCampaign

# Sentinel for campaigns with no attestations in tie-breaks.
NO_ACTIVITY = -1


def hot_count(sorted_timestamps: Sequence[int], now: int, window: int) -> int:
    """Count timestamps in the closed interval [now - window, now]."""
    lo = bisect_left(sorted_timestamps, now - window)
    hi = bisect_right(sorted_timestamps, now)
    return max(0, hi - lo)


def decay_weight(age: int, half_life: int) -> float:
    """Half-life weight of an attestation ``age`` seconds old."""
    return 0.5 ** (age / half_life)


def trending_score(
    sorted_timestamps: Sequence[int],
    now: int,
    window: int,
    half_life: int,
) -> float:
    """Sum decayed contributions of attestations aged within [0, window].

    Args:
        sorted_timestamps: Attestation timestamps, ascending.
        now: Query time.
        window: Maximum age counted (seconds).
        half_life: Age at which a contribution halves (seconds).

    Returns:
        Trending score; 0.0 when nothing falls in the window.
    """
    lo = bisect_left(sorted_timestamps, now - window)
    hi = bisect_right(sorted_timestamps, now)
    score = 0.0
    for timestamp in sorted_timestamps[lo:hi]:
        score += decay_weight(now - timestamp, half_life)
    return score


def latest_at_or_before(sorted_timestamps: Sequence[int], now: int) -> int | None:
    """Most recent timestamp not after ``now``, or None."""
    hi = bisect_right(sorted_timestamps, now)
    if hi == 0:
        return None
    return sorted_timestamps[hi - 1]


def new_sort_key(campaign: Campaign) -> tuple[int, str]:
    """Newest first, then id ascending."""
    return (-campaign.created_at, campaign.id)


def hot_sort_key(entry: RankedCampaign) -> tuple[int, int, str]:
    """Hot count desc, latest attestation desc, then id ascending."""
    last = entry.metrics.last_action_at
    return (
        -entry.metrics.hot,
        -(last if last is not None else NO_ACTIVITY),
        entry.campaign.id,
    )


def trending_sort_key(entry: RankedCampaign) -> tuple[float, int, str]:
    """Trending score desc, latest attestation desc, then id ascending."""
    last = entry.metrics.last_action_at
    return (
        -entry.metrics.trending_score,
        -(last if last is not None else NO_ACTIVITY),
        entry.campaign.id,
    )
