"""Ingestion engine, ranking, rate limit, and stake configuration.

Every window and threshold the engine uses lives here, with environment
variable overrides for production tuning. Values read from the
environment are clamped to their valid range; values passed directly
are validated and rejected when out of range.

Environment Variables:
- MOVEMENT_HOT_WINDOW_SECONDS: Hot feed window (default: 86400)
- MOVEMENT_TRENDING_WINDOW_SECONDS: Trending feed window (default: 604800)
- MOVEMENT_TRENDING_HALF_LIFE_SECONDS: Trending decay half-life (default: 86400)
- MOVEMENT_ACTION_WINDOW_SECONDS: Per-campaign action rate window (default: 86400)
- MOVEMENT_ACTIONS_PER_CAMPAIGN: Actions per campaign per window (default: 1)
- MOVEMENT_CAMPAIGNS_PER_WINDOW: Campaign creations per window (default: 5)
- MOVEMENT_MIN_NONCE_LENGTH: Minimum attestation nonce length (default: 32)
- MOVEMENT_EVICTION_GRACE_SECONDS: Replay index grace past trending window (default: 604800)
- MOVEMENT_REPLAY_ANOMALY_THRESHOLD: Replay attempts before warning (default: 5)
- MOVEMENT_INGEST_QUEUE_SIZE: Bounded ingestion queue size (default: 10000)
- MOVEMENT_INGEST_WORKERS: Ingestion consumer tasks (default: 4)
- MOVEMENT_SWEEP_INTERVAL_SECONDS: Stake and eviction sweep period (default: 60)
- MOVEMENT_STAKE_AMOUNT: Default stake in sats (default: 1000)
- MOVEMENT_STAKE_MIN_AMOUNT: Minimum stake in sats (default: 100)
- MOVEMENT_STAKE_MAX_AMOUNT: Maximum stake in sats (default: 10000)
- MOVEMENT_STAKE_REFUND_DELAY_SECONDS: Refund delay (default: 86400)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from movement.domain.services.action_counting import ActionCountingRule

SECONDS_PER_DAY = 86400


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _clamped_env(key: str, default: int, floor: int, ceiling: int) -> int:
    return max(floor, min(_get_int_env(key, default), ceiling))


# =============================================================================
# Ranking windows
# =============================================================================

DEFAULT_HOT_WINDOW_SECONDS = SECONDS_PER_DAY
DEFAULT_TRENDING_WINDOW_SECONDS = 7 * SECONDS_PER_DAY
DEFAULT_TRENDING_HALF_LIFE_SECONDS = SECONDS_PER_DAY

MIN_WINDOW_SECONDS = 60
MAX_WINDOW_SECONDS = 90 * SECONDS_PER_DAY

# =============================================================================
# Rate limits
# =============================================================================

DEFAULT_ACTION_WINDOW_SECONDS = SECONDS_PER_DAY
DEFAULT_ACTIONS_PER_CAMPAIGN = 1
DEFAULT_CAMPAIGNS_PER_WINDOW = 5
MAX_RATE_LIMIT = 1000

# =============================================================================
# Validation and replay protection
# =============================================================================

# 16 random bytes, hex encoded
DEFAULT_MIN_NONCE_LENGTH = 32
MAX_MIN_NONCE_LENGTH = 256

DEFAULT_EVICTION_GRACE_SECONDS = 7 * SECONDS_PER_DAY
DEFAULT_REPLAY_ANOMALY_THRESHOLD = 5

# =============================================================================
# Workers
# =============================================================================

DEFAULT_INGEST_QUEUE_SIZE = 10000
MAX_INGEST_QUEUE_SIZE = 1_000_000
DEFAULT_INGEST_WORKERS = 4
MAX_INGEST_WORKERS = 64
DEFAULT_SWEEP_INTERVAL_SECONDS = 60
MAX_SWEEP_INTERVAL_SECONDS = 3600

# =============================================================================
# Stake escrow
# =============================================================================

DEFAULT_STAKE_AMOUNT = 1000
DEFAULT_STAKE_MIN_AMOUNT = 100
DEFAULT_STAKE_MAX_AMOUNT = 10000
DEFAULT_STAKE_REFUND_DELAY_SECONDS = SECONDS_PER_DAY
MAX_STAKE_AMOUNT = 100_000_000


@dataclass(frozen=True)
class StakeConfig:
    """Stake escrow amounts and refund delay.

    Attributes:
        amount: Default deposit in sats.
        min_amount: Smallest accepted deposit.
        max_amount: Largest accepted deposit.
        refund_delay_seconds: Time from deposit until the stake is refundable.
    """

    amount: int = DEFAULT_STAKE_AMOUNT
    min_amount: int = DEFAULT_STAKE_MIN_AMOUNT
    max_amount: int = DEFAULT_STAKE_MAX_AMOUNT
    refund_delay_seconds: int = DEFAULT_STAKE_REFUND_DELAY_SECONDS

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 1 <= self.min_amount <= self.max_amount <= MAX_STAKE_AMOUNT:
            raise ValueError(
                "stake amounts must satisfy 1 <= min_amount <= max_amount "
                f"<= {MAX_STAKE_AMOUNT}, got min={self.min_amount} max={self.max_amount}"
            )
        if not self.min_amount <= self.amount <= self.max_amount:
            raise ValueError(
                f"amount must be between {self.min_amount} and {self.max_amount}, "
                f"got {self.amount}"
            )
        if self.refund_delay_seconds < 0:
            raise ValueError(
                f"refund_delay_seconds must be non-negative, got {self.refund_delay_seconds}"
            )

    def accepts(self, amount: int) -> bool:
        """Whether ``amount`` is inside the allowed deposit range."""
        return self.min_amount <= amount <= self.max_amount

    @classmethod
    def from_environment(cls) -> StakeConfig:
        """Create config from environment variables with defaults."""
        min_amount = _clamped_env(
            "MOVEMENT_STAKE_MIN_AMOUNT", DEFAULT_STAKE_MIN_AMOUNT, 1, MAX_STAKE_AMOUNT
        )
        max_amount = _clamped_env(
            "MOVEMENT_STAKE_MAX_AMOUNT", DEFAULT_STAKE_MAX_AMOUNT, min_amount, MAX_STAKE_AMOUNT
        )
        amount = _clamped_env(
            "MOVEMENT_STAKE_AMOUNT", DEFAULT_STAKE_AMOUNT, min_amount, max_amount
        )
        delay = _clamped_env(
            "MOVEMENT_STAKE_REFUND_DELAY_SECONDS",
            DEFAULT_STAKE_REFUND_DELAY_SECONDS,
            0,
            MAX_WINDOW_SECONDS,
        )
        return cls(
            amount=amount,
            min_amount=min_amount,
            max_amount=max_amount,
            refund_delay_seconds=delay,
        )


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the ingestion engine.

    Attributes:
        hot_window_seconds: Trailing window counted by the Hot feed.
        trending_window_seconds: Maximum attestation age counted by Trending.
        trending_half_life_seconds: Age at which a Trending contribution halves.
        action_window_seconds: Rolling window for per-campaign action limits.
        actions_per_campaign: Accepted actions per actor per campaign per window.
        campaigns_per_window: Campaign creations per actor per window.
        min_nonce_length: Minimum attestation nonce length in characters.
        eviction_grace_seconds: Extra retention for replay keys past the
            trending window.
        replay_anomaly_threshold: Replay attempts per actor per window before
            a warning is logged.
        ingest_queue_size: Capacity of the ingestion queue.
        ingest_workers: Number of ingestion consumer tasks.
        sweep_interval_seconds: Period of stake and eviction sweeps.
        stake: Stake escrow configuration.
    """

    hot_window_seconds: int = DEFAULT_HOT_WINDOW_SECONDS
    trending_window_seconds: int = DEFAULT_TRENDING_WINDOW_SECONDS
    trending_half_life_seconds: int = DEFAULT_TRENDING_HALF_LIFE_SECONDS
    action_window_seconds: int = DEFAULT_ACTION_WINDOW_SECONDS
    actions_per_campaign: int = DEFAULT_ACTIONS_PER_CAMPAIGN
    campaigns_per_window: int = DEFAULT_CAMPAIGNS_PER_WINDOW
    min_nonce_length: int = DEFAULT_MIN_NONCE_LENGTH
    eviction_grace_seconds: int = DEFAULT_EVICTION_GRACE_SECONDS
    replay_anomaly_threshold: int = DEFAULT_REPLAY_ANOMALY_THRESHOLD
    ingest_queue_size: int = DEFAULT_INGEST_QUEUE_SIZE
    ingest_workers: int = DEFAULT_INGEST_WORKERS
    sweep_interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS
    stake: StakeConfig = field(default_factory=StakeConfig)

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in (
            "hot_window_seconds",
            "trending_window_seconds",
            "trending_half_life_seconds",
            "action_window_seconds",
        ):
            value = getattr(self, name)
            if not MIN_WINDOW_SECONDS <= value <= MAX_WINDOW_SECONDS:
                raise ValueError(
                    f"{name} must be between {MIN_WINDOW_SECONDS} "
                    f"and {MAX_WINDOW_SECONDS}, got {value}"
                )
        if not 1 <= self.actions_per_campaign <= MAX_RATE_LIMIT:
            raise ValueError(
                f"actions_per_campaign must be between 1 and {MAX_RATE_LIMIT}, "
                f"got {self.actions_per_campaign}"
            )
        if not 1 <= self.campaigns_per_window <= MAX_RATE_LIMIT:
            raise ValueError(
                f"campaigns_per_window must be between 1 and {MAX_RATE_LIMIT}, "
                f"got {self.campaigns_per_window}"
            )
        if not 1 <= self.min_nonce_length <= MAX_MIN_NONCE_LENGTH:
            raise ValueError(
                f"min_nonce_length must be between 1 and {MAX_MIN_NONCE_LENGTH}, "
                f"got {self.min_nonce_length}"
            )
        if self.eviction_grace_seconds < 0:
            raise ValueError(
                f"eviction_grace_seconds must be non-negative, got {self.eviction_grace_seconds}"
            )
        if self.replay_anomaly_threshold < 1:
            raise ValueError(
                "replay_anomaly_threshold must be at least 1, "
                f"got {self.replay_anomaly_threshold}"
            )
        if not 1 <= self.ingest_queue_size <= MAX_INGEST_QUEUE_SIZE:
            raise ValueError(
                f"ingest_queue_size must be between 1 and {MAX_INGEST_QUEUE_SIZE}, "
                f"got {self.ingest_queue_size}"
            )
        if not 1 <= self.ingest_workers <= MAX_INGEST_WORKERS:
            raise ValueError(
                f"ingest_workers must be between 1 and {MAX_INGEST_WORKERS}, "
                f"got {self.ingest_workers}"
            )
        if not 1 <= self.sweep_interval_seconds <= MAX_SWEEP_INTERVAL_SECONDS:
            raise ValueError(
                f"sweep_interval_seconds must be between 1 and "
                f"{MAX_SWEEP_INTERVAL_SECONDS}, got {self.sweep_interval_seconds}"
            )

    @property
    def replay_retention_seconds(self) -> int:
        """How long replay keys are held: trending window plus grace."""
        return self.trending_window_seconds + self.eviction_grace_seconds

    @property
    def action_counting_rule(self) -> ActionCountingRule:
        return ActionCountingRule(
            window_seconds=self.action_window_seconds,
            limit=self.actions_per_campaign,
        )

    @classmethod
    def from_environment(cls) -> EngineConfig:
        """Create config from environment variables with defaults.

        Returns:
            EngineConfig with values from environment or defaults,
            clamped to their valid ranges.
        """
        return cls(
            hot_window_seconds=_clamped_env(
                "MOVEMENT_HOT_WINDOW_SECONDS",
                DEFAULT_HOT_WINDOW_SECONDS,
                MIN_WINDOW_SECONDS,
                MAX_WINDOW_SECONDS,
            ),
            trending_window_seconds=_clamped_env(
                "MOVEMENT_TRENDING_WINDOW_SECONDS",
                DEFAULT_TRENDING_WINDOW_SECONDS,
                MIN_WINDOW_SECONDS,
                MAX_WINDOW_SECONDS,
            ),
            trending_half_life_seconds=_clamped_env(
                "MOVEMENT_TRENDING_HALF_LIFE_SECONDS",
                DEFAULT_TRENDING_HALF_LIFE_SECONDS,
                MIN_WINDOW_SECONDS,
                MAX_WINDOW_SECONDS,
            ),
            action_window_seconds=_clamped_env(
                "MOVEMENT_ACTION_WINDOW_SECONDS",
                DEFAULT_ACTION_WINDOW_SECONDS,
                MIN_WINDOW_SECONDS,
                MAX_WINDOW_SECONDS,
            ),
            actions_per_campaign=_clamped_env(
                "MOVEMENT_ACTIONS_PER_CAMPAIGN",
                DEFAULT_ACTIONS_PER_CAMPAIGN,
                1,
                MAX_RATE_LIMIT,
            ),
            campaigns_per_window=_clamped_env(
                "MOVEMENT_CAMPAIGNS_PER_WINDOW",
                DEFAULT_CAMPAIGNS_PER_WINDOW,
                1,
                MAX_RATE_LIMIT,
            ),
            min_nonce_length=_clamped_env(
                "MOVEMENT_MIN_NONCE_LENGTH",
                DEFAULT_MIN_NONCE_LENGTH,
                1,
                MAX_MIN_NONCE_LENGTH,
            ),
            eviction_grace_seconds=_clamped_env(
                "MOVEMENT_EVICTION_GRACE_SECONDS",
                DEFAULT_EVICTION_GRACE_SECONDS,
                0,
                MAX_WINDOW_SECONDS,
            ),
            replay_anomaly_threshold=_clamped_env(
                "MOVEMENT_REPLAY_ANOMALY_THRESHOLD",
                DEFAULT_REPLAY_ANOMALY_THRESHOLD,
                1,
                MAX_RATE_LIMIT,
            ),
            ingest_queue_size=_clamped_env(
                "MOVEMENT_INGEST_QUEUE_SIZE",
                DEFAULT_INGEST_QUEUE_SIZE,
                1,
                MAX_INGEST_QUEUE_SIZE,
            ),
            ingest_workers=_clamped_env(
                "MOVEMENT_INGEST_WORKERS",
                DEFAULT_INGEST_WORKERS,
                1,
                MAX_INGEST_WORKERS,
            ),
            sweep_interval_seconds=_clamped_env(
                "MOVEMENT_SWEEP_INTERVAL_SECONDS",
                DEFAULT_SWEEP_INTERVAL_SECONDS,
                1,
                MAX_SWEEP_INTERVAL_SECONDS,
            ),
            stake=StakeConfig.from_environment(),
        )


# Pre-defined configurations for common use cases

# Default production config
DEFAULT_ENGINE_CONFIG = EngineConfig()

# Testing config: short nonces allowed, small queue, few workers
TEST_ENGINE_CONFIG = EngineConfig(
    min_nonce_length=2,
    replay_anomaly_threshold=2,
    ingest_queue_size=8,
    ingest_workers=2,
    sweep_interval_seconds=1,
)
