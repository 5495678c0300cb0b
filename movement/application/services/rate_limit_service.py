"""Rate limiter for actions and campaign creation.

A local, per-identity anti-spam policy. It is not a security boundary:
one key is rate limited, not one person.

Limits:
- Actions: at most ``actions_per_campaign`` accepted attestations per
  (actor, campaign) within ``action_window_seconds`` of the candidate
  time. The window is symmetric so that an older attestation arriving
  late is judged against newer ones already accepted.
- Campaign creation: at most ``campaigns_per_window`` campaigns per actor
  in the trailing window.

Checks read accepted records from the read model. Check and record are
not atomic; a race can overshoot a limit by one event, which is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass

from movement.application.ports.read_model import ReadModelPort
from movement.application.services.base import LoggingMixin
from movement.config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from movement.domain.errors.rate_limit import RateLimitExceededError
from movement.infrastructure.monitoring.metrics import get_metrics_collector

ACTION_SCOPE = "action"
CAMPAIGN_CREATION_SCOPE = "campaign_creation"


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the action may proceed.
        scope: Which limit was evaluated.
        current_count: Accepted events counted against the limit.
        limit: Configured limit.
        resume_at: When the actor may retry (denials only).
    """

    allowed: bool
    scope: str
    current_count: int
    limit: int
    resume_at: int | None = None

    def raise_if_denied(
        self, actor_key: str, campaign_id: str | None = None
    ) -> None:
        """Raise RateLimitExceededError when the decision is a denial."""
        if not self.allowed and self.resume_at is not None:
            raise RateLimitExceededError(
                actor_key=actor_key,
                scope=self.scope,
                resume_at=self.resume_at,
                campaign_id=campaign_id,
            )


class RateLimitService(LoggingMixin):
    """Evaluates per-identity action and campaign-creation limits.

    Attributes:
        _read_model: Source of accepted attestation and campaign timestamps.
        _config: Limits and windows.
    """

    def __init__(
        self,
        read_model: ReadModelPort,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        """Initialize rate limit service.

        Args:
            read_model: Read model holding accepted records.
            config: Engine configuration.
        """
        self._read_model = read_model
        self._config = config

        self._init_logger(component="ingestion.rate_limit")

    async def check_action(
        self, actor_key: str, campaign_id: str, now: int
    ) -> RateLimitDecision:
        """Check whether ``actor_key`` may act on ``campaign_id`` at ``now``.

        Denied when the actor already has ``actions_per_campaign`` accepted
        attestations strictly within the window of ``now`` (either side).

        Args:
            actor_key: Actor identity key.
            campaign_id: Target campaign.
            now: Candidate time (the attestation's own timestamp during
                ingestion, the wall clock for user submissions).

        Returns:
            RateLimitDecision; resume_at is the latest blocking timestamp
            plus the window.
        """
        window = self._config.action_window_seconds
        limit = self._config.actions_per_campaign
        timestamps = await self._read_model.get_action_timestamps(actor_key, campaign_id)
        blocking = [t for t in timestamps if abs(now - t) < window]

        if len(blocking) < limit:
            return RateLimitDecision(
                allowed=True,
                scope=ACTION_SCOPE,
                current_count=len(blocking),
                limit=limit,
            )

        resume_at = max(blocking) + window
        get_metrics_collector().increment_rate_limit_denials(ACTION_SCOPE)
        self._log_operation(
            "check_action",
            actor_key=actor_key,
            campaign_id=campaign_id,
        ).info(
            "rate_limit_exceeded",
            current_count=len(blocking),
            limit=limit,
            resume_at=resume_at,
        )
        return RateLimitDecision(
            allowed=False,
            scope=ACTION_SCOPE,
            current_count=len(blocking),
            limit=limit,
            resume_at=resume_at,
        )

    async def check_campaign_creation(self, actor_key: str, now: int) -> RateLimitDecision:
        """Check whether ``actor_key`` may create another campaign at ``now``.

        Args:
            actor_key: Creator identity key.
            now: Candidate creation time.

        Returns:
            RateLimitDecision; resume_at is when enough blocking creations
            have left the trailing window to drop below the limit.
        """
        window = self._config.action_window_seconds
        limit = self._config.campaigns_per_window
        timestamps = await self._read_model.get_creation_timestamps(actor_key)
        blocking = sorted(t for t in timestamps if now - window < t <= now)

        if len(blocking) < limit:
            return RateLimitDecision(
                allowed=True,
                scope=CAMPAIGN_CREATION_SCOPE,
                current_count=len(blocking),
                limit=limit,
            )

        resume_at = blocking[len(blocking) - limit] + window
        get_metrics_collector().increment_rate_limit_denials(CAMPAIGN_CREATION_SCOPE)
        self._log_operation("check_campaign_creation", actor_key=actor_key).info(
            "rate_limit_exceeded",
            current_count=len(blocking),
            limit=limit,
            resume_at=resume_at,
        )
        return RateLimitDecision(
            allowed=False,
            scope=CAMPAIGN_CREATION_SCOPE,
            current_count=len(blocking),
            limit=limit,
            resume_at=resume_at,
        )

    async def prune(self, now: int) -> int:
        """Drop rate state that can no longer block anything.

        Attestations older than the replay retention horizon are answered
        DUPLICATE before rate limiting, so timestamps more than one window
        past that horizon can never block an admissible event.

        Returns:
            Number of timestamps removed.
        """
        removed = await self._read_model.prune_rate_state(
            now
            - self._config.replay_retention_seconds
            - self._config.action_window_seconds
        )
        self._log_operation("prune").debug("rate_state_pruned", removed=removed)
        return removed
