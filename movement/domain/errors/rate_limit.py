"""Rate limit errors for actions and campaign creation.

The limiter is a local, per-identity policy. Denials are surfaced to the
immediate caller with the time at which the actor may try again.
"""

from __future__ import annotations

from movement.domain.exceptions import MovementError


class RateLimitExceededError(MovementError):
    """Raised when an actor exceeds an action or campaign-creation limit.

    Attributes:
        actor_key: Identity key of the rate-limited actor.
        scope: "action" or "campaign_creation".
        resume_at: Unix timestamp (seconds) when the actor may retry.
        campaign_id: Campaign the action targeted (action scope only).
    """

    def __init__(
        self,
        actor_key: str,
        scope: str,
        resume_at: int,
        campaign_id: str | None = None,
    ) -> None:
        """Initialize rate limit exceeded error.

        Args:
            actor_key: Identity key of the actor.
            scope: Which limit was hit.
            resume_at: Unix seconds when the limit clears.
            campaign_id: Target campaign for action limits.
        """
        self.actor_key = actor_key
        self.scope = scope
        self.resume_at = resume_at
        self.campaign_id = campaign_id
        target = f" on campaign {campaign_id}" if campaign_id else ""
        super().__init__(
            f"Rate limit exceeded for {actor_key} ({scope}){target}. "
            f"Resumes at {resume_at}."
        )
