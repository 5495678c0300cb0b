"""Application services: orchestration over domain logic and ports."""

from movement.application.services.action_submission_service import (
    ActionSubmissionService,
)
from movement.application.services.campaign_query_service import CampaignQueryService
from movement.application.services.campaign_submission_service import (
    CampaignSubmission,
    CampaignSubmissionService,
)
from movement.application.services.ingestion_service import (
    IngestionOutcome,
    IngestionService,
    IngestionStatus,
)
from movement.application.services.metrics_aggregator_service import (
    MetricsAggregatorService,
)
from movement.application.services.rate_limit_service import (
    RateLimitDecision,
    RateLimitService,
)
from movement.application.services.replay_guard_service import (
    AdmissionResult,
    ReplayGuardService,
)
from movement.application.services.stake_escrow_service import (
    StakeEscrowService,
    SweepSummary,
)

__all__ = [
    "ActionSubmissionService",
    "AdmissionResult",
    "CampaignQueryService",
    "CampaignSubmission",
    "CampaignSubmissionService",
    "IngestionOutcome",
    "IngestionService",
    "IngestionStatus",
    "MetricsAggregatorService",
    "RateLimitDecision",
    "RateLimitService",
    "ReplayGuardService",
    "StakeEscrowService",
    "SweepSummary",
]
