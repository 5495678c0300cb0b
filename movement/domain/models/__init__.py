"""Domain models for the Movement engine.

Contains value objects and domain models that represent core concepts.
These models are immutable and contain no infrastructure dependencies.
"""

from movement.domain.models.attestation import ActionAttestation, AttestationKey
from movement.domain.models.campaign import (
    Campaign,
    CampaignCategory,
    CampaignStatus,
    CampaignUpdate,
    TargetLevel,
)
from movement.domain.models.feed import FeedPage, RankedCampaign, RankingTab
from movement.domain.models.metrics import CampaignMetrics
from movement.domain.models.stake import StakeRecord, StakeState

__all__: list[str] = [
    "ActionAttestation",
    "AttestationKey",
    "Campaign",
    "CampaignCategory",
    "CampaignMetrics",
    "CampaignStatus",
    "CampaignUpdate",
    "FeedPage",
    "RankedCampaign",
    "RankingTab",
    "StakeRecord",
    "StakeState",
    "TargetLevel",
]
