"""Pydantic response models for the Movement API."""

from movement.api.models.campaign import (
    CampaignMetricsResponse,
    CampaignResponse,
    ErrorResponse,
    FeedPageResponse,
    RankedCampaignResponse,
    StakeResponse,
)
from movement.api.models.health import HealthResponse

__all__ = [
    "CampaignMetricsResponse",
    "CampaignResponse",
    "ErrorResponse",
    "FeedPageResponse",
    "HealthResponse",
    "RankedCampaignResponse",
    "StakeResponse",
]
