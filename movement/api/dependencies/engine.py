"""Engine dependencies for FastAPI routes.

Routes depend on these functions rather than on the bootstrap module
directly, so tests can replace them through ``app.dependency_overrides``.
"""

from movement.application.services.campaign_query_service import CampaignQueryService
from movement.bootstrap.engine import get_campaign_query_service


def get_query_service() -> CampaignQueryService:
    """Get the campaign query service."""
    return get_campaign_query_service()
