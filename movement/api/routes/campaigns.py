"""Campaign feed and detail routes.

All routes are reads over the derived read model. Optional ``now``
parameters pin the evaluation time of windowed metrics; without them
the engine clock is used.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from movement.api.dependencies.engine import get_query_service
from movement.api.models.campaign import (
    CampaignMetricsResponse,
    CampaignResponse,
    ErrorResponse,
    FeedPageResponse,
    StakeResponse,
)
from movement.application.services.campaign_query_service import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    CampaignQueryService,
)
from movement.domain.errors.campaign import CampaignNotFoundError
from movement.domain.models.campaign import CampaignCategory, TargetLevel
from movement.domain.models.feed import RankingTab

router = APIRouter(prefix="/v1/campaigns", tags=["campaigns"])

ERROR_TYPE_BASE = "urn:movement:errors"


def _problem(request: Request, status: int, slug: str, title: str, detail: str) -> HTTPException:
    return HTTPException(
        status_code=status,
        detail={
            "type": f"{ERROR_TYPE_BASE}:{slug}",
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
        },
    )


def _not_found(request: Request, error: CampaignNotFoundError) -> HTTPException:
    return _problem(request, 404, "campaign-not-found", "Campaign Not Found", str(error))


@router.get(
    "",
    response_model=FeedPageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid paging"}},
    summary="List campaigns",
    description="One page of the new, hot, or trending feed with optional filters.",
)
async def list_campaigns(
    request: Request,
    tab: RankingTab = Query(RankingTab.NEW),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    category: CampaignCategory | None = Query(None),
    target_level: TargetLevel | None = Query(None),
    now: int | None = Query(None, ge=0, description="Evaluation time (unix seconds)"),
    query_service: CampaignQueryService = Depends(get_query_service),
) -> FeedPageResponse:
    try:
        page = await query_service.list_campaigns(
            tab=tab,
            now=now,
            limit=limit,
            offset=offset,
            category=category,
            target_level=target_level,
        )
    except ValueError as e:
        raise _problem(request, 400, "invalid-paging", "Invalid Paging", str(e))
    return FeedPageResponse.from_domain(page)


@router.get(
    "/{campaign_id}",
    response_model=CampaignResponse,
    responses={404: {"model": ErrorResponse, "description": "Campaign not found"}},
    summary="Get a campaign",
)
async def get_campaign(
    campaign_id: str,
    request: Request,
    query_service: CampaignQueryService = Depends(get_query_service),
) -> CampaignResponse:
    try:
        campaign = await query_service.get_campaign(campaign_id)
    except CampaignNotFoundError as e:
        raise _not_found(request, e)
    return CampaignResponse.from_domain(campaign)


@router.get(
    "/{campaign_id}/metrics",
    response_model=CampaignMetricsResponse,
    responses={404: {"model": ErrorResponse, "description": "Campaign not found"}},
    summary="Get campaign metrics",
)
async def get_campaign_metrics(
    campaign_id: str,
    request: Request,
    now: int | None = Query(None, ge=0, description="Evaluation time (unix seconds)"),
    query_service: CampaignQueryService = Depends(get_query_service),
) -> CampaignMetricsResponse:
    try:
        metrics = await query_service.get_metrics(campaign_id, now=now)
    except CampaignNotFoundError as e:
        raise _not_found(request, e)
    return CampaignMetricsResponse.from_domain(metrics)


@router.get(
    "/{campaign_id}/stake",
    response_model=StakeResponse,
    responses={404: {"model": ErrorResponse, "description": "No stake for campaign"}},
    summary="Get the stake backing a campaign",
    description="Only campaigns created through this engine carry a stake.",
)
async def get_campaign_stake(
    campaign_id: str,
    request: Request,
    query_service: CampaignQueryService = Depends(get_query_service),
) -> StakeResponse:
    stake = await query_service.get_stake(campaign_id)
    if stake is None:
        raise _problem(
            request,
            404,
            "stake-not-found",
            "Stake Not Found",
            f"No stake recorded for campaign: {campaign_id}",
        )
    return StakeResponse.from_domain(stake)
