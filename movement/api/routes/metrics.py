"""Metrics endpoint for Prometheus scraping."""

from fastapi import APIRouter, Response

from movement.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    generate_metrics,
)

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns engine metrics in Prometheus exposition format for scraping.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    """Get engine metrics in Prometheus format."""
    return Response(content=generate_metrics(), media_type=METRICS_CONTENT_TYPE)
