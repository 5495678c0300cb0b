"""API routers."""

from movement.api.routes.campaigns import router as campaigns_router
from movement.api.routes.health import router as health_router
from movement.api.routes.metrics import router as metrics_router

__all__ = ["campaigns_router", "health_router", "metrics_router"]
