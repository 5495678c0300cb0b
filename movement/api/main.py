"""FastAPI application entry point for the Movement engine."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from movement import __version__
from movement.api.middleware.logging_middleware import LoggingMiddleware
from movement.api.routes.campaigns import router as campaigns_router
from movement.api.routes.health import router as health_router
from movement.api.routes.metrics import router as metrics_router
from movement.api.startup import configure_logging, record_service_startup
from movement.bootstrap.engine import (
    start_background_services,
    stop_background_services,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    record_service_startup()
    await start_background_services()
    try:
        yield
    finally:
        await stop_background_services()


app = FastAPI(
    title="Movement Engine API",
    description="Civic campaign feeds, metrics and stakes",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)
app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(campaigns_router)
