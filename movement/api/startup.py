"""Startup hooks for the Movement API.

Usage in the FastAPI lifespan:
    configure_logging()
    record_service_startup()
"""

import os

from dotenv import load_dotenv
from structlog import get_logger

from movement.infrastructure.monitoring.metrics import get_metrics_collector
from movement.infrastructure.observability import configure_structlog

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"
SERVICE_NAME = "api"

logger = get_logger()


def configure_logging() -> None:
    """Load ``.env`` and configure structlog for the current environment.

    ENVIRONMENT=production selects JSON output; anything else renders
    to the console.
    """
    load_dotenv()
    environment = os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment)
    logger.info("logging_configured", environment=environment)


def record_service_startup() -> None:
    """Record API startup for the uptime and restart metrics."""
    get_metrics_collector().record_startup(SERVICE_NAME)
    logger.info("service_started", service=SERVICE_NAME)
