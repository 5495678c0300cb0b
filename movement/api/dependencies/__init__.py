"""FastAPI dependency providers."""

from movement.api.dependencies.engine import get_query_service

__all__ = ["get_query_service"]
