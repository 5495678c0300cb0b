"""
Domain layer - Pure business logic for the Movement engine.

This layer contains:
- Domain models (campaigns, attestations, metrics, stakes)
- Event schema variants parsed from raw relay events
- Pure domain services (validation, ranking math)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from movement.domain.exceptions import MovementError

__all__: list[str] = ["MovementError"]
