"""Pure domain services: event validation, action counting, and ranking math."""

from movement.domain.services.action_counting import ActionCountingRule
from movement.domain.services.event_validator import EventValidator
from movement.domain.services.ranking import (
    decay_weight,
    hot_count,
    trending_score,
)

__all__: list[str] = [
    "ActionCountingRule",
    "EventValidator",
    "decay_weight",
    "hot_count",
    "trending_score",
]
