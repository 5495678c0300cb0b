"""Domain errors for the Movement engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from MovementError.
"""

from movement.domain.errors.campaign import (
    CampaignAlreadyExistsError,
    CampaignNotFoundError,
    UnauthorizedUpdateError,
)
from movement.domain.errors.collaborator import (
    InvalidPostalCodeError,
    MessageDeliveryError,
    RepresentativeLookupError,
)
from movement.domain.errors.event import MalformedEventError
from movement.domain.errors.rate_limit import RateLimitExceededError
from movement.domain.errors.stake import (
    InvalidStakeAmountError,
    InvalidStakeTransitionError,
    StakeAlreadyTerminalError,
    StakeNotFoundError,
)

__all__: list[str] = [
    "CampaignAlreadyExistsError",
    "CampaignNotFoundError",
    "InvalidPostalCodeError",
    "InvalidStakeAmountError",
    "InvalidStakeTransitionError",
    "MalformedEventError",
    "MessageDeliveryError",
    "RateLimitExceededError",
    "RepresentativeLookupError",
    "StakeAlreadyTerminalError",
    "StakeNotFoundError",
    "UnauthorizedUpdateError",
]
