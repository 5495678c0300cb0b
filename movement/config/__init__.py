"""Configuration module for the Movement engine.

Available Configurations:
- EngineConfig: ranking windows, rate limits, replay retention, workers
- StakeConfig: stake escrow amounts and refund delay
- CollaboratorConfig: representative lookup and message delivery endpoints
"""

from movement.config.collaborator_config import CollaboratorConfig
from movement.config.engine_config import (
    DEFAULT_ENGINE_CONFIG,
    TEST_ENGINE_CONFIG,
    EngineConfig,
    StakeConfig,
)

__all__ = [
    "CollaboratorConfig",
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
    "StakeConfig",
    "TEST_ENGINE_CONFIG",
]
