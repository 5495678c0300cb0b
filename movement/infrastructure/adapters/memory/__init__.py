"""In-process adapters for the read model, replay index, and key-value store."""

from movement.infrastructure.adapters.memory.key_value_store import InMemoryKeyValueStore
from movement.infrastructure.adapters.memory.read_model_store import InMemoryReadModelStore
from movement.infrastructure.adapters.memory.replay_index import InMemoryReplayIndex

__all__ = [
    "InMemoryKeyValueStore",
    "InMemoryReadModelStore",
    "InMemoryReplayIndex",
]
