"""Bootstrap wiring for remote collaborator adapters."""

from __future__ import annotations

from movement.application.ports.key_value_store import KeyValueStorePort
from movement.application.ports.message_delivery import MessageDeliveryPort
from movement.application.ports.representative_lookup import RepresentativeLookupPort
from movement.bootstrap.engine import get_time_authority
from movement.config.collaborator_config import CollaboratorConfig
from movement.infrastructure.adapters.http.message_delivery import (
    build_message_delivery,
)
from movement.infrastructure.adapters.http.representative_lookup import (
    CachingRepresentativeLookup,
    FiveCallsRepresentativeLookup,
)
from movement.infrastructure.adapters.memory.key_value_store import (
    InMemoryKeyValueStore,
)

_collaborator_config: CollaboratorConfig | None = None
_key_value_store: KeyValueStorePort | None = None
_representative_lookup: RepresentativeLookupPort | None = None
_message_delivery: MessageDeliveryPort | None = None


def get_collaborator_config() -> CollaboratorConfig:
    """Get collaborator configuration."""
    global _collaborator_config
    if _collaborator_config is None:
        _collaborator_config = CollaboratorConfig.from_environment()
    return _collaborator_config


def get_key_value_store() -> KeyValueStorePort:
    """Get the key-value store backing the representative cache."""
    global _key_value_store
    if _key_value_store is None:
        _key_value_store = InMemoryKeyValueStore(get_time_authority())
    return _key_value_store


def get_representative_lookup() -> RepresentativeLookupPort:
    """Get the cached 5 Calls representative lookup."""
    global _representative_lookup
    if _representative_lookup is None:
        config = get_collaborator_config()
        _representative_lookup = CachingRepresentativeLookup(
            FiveCallsRepresentativeLookup(
                base_url=config.five_calls_api_url,
                api_key=config.five_calls_api_key,
                timeout_seconds=config.timeout_seconds,
            ),
            get_key_value_store(),
            ttl_seconds=config.representative_cache_ttl_seconds,
        )
    return _representative_lookup


def get_message_delivery() -> MessageDeliveryPort:
    """Get the configured email delivery adapter.

    Raises:
        MessageDeliveryError: If no provider is configured.
    """
    global _message_delivery
    if _message_delivery is None:
        _message_delivery = build_message_delivery(get_collaborator_config())
    return _message_delivery


def set_collaborator_config(config: CollaboratorConfig) -> None:
    """Set custom collaborator config for testing."""
    global _collaborator_config
    _collaborator_config = config


def set_representative_lookup(lookup: RepresentativeLookupPort) -> None:
    """Set custom representative lookup for testing."""
    global _representative_lookup
    _representative_lookup = lookup


def set_message_delivery(delivery: MessageDeliveryPort) -> None:
    """Set custom message delivery adapter for testing."""
    global _message_delivery
    _message_delivery = delivery


def reset_collaborator_dependencies() -> None:
    """Reset collaborator dependency singletons."""
    global _collaborator_config
    global _key_value_store
    global _representative_lookup
    global _message_delivery

    _collaborator_config = None
    _key_value_store = None
    _representative_lookup = None
    _message_delivery = None
