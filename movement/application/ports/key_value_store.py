"""Key-Value Store Port - injected persistence for client-side caches.

Callers never assume a particular medium (memory, disk, browser storage);
they store strings under keys with an optional time-to-live.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStorePort(Protocol):
    """Protocol for a string key-value store with optional expiry.

    Contract:
    - get returns None for missing or expired keys
    - set overwrites any existing value and resets its expiry
    - delete is a no-op for missing keys
    """

    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store ``value`` under ``key``.

        Args:
            key: Storage key.
            value: Serialized value.
            ttl_seconds: Expiry in seconds; None keeps the value indefinitely.
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...
