"""In-memory key-value store with expiry."""

from __future__ import annotations

import threading

from movement.application.ports.time_authority import TimeAuthorityProtocol


class InMemoryKeyValueStore:
    """KeyValueStorePort implementation held in process memory.

    Expiry is checked lazily on read against the injected clock.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
        self._time = time_authority
        self._lock = threading.Lock()
        self._values: dict[str, tuple[str, int | None]] = {}

    async def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._values.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._time.now() >= expires_at:
                del self._values[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = None if ttl_seconds is None else self._time.now() + ttl_seconds
        with self._lock:
            self._values[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)
