"""Replay Index Port - first-arrival registry of attestation keys.

The index is the single point of mutual exclusion in the pipeline:
insert_if_absent must be atomic per key so two concurrent deliveries of
the same attestation can never both be admitted.

Eviction drops the full record but keeps a tombstone for the key, so a
nonce stays spent even when it is re-signed with a fresh timestamp.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from movement.domain.models.attestation import AttestationKey


@dataclass(frozen=True)
class ReplayRecord:
    """First admission of an attestation key.

    Attributes:
        key: Attestation identity.
        event_id: Event id of the first admitted delivery, None once evicted.
        timestamp: Attestation timestamp (used for eviction), None once evicted.
    """

    key: AttestationKey
    event_id: str | None
    timestamp: int | None

    @property
    def evicted(self) -> bool:
        return self.event_id is None

    @classmethod
    def tombstone(cls, key: AttestationKey) -> ReplayRecord:
        return cls(key=key, event_id=None, timestamp=None)


@runtime_checkable
class ReplayIndexPort(Protocol):
    """Protocol for the attestation key index."""

    async def insert_if_absent(
        self,
        key: AttestationKey,
        event_id: str,
        timestamp: int,
    ) -> ReplayRecord | None:
        """Atomically register ``key`` unless it is already present.

        Args:
            key: Attestation identity.
            event_id: Event id of this delivery.
            timestamp: Attestation timestamp.

        Returns:
            None if the key was inserted, otherwise the existing record
            (a tombstone if the key was evicted).
        """
        ...

    async def get(self, key: AttestationKey) -> ReplayRecord | None:
        """Return the record or tombstone for ``key`` without modifying the index."""
        ...

    async def evict_older_than(self, cutoff: int) -> int:
        """Replace every record with timestamp < cutoff by a tombstone.

        Returns:
            Number of records removed.
        """
        ...

    async def size(self) -> int:
        """Number of full records currently held."""
        ...
