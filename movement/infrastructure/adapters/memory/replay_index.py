"""In-memory replay index with striped per-key locks.

Keys hash onto a fixed set of lock stripes, so concurrent inserts of
different keys rarely contend and there is no global lock on the insert
path. Eviction takes every stripe, in order.

Evicted keys collapse into per-(actor, campaign) nonce sets. Those are
never pruned: a spent nonce must stay spent for as long as the actor can
still publish against the campaign.
"""

from __future__ import annotations

import threading

from movement.application.ports.replay_index import ReplayRecord
from movement.domain.models.attestation import AttestationKey

DEFAULT_STRIPES = 64


class InMemoryReplayIndex:
    """ReplayIndexPort implementation held in process memory."""

    def __init__(self, stripes: int = DEFAULT_STRIPES) -> None:
        """Initialize the index.

        Args:
            stripes: Number of lock stripes.
        """
        if stripes < 1:
            raise ValueError("stripes must be at least 1")
        self._stripes = [threading.Lock() for _ in range(stripes)]
        self._records: dict[AttestationKey, ReplayRecord] = {}
        self._spent_nonces: dict[tuple[str, str], set[str]] = {}

    def _stripe(self, key: AttestationKey) -> threading.Lock:
        return self._stripes[hash(key) % len(self._stripes)]

    def _lookup(self, key: AttestationKey) -> ReplayRecord | None:
        record = self._records.get(key)
        if record is not None:
            return record
        if key.nonce in self._spent_nonces.get((key.actor_key, key.campaign_id), ()):
            return ReplayRecord.tombstone(key)
        return None

    async def insert_if_absent(
        self,
        key: AttestationKey,
        event_id: str,
        timestamp: int,
    ) -> ReplayRecord | None:
        with self._stripe(key):
            existing = self._lookup(key)
            if existing is not None:
                return existing
            self._records[key] = ReplayRecord(key=key, event_id=event_id, timestamp=timestamp)
            return None

    async def get(self, key: AttestationKey) -> ReplayRecord | None:
        with self._stripe(key):
            return self._lookup(key)

    async def evict_older_than(self, cutoff: int) -> int:
        for stripe in self._stripes:
            stripe.acquire()
        try:
            stale = [k for k, record in self._records.items() if record.timestamp < cutoff]
            for key in stale:
                del self._records[key]
                self._spent_nonces.setdefault((key.actor_key, key.campaign_id), set()).add(
                    key.nonce
                )
            return len(stale)
        finally:
            for stripe in reversed(self._stripes):
                stripe.release()

    async def size(self) -> int:
        return len(self._records)

    async def spent_nonce_count(self) -> int:
        """Number of evicted keys still held as tombstones."""
        return sum(len(nonces) for nonces in self._spent_nonces.values())
