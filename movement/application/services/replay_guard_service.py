"""Replay & deduplication guard for action attestations.

Relays redeliver events freely, and a hostile relay may re-sign a copied
attestation into a new event. The guard admits each attestation identity
(actor_key, campaign_id, nonce) exactly once, no matter how many times or
in what order it arrives.

Rules:
- First arrival wins, regardless of source
- Redelivery of the same event is benign and is not an anomaly
- The same identity inside a different event is a replay attempt; replay
  attempts are counted per actor and warned about past a threshold
- Eviction never causes re-admission: anything older than the eviction
  low-water mark is answered DUPLICATE, and an evicted nonce re-signed
  with a fresh timestamp hits its tombstone and is a replay attempt
"""

from __future__ import annotations

from collections import deque
from enum import Enum

from movement.application.ports.replay_index import ReplayIndexPort
from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.services.base import LoggingMixin
from movement.config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from movement.domain.models.attestation import ActionAttestation, AttestationKey
from movement.infrastructure.monitoring.metrics import get_metrics_collector


class AdmissionResult(str, Enum):
    """Outcome of offering an attestation to the guard."""

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"


class ReplayGuardService(LoggingMixin):
    """Admits attestation identities exactly once.

    Attributes:
        _index: Atomic first-arrival key index.
        _time: Clock for the replay anomaly window.
        _config: Retention and anomaly thresholds.
        _low_water_mark: Attestations older than this are always DUPLICATE.
        _replay_attempts: Per-actor times of recent replay attempts.
    """

    def __init__(
        self,
        index: ReplayIndexPort,
        time_authority: TimeAuthorityProtocol,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        """Initialize the guard.

        Args:
            index: Replay index adapter.
            time_authority: Clock used for anomaly windows.
            config: Engine configuration.
        """
        self._index = index
        self._time = time_authority
        self._config = config
        self._low_water_mark: int | None = None
        self._replay_attempts: dict[str, deque[int]] = {}

        self._init_logger(component="ingestion.replay_guard")

    @property
    def low_water_mark(self) -> int | None:
        return self._low_water_mark

    def _below_low_water_mark(self, timestamp: int) -> bool:
        return self._low_water_mark is not None and timestamp < self._low_water_mark

    async def peek(self, key: AttestationKey, timestamp: int) -> bool:
        """Whether an attestation would be answered DUPLICATE.

        Read-only: used to classify redeliveries before rate limiting so a
        redelivered accepted attestation is never reported as rate limited.

        Args:
            key: Attestation identity.
            timestamp: Attestation timestamp.

        Returns:
            True if the key is known or below the eviction low-water mark.
        """
        if self._below_low_water_mark(timestamp):
            return True
        return await self._index.get(key) is not None

    async def admit(self, attestation: ActionAttestation) -> AdmissionResult:
        """Admit an attestation unless its identity was seen before.

        Args:
            attestation: Validated attestation.

        Returns:
            ACCEPTED for the first arrival, DUPLICATE otherwise.
        """
        log = self._log_operation(
            "admit",
            campaign_id=attestation.campaign_id,
            actor_key=attestation.actor_key,
            event_id=attestation.event_id,
        )

        if self._below_low_water_mark(attestation.timestamp):
            get_metrics_collector().increment_duplicates()
            log.debug(
                "attestation_below_low_water_mark",
                timestamp=attestation.timestamp,
                low_water_mark=self._low_water_mark,
            )
            return AdmissionResult.DUPLICATE

        existing = await self._index.insert_if_absent(
            attestation.key,
            attestation.event_id,
            attestation.timestamp,
        )
        if existing is None:
            log.debug("attestation_admitted")
            return AdmissionResult.ACCEPTED

        get_metrics_collector().increment_duplicates()
        if existing.evicted:
            log.debug("attestation_nonce_spent")
            self._record_replay_attempt(attestation, None)
        elif existing.event_id == attestation.event_id:
            log.debug("attestation_redelivered")
        else:
            self._record_replay_attempt(attestation, existing.event_id)
        return AdmissionResult.DUPLICATE

    def _record_replay_attempt(
        self,
        attestation: ActionAttestation,
        original_event_id: str | None,
    ) -> None:
        get_metrics_collector().increment_replay_attempts()

        now = self._time.now()
        window_start = now - self._config.action_window_seconds
        attempts = self._replay_attempts.setdefault(attestation.actor_key, deque())
        attempts.append(now)
        while attempts and attempts[0] < window_start:
            attempts.popleft()

        log = self._log_operation(
            "admit",
            campaign_id=attestation.campaign_id,
            actor_key=attestation.actor_key,
            event_id=attestation.event_id,
            original_event_id=original_event_id,
            attempts_in_window=len(attempts),
        )
        if len(attempts) > self._config.replay_anomaly_threshold:
            log.warning(
                "replay_anomaly_threshold_exceeded",
                threshold=self._config.replay_anomaly_threshold,
            )
        else:
            log.info("replay_attempt_detected")

    def replay_attempts_for(self, actor_key: str) -> int:
        """Replay attempts by ``actor_key`` still inside the anomaly window."""
        attempts = self._replay_attempts.get(actor_key)
        if not attempts:
            return 0
        window_start = self._time.now() - self._config.action_window_seconds
        return sum(1 for t in attempts if t >= window_start)

    async def evict(self, now: int) -> int:
        """Drop keys older than the retention horizon and raise the low-water mark.

        Args:
            now: Eviction reference time.

        Returns:
            Number of keys removed from the index.
        """
        cutoff = now - self._config.replay_retention_seconds
        if self._low_water_mark is None or cutoff > self._low_water_mark:
            self._low_water_mark = cutoff
        removed = await self._index.evict_older_than(self._low_water_mark)

        window_start = self._time.now() - self._config.action_window_seconds
        for actor_key in list(self._replay_attempts):
            attempts = self._replay_attempts[actor_key]
            while attempts and attempts[0] < window_start:
                attempts.popleft()
            if not attempts:
                del self._replay_attempts[actor_key]

        self._log_operation("evict", cutoff=self._low_water_mark).info(
            "replay_index_evicted",
            removed=removed,
        )
        return removed
