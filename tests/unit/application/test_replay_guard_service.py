"""Unit tests for ReplayGuardService."""

import pytest

from movement.application.services.replay_guard_service import (
    AdmissionResult,
    ReplayGuardService,
)
from movement.config.engine_config import TEST_ENGINE_CONFIG
from movement.domain.models.attestation import ActionAttestation
from movement.infrastructure.adapters.memory.replay_index import InMemoryReplayIndex
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.metrics import metric_value

RETENTION = TEST_ENGINE_CONFIG.replay_retention_seconds


def _attestation(nonce: str = "n1", event_id: str = "evt-1", timestamp: int = 1050):
    return ActionAttestation(
        campaign_id="save-park",
        campaign_event_id="campaign-evt",
        actor_key="k2",
        timestamp=timestamp,
        nonce=nonce,
        event_id=event_id,
    )


@pytest.fixture
def time() -> FakeTimeAuthority:
    return FakeTimeAuthority(frozen_at=1100)


@pytest.fixture
def guard(time: FakeTimeAuthority) -> ReplayGuardService:
    return ReplayGuardService(InMemoryReplayIndex(), time, TEST_ENGINE_CONFIG)


class TestAdmit:
    """Tests for first-arrival admission."""

    @pytest.mark.asyncio
    async def test_first_arrival_accepted(self, guard: ReplayGuardService) -> None:
        assert await guard.admit(_attestation()) is AdmissionResult.ACCEPTED

    @pytest.mark.asyncio
    async def test_redelivery_is_duplicate(self, guard: ReplayGuardService) -> None:
        await guard.admit(_attestation())
        assert await guard.admit(_attestation()) is AdmissionResult.DUPLICATE
        assert metric_value("movement_attestation_duplicates_total") == 1
        assert metric_value("movement_replay_attempts_total") == 0

    @pytest.mark.asyncio
    async def test_same_key_new_event_is_replay_attempt(
        self, guard: ReplayGuardService
    ) -> None:
        await guard.admit(_attestation(event_id="evt-1"))
        result = await guard.admit(_attestation(event_id="evt-forged"))
        assert result is AdmissionResult.DUPLICATE
        assert guard.replay_attempts_for("k2") == 1
        assert metric_value("movement_replay_attempts_total") == 1

    @pytest.mark.asyncio
    async def test_different_nonce_is_new_identity(self, guard: ReplayGuardService) -> None:
        await guard.admit(_attestation(nonce="n1", event_id="evt-1"))
        result = await guard.admit(_attestation(nonce="n2", event_id="evt-2"))
        assert result is AdmissionResult.ACCEPTED

    @pytest.mark.asyncio
    async def test_attempts_counted_past_threshold(
        self, guard: ReplayGuardService
    ) -> None:
        """Attempts keep counting once the anomaly threshold is crossed."""
        attempts = TEST_ENGINE_CONFIG.replay_anomaly_threshold + 1
        await guard.admit(_attestation(event_id="evt-1"))
        for i in range(attempts):
            await guard.admit(_attestation(event_id=f"evt-forged-{i}"))
        assert guard.replay_attempts_for("k2") == attempts
        assert metric_value("movement_replay_attempts_total") == attempts

    @pytest.mark.asyncio
    async def test_replay_attempts_age_out(
        self, guard: ReplayGuardService, time: FakeTimeAuthority
    ) -> None:
        await guard.admit(_attestation(event_id="evt-1"))
        await guard.admit(_attestation(event_id="evt-forged"))
        time.advance(TEST_ENGINE_CONFIG.action_window_seconds + 1)
        assert guard.replay_attempts_for("k2") == 0


class TestPeek:
    """Tests for the read-only duplicate check."""

    @pytest.mark.asyncio
    async def test_peek_does_not_insert(self, guard: ReplayGuardService) -> None:
        attestation = _attestation()
        assert not await guard.peek(attestation.key, attestation.timestamp)
        assert await guard.admit(attestation) is AdmissionResult.ACCEPTED
        assert await guard.peek(attestation.key, attestation.timestamp)


class TestEviction:
    """Tests for retention-based eviction."""

    @pytest.mark.asyncio
    async def test_evict_removes_old_keys(self, guard: ReplayGuardService) -> None:
        await guard.admit(_attestation(timestamp=1050))
        removed = await guard.evict(1050 + RETENTION + 1)
        assert removed == 1
        assert guard.low_water_mark == 1051

    @pytest.mark.asyncio
    async def test_evicted_attestation_stays_duplicate(
        self, guard: ReplayGuardService
    ) -> None:
        """Eviction never reopens a key: old timestamps are below the mark."""
        await guard.admit(_attestation(timestamp=1050))
        await guard.evict(1050 + RETENTION + 1)
        assert await guard.admit(_attestation(timestamp=1050)) is AdmissionResult.DUPLICATE

    @pytest.mark.asyncio
    async def test_recent_keys_survive(self, guard: ReplayGuardService) -> None:
        await guard.admit(_attestation(timestamp=1050))
        assert await guard.evict(1050 + RETENTION) == 0
        assert await guard.admit(_attestation(timestamp=1050)) is AdmissionResult.DUPLICATE

    @pytest.mark.asyncio
    async def test_low_water_mark_never_decreases(self, guard: ReplayGuardService) -> None:
        await guard.evict(RETENTION + 5000)
        await guard.evict(RETENTION + 100)
        assert guard.low_water_mark == 5000

    @pytest.mark.asyncio
    async def test_evicted_nonce_resigned_with_new_timestamp_is_duplicate(
        self, guard: ReplayGuardService
    ) -> None:
        await guard.admit(_attestation(timestamp=1050, event_id="evt-1"))
        await guard.evict(1050 + RETENTION + 10)

        resigned = _attestation(timestamp=1050 + RETENTION + 10, event_id="evt-resigned")

        assert await guard.peek(resigned.key, resigned.timestamp)
        assert await guard.admit(resigned) is AdmissionResult.DUPLICATE
        assert guard.replay_attempts_for("k2") == 1
        assert metric_value("movement_replay_attempts_total") == 1
