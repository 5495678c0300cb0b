"""Unit tests for RelayIngestionWorker."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import pytest

from movement.application.services.ingestion_service import (
    IngestionOutcome,
    IngestionStatus,
)
from movement.workers.relay_ingestion_worker import RelayIngestionWorker
from tests.helpers.engine import EngineHarness
from tests.helpers.events import K2, K3, attestation_event, campaign_event
from tests.helpers.metrics import metric_value


async def _relay(events: list[dict]) -> AsyncIterator[dict]:
    for event in events:
        yield event


@pytest.fixture
def worker(engine: EngineHarness) -> RelayIngestionWorker:
    return RelayIngestionWorker(engine.ingestion, engine.config)


class TestOffer:
    """Tests for non-blocking enqueue."""

    def test_full_queue_drops(self, engine: EngineHarness, worker: RelayIngestionWorker) -> None:
        size = engine.config.ingest_queue_size
        results = [worker.offer(campaign_event(f"c{i}")) for i in range(size + 1)]

        assert results[:size] == [True] * size
        assert results[size] is False
        assert worker.depth == size
        assert worker.stats.dropped == 1
        assert metric_value("movement_ingest_queue_drops_total") == 1


class TestConsumers:
    """Tests for the consumer tasks."""

    @pytest.mark.asyncio
    async def test_processes_offered_events(
        self, engine: EngineHarness, worker: RelayIngestionWorker
    ) -> None:
        await worker.start()
        worker.offer(campaign_event())
        worker.offer(attestation_event(actor=K2))
        worker.offer(attestation_event(actor=K3))
        await worker.drain()
        await worker.stop()

        assert worker.stats.processed == 3
        assert worker.stats.accepted == 3
        assert worker.depth == 0
        assert not worker.running
        assert (await engine.aggregator.metrics_for("save-park", 1100)).total == 2

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, worker: RelayIngestionWorker) -> None:
        await worker.start()
        await worker.start()
        assert worker.running
        await worker.stop()

    @pytest.mark.asyncio
    async def test_stop_drains_queue(self, worker: RelayIngestionWorker) -> None:
        worker.offer(campaign_event("a"))
        worker.offer(campaign_event("b"))
        await worker.start()
        await worker.stop(drain=True)
        assert worker.stats.processed == 2

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_consumer(self, engine: EngineHarness) -> None:
        ingestion = MagicMock()
        ingestion.ingest = AsyncMock(
            side_effect=[
                RuntimeError("boom"),
                IngestionOutcome(status=IngestionStatus.ACCEPTED, kind="campaign"),
            ]
        )
        worker = RelayIngestionWorker(ingestion, engine.config)
        await worker.start()
        worker.offer({"id": "1"})
        worker.offer({"id": "2"})
        await worker.stop(drain=True)

        assert worker.stats.failed == 1
        assert worker.stats.processed == 1
        assert worker.stats.accepted == 1


class TestFeed:
    """Tests for pumping relay feeds."""

    @pytest.mark.asyncio
    async def test_feed_without_blocking_drops_overflow(
        self, engine: EngineHarness, worker: RelayIngestionWorker
    ) -> None:
        events = [campaign_event(f"c{i}") for i in range(engine.config.ingest_queue_size + 3)]
        enqueued = await worker.feed(_relay(events))
        assert enqueued == engine.config.ingest_queue_size
        assert worker.stats.dropped == 3

    @pytest.mark.asyncio
    async def test_blocking_feed_waits_for_consumers(
        self, engine: EngineHarness, worker: RelayIngestionWorker
    ) -> None:
        events = [
            attestation_event(f"c{i}", nonce=f"n{i}")
            for i in range(engine.config.ingest_queue_size * 3)
        ]
        await worker.start()
        enqueued = await worker.feed(_relay(events), block=True)
        await worker.stop(drain=True)

        assert enqueued == len(events)
        assert worker.stats.dropped == 0
        assert worker.stats.processed == len(events)
