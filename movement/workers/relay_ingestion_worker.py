"""Relay ingestion worker.

Relay feeds produce raw events into one bounded asyncio.Queue; a fixed
number of consumer tasks run each event through the ingestion service.

Backpressure:
- offer() never blocks. It returns False when the queue is full and
  counts the drop; the producer may drop the event or retry later.
- feed() can instead wait for space (block=True), which slows the feed
  down to the consumers' pace.

Relays redeliver freely, so a dropped event is usually recovered from
another relay or a later subscription.
"""

from __future__ import annotations

import asyncio
import signal
from collections.abc import AsyncIterable, Mapping
from dataclasses import dataclass
from typing import Any

from movement.application.services.ingestion_service import (
    IngestionService,
    IngestionStatus,
)
from movement.config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from movement.infrastructure.monitoring.metrics import get_metrics_collector
from movement.infrastructure.observability.logging import get_logger_for_service

RawEvent = Mapping[str, Any]


@dataclass
class IngestionWorkerStats:
    """Counters tracked by the ingestion worker."""

    offered: int = 0
    dropped: int = 0
    processed: int = 0
    accepted: int = 0
    failed: int = 0


class RelayIngestionWorker:
    """Bounded queue plus N consumer tasks feeding the ingestion service.

    Example:
        >>> worker = RelayIngestionWorker(ingestion_service)
        >>> await worker.start()
        >>> worker.offer(raw_event)
        >>> await worker.stop()
    """

    def __init__(
        self,
        ingestion: IngestionService,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        """Initialize the worker.

        Args:
            ingestion: Ingestion service run for each event.
            config: Queue size and consumer count.
        """
        self._ingestion = ingestion
        self._queue: asyncio.Queue[RawEvent] = asyncio.Queue(
            maxsize=config.ingest_queue_size
        )
        self._consumer_count = config.ingest_workers
        self._tasks: list[asyncio.Task[None]] = []
        self._running = False
        self.stats = IngestionWorkerStats()
        self._log = get_logger_for_service(self.__class__.__name__, component="worker")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def depth(self) -> int:
        """Events waiting in the queue."""
        return self._queue.qsize()

    def offer(self, raw: RawEvent) -> bool:
        """Enqueue an event without waiting.

        Returns:
            False if the queue is full and the event was not enqueued.
        """
        self.stats.offered += 1
        try:
            self._queue.put_nowait(raw)
        except asyncio.QueueFull:
            self.stats.dropped += 1
            get_metrics_collector().increment_queue_drops()
            self._log.warning("ingest_queue_full", depth=self._queue.qsize())
            return False
        get_metrics_collector().set_queue_depth(self._queue.qsize())
        return True

    async def feed(self, source: AsyncIterable[RawEvent], block: bool = False) -> int:
        """Pump a relay feed into the queue until it is exhausted.

        Args:
            source: Async iterable of raw relay events.
            block: Wait for queue space instead of dropping.

        Returns:
            Number of events enqueued.
        """
        enqueued = 0
        async for raw in source:
            if block:
                self.stats.offered += 1
                await self._queue.put(raw)
                get_metrics_collector().set_queue_depth(self._queue.qsize())
                enqueued += 1
            elif self.offer(raw):
                enqueued += 1
        return enqueued

    async def start(self) -> None:
        """Start the consumer tasks. Idempotent."""
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(self._consume(index))
            for index in range(self._consumer_count)
        ]
        self._log.info("relay_ingestion_worker_started", consumers=self._consumer_count)

    async def drain(self) -> None:
        """Wait until every enqueued event has been processed."""
        await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        """Stop the consumers.

        Args:
            drain: Process everything already queued before stopping.
        """
        if drain and self._running:
            await self.drain()
        self._running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._log.info(
            "relay_ingestion_worker_stopped",
            processed=self.stats.processed,
            dropped=self.stats.dropped,
        )

    async def _consume(self, index: int) -> None:
        log = self._log.bind(consumer=index)
        while True:
            raw = await self._queue.get()
            try:
                outcome = await self._ingestion.ingest(raw)
                self.stats.processed += 1
                if outcome.status is IngestionStatus.ACCEPTED:
                    self.stats.accepted += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.stats.failed += 1
                log.error("ingest_failed", error=str(e), exc_info=True)
            finally:
                self._queue.task_done()
                get_metrics_collector().set_queue_depth(self._queue.qsize())


async def run_relay_ingestion_worker(
    worker: RelayIngestionWorker,
    sources: list[AsyncIterable[RawEvent]],
) -> None:
    """Run a worker over relay feeds with graceful shutdown.

    Args:
        worker: Configured ingestion worker.
        sources: One async iterable per relay subscription.
    """
    await worker.start()
    feeds = [asyncio.create_task(worker.feed(source)) for source in sources]

    loop = asyncio.get_running_loop()

    def signal_handler() -> None:
        for task in feeds:
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    await asyncio.gather(*feeds, return_exceptions=True)
    await worker.stop(drain=True)
