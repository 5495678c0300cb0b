"""Prometheus metrics for the ingestion engine.

Operational counters only: what the pipeline did with each event, how
often limits and guards fired, and where stakes moved. Nothing here is
authoritative state; the read model is.

Labels:
- service, environment on every metric
- outcome / kind / scope / state where a metric is broken down
"""

import os
import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_collector_lock = threading.Lock()

# Histogram buckets for ingestion latency (1ms to 5s)
DEFAULT_HISTOGRAM_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0)


class MetricsCollector:
    """Collects and manages engine Prometheus metrics.

    Attributes:
        uptime_seconds: Gauge tracking seconds since service start.
        service_starts_total: Counter tracking service restarts.
        events_ingested_total: Events processed, by kind and outcome.
        events_malformed_total: Events rejected by the validator, by kind.
        attestation_duplicates_total: Attestations answered DUPLICATE.
        replay_attempts_total: Duplicates carrying a different event id.
        rate_limit_denials_total: Rate limit denials, by scope.
        unauthorized_updates_total: Updates from non-creator keys.
        ingest_queue_drops_total: Events refused by a full ingestion queue.
        ingest_queue_depth: Current ingestion queue depth.
        ingest_duration_seconds: Per-event pipeline latency.
        stake_transitions_total: Stake state transitions, by target state.
        stake_refund_failures_total: Failed custody refund calls.
        startup_times: Dict mapping service name to startup timestamp.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self.histogram_buckets = DEFAULT_HISTOGRAM_BUCKETS
        self.startup_times: dict[str, float] = {}

        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "movement-engine")

        self.uptime_seconds = Gauge(
            name="uptime_seconds",
            documentation="Seconds since service start",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.service_starts_total = Counter(
            name="service_starts_total",
            documentation="Total number of service starts/restarts",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.events_ingested_total = Counter(
            name="movement_events_ingested_total",
            documentation="Relay events processed by the ingestion pipeline",
            labelnames=["service", "environment", "kind", "outcome"],
            registry=self._registry,
        )

        self.events_malformed_total = Counter(
            name="movement_events_malformed_total",
            documentation="Relay events rejected as malformed",
            labelnames=["service", "environment", "kind"],
            registry=self._registry,
        )

        self.attestation_duplicates_total = Counter(
            name="movement_attestation_duplicates_total",
            documentation="Attestations rejected as duplicates",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.replay_attempts_total = Counter(
            name="movement_replay_attempts_total",
            documentation="Duplicate attestation keys carried by a different event",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.rate_limit_denials_total = Counter(
            name="movement_rate_limit_denials_total",
            documentation="Rate limit denials",
            labelnames=["service", "environment", "scope"],
            registry=self._registry,
        )

        self.unauthorized_updates_total = Counter(
            name="movement_unauthorized_updates_total",
            documentation="Campaign updates discarded for a non-creator issuer",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.ingest_queue_drops_total = Counter(
            name="movement_ingest_queue_drops_total",
            documentation="Events refused because the ingestion queue was full",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.ingest_queue_depth = Gauge(
            name="movement_ingest_queue_depth",
            documentation="Events waiting in the ingestion queue",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.ingest_duration_seconds = Histogram(
            name="movement_ingest_duration_seconds",
            documentation="Time spent running one event through the pipeline",
            labelnames=["service", "environment"],
            buckets=self.histogram_buckets,
            registry=self._registry,
        )

        self.stake_transitions_total = Counter(
            name="movement_stake_transitions_total",
            documentation="Stake state transitions",
            labelnames=["service", "environment", "state"],
            registry=self._registry,
        )

        self.stake_refund_failures_total = Counter(
            name="movement_stake_refund_failures_total",
            documentation="Custody refund calls that did not succeed",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def set_uptime(self, service: str, seconds: float) -> None:
        """Set uptime gauge for a service.

        Args:
            service: Service name (api, ingestion-worker).
            seconds: Uptime in seconds.
        """
        self.uptime_seconds.labels(service=service, environment=self._environment).set(
            seconds
        )

    def increment_service_starts(self, service: str) -> None:
        """Increment service starts counter."""
        self.service_starts_total.labels(
            service=service, environment=self._environment
        ).inc()

    def record_ingestion(self, kind: str, outcome: str) -> None:
        """Count one processed event.

        Args:
            kind: Event kind label (campaign, attestation, ...).
            outcome: Pipeline outcome value (accepted, duplicate, ...).
        """
        self.events_ingested_total.labels(
            **self._labels(), kind=kind, outcome=outcome
        ).inc()

    def increment_malformed(self, kind: str) -> None:
        """Count a malformed event, labelled by its kind (or "unknown")."""
        self.events_malformed_total.labels(**self._labels(), kind=kind).inc()

    def increment_duplicates(self) -> None:
        self.attestation_duplicates_total.labels(**self._labels()).inc()

    def increment_replay_attempts(self) -> None:
        self.replay_attempts_total.labels(**self._labels()).inc()

    def increment_rate_limit_denials(self, scope: str) -> None:
        """Count a rate limit denial.

        Args:
            scope: "action" or "campaign_creation".
        """
        self.rate_limit_denials_total.labels(**self._labels(), scope=scope).inc()

    def increment_unauthorized_updates(self) -> None:
        self.unauthorized_updates_total.labels(**self._labels()).inc()

    def increment_queue_drops(self) -> None:
        self.ingest_queue_drops_total.labels(**self._labels()).inc()

    def set_queue_depth(self, depth: int) -> None:
        self.ingest_queue_depth.labels(**self._labels()).set(depth)

    def observe_ingest_duration(self, duration: float) -> None:
        self.ingest_duration_seconds.labels(**self._labels()).observe(duration)

    def record_stake_transition(self, state: str) -> None:
        """Count a stake entering ``state``."""
        self.stake_transitions_total.labels(**self._labels(), state=state).inc()

    def increment_refund_failures(self) -> None:
        self.stake_refund_failures_total.labels(**self._labels()).inc()

    def record_startup(self, service: str) -> None:
        """Record service startup time."""
        self.startup_times[service] = time.time()
        self.increment_service_starts(service)

    def get_uptime_seconds(self, service: str) -> float:
        """Get uptime in seconds for a service, or 0.0 if not registered."""
        if service not in self.startup_times:
            return 0.0
        return time.time() - self.startup_times[service]

    def update_uptime_gauges(self) -> None:
        """Update uptime gauges for all registered services."""
        for service in self.startup_times:
            self.set_uptime(service, self.get_uptime_seconds(service))

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get the singleton MetricsCollector instance (thread-safe).

    Uses double-checked locking for lazy initialization.

    Returns:
        The global MetricsCollector instance.
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Generate Prometheus metrics in exposition format."""
    collector = get_metrics_collector()
    collector.update_uptime_gauges()
    return generate_latest(collector.get_registry())


def reset_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
