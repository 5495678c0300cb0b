"""Bootstrap wiring for the ingestion engine.

Each dependency is a lazily created module-level singleton. Tests swap
in their own instances with the ``set_*`` helpers and clean up with
``reset_engine_dependencies``.
"""

from __future__ import annotations

from structlog import get_logger

from movement.application.ports.read_model import ReadModelPort
from movement.application.ports.replay_index import ReplayIndexPort
from movement.application.ports.time_authority import TimeAuthorityProtocol
from movement.application.ports.token_custody import TokenCustodyPort
from movement.application.services.action_submission_service import (
    ActionSubmissionService,
)
from movement.application.services.campaign_query_service import CampaignQueryService
from movement.application.services.campaign_submission_service import (
    CampaignSubmissionService,
)
from movement.application.services.ingestion_service import IngestionService
from movement.application.services.metrics_aggregator_service import (
    MetricsAggregatorService,
)
from movement.application.services.rate_limit_service import RateLimitService
from movement.application.services.replay_guard_service import ReplayGuardService
from movement.application.services.stake_escrow_service import StakeEscrowService
from movement.config.engine_config import EngineConfig
from movement.domain.services.event_validator import EventValidator
from movement.infrastructure.adapters.memory.read_model_store import (
    InMemoryReadModelStore,
)
from movement.infrastructure.adapters.memory.replay_index import InMemoryReplayIndex
from movement.infrastructure.adapters.time.system_time_authority import (
    SystemTimeAuthority,
)
from movement.infrastructure.stubs.token_custody_stub import TokenCustodyStub
from movement.workers.relay_ingestion_worker import RelayIngestionWorker
from movement.workers.replay_eviction_monitor import ReplayEvictionMonitor
from movement.workers.stake_reconciliation_monitor import StakeReconciliationMonitor
from movement.workers.stake_timer_scheduler import StakeTimerScheduler

logger = get_logger()

_engine_config: EngineConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_read_model: ReadModelPort | None = None
_replay_index: ReplayIndexPort | None = None
_token_custody: TokenCustodyPort | None = None
_validator: EventValidator | None = None
_replay_guard: ReplayGuardService | None = None
_rate_limiter: RateLimitService | None = None
_aggregator: MetricsAggregatorService | None = None
_escrow: StakeEscrowService | None = None
_ingestion: IngestionService | None = None
_query: CampaignQueryService | None = None
_action_submission: ActionSubmissionService | None = None
_campaign_submission: CampaignSubmissionService | None = None
_ingestion_worker: RelayIngestionWorker | None = None
_stake_scheduler: StakeTimerScheduler | None = None
_reconciliation_monitor: StakeReconciliationMonitor | None = None
_eviction_monitor: ReplayEvictionMonitor | None = None


def get_engine_config() -> EngineConfig:
    """Get engine configuration, read from the environment on first use."""
    global _engine_config
    if _engine_config is None:
        _engine_config = EngineConfig.from_environment()
    return _engine_config


def get_time_authority() -> TimeAuthorityProtocol:
    """Get the wall clock."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_read_model() -> ReadModelPort:
    """Get the read model store."""
    global _read_model
    if _read_model is None:
        logger.warning(
            "read_model_initialized",
            store_type="InMemory",
            message="Read model is in memory; rebuild it by replaying relays on restart",
        )
        _read_model = InMemoryReadModelStore(get_engine_config().action_counting_rule)
    return _read_model


def get_replay_index() -> ReplayIndexPort:
    """Get the replay index."""
    global _replay_index
    if _replay_index is None:
        _replay_index = InMemoryReplayIndex()
    return _replay_index


def get_token_custody() -> TokenCustodyPort:
    """Get the token custody adapter."""
    global _token_custody
    if _token_custody is None:
        logger.warning(
            "token_custody_initialized",
            custody_type="Stub",
            message="Token custody is a stub; refunds are recorded but no tokens move",
        )
        _token_custody = TokenCustodyStub()
    return _token_custody


def get_event_validator() -> EventValidator:
    """Get the event validator."""
    global _validator
    if _validator is None:
        _validator = EventValidator(min_nonce_length=get_engine_config().min_nonce_length)
    return _validator


def get_replay_guard() -> ReplayGuardService:
    """Get the replay guard."""
    global _replay_guard
    if _replay_guard is None:
        _replay_guard = ReplayGuardService(
            get_replay_index(), get_time_authority(), get_engine_config()
        )
    return _replay_guard


def get_rate_limiter() -> RateLimitService:
    """Get the rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimitService(get_read_model(), get_engine_config())
    return _rate_limiter


def get_metrics_aggregator() -> MetricsAggregatorService:
    """Get the metrics aggregator."""
    global _aggregator
    if _aggregator is None:
        _aggregator = MetricsAggregatorService(get_read_model(), get_engine_config())
    return _aggregator


def get_stake_escrow() -> StakeEscrowService:
    """Get the stake escrow service."""
    global _escrow
    if _escrow is None:
        _escrow = StakeEscrowService(
            get_read_model(), get_token_custody(), get_engine_config().stake
        )
    return _escrow


def get_ingestion_service() -> IngestionService:
    """Get the ingestion service."""
    global _ingestion
    if _ingestion is None:
        _ingestion = IngestionService(
            validator=get_event_validator(),
            replay_guard=get_replay_guard(),
            rate_limiter=get_rate_limiter(),
            aggregator=get_metrics_aggregator(),
            time_authority=get_time_authority(),
        )
    return _ingestion


def get_campaign_query_service() -> CampaignQueryService:
    """Get the campaign query service."""
    global _query
    if _query is None:
        _query = CampaignQueryService(
            get_read_model(), get_metrics_aggregator(), get_time_authority()
        )
    return _query


def get_action_submission_service() -> ActionSubmissionService:
    """Get the local action submission service."""
    global _action_submission
    if _action_submission is None:
        _action_submission = ActionSubmissionService(
            validator=get_event_validator(),
            rate_limiter=get_rate_limiter(),
            ingestion=get_ingestion_service(),
            time_authority=get_time_authority(),
        )
    return _action_submission


def get_stake_timer_scheduler() -> StakeTimerScheduler:
    """Get the per-stake refund timer scheduler."""
    global _stake_scheduler
    if _stake_scheduler is None:
        _stake_scheduler = StakeTimerScheduler(get_stake_escrow(), get_time_authority())
    return _stake_scheduler


def get_campaign_submission_service() -> CampaignSubmissionService:
    """Get the local campaign submission service."""
    global _campaign_submission
    if _campaign_submission is None:
        _campaign_submission = CampaignSubmissionService(
            validator=get_event_validator(),
            rate_limiter=get_rate_limiter(),
            escrow=get_stake_escrow(),
            read_model=get_read_model(),
            time_authority=get_time_authority(),
            schedule_stake=get_stake_timer_scheduler().schedule,
        )
    return _campaign_submission


def get_ingestion_worker() -> RelayIngestionWorker:
    """Get the relay ingestion worker."""
    global _ingestion_worker
    if _ingestion_worker is None:
        _ingestion_worker = RelayIngestionWorker(
            get_ingestion_service(), get_engine_config()
        )
    return _ingestion_worker


def get_reconciliation_monitor() -> StakeReconciliationMonitor:
    """Get the stake reconciliation monitor."""
    global _reconciliation_monitor
    if _reconciliation_monitor is None:
        _reconciliation_monitor = StakeReconciliationMonitor(
            get_stake_escrow(),
            get_time_authority(),
            interval_seconds=get_engine_config().sweep_interval_seconds,
        )
    return _reconciliation_monitor


def get_eviction_monitor() -> ReplayEvictionMonitor:
    """Get the replay eviction monitor."""
    global _eviction_monitor
    if _eviction_monitor is None:
        _eviction_monitor = ReplayEvictionMonitor(
            get_replay_guard(),
            get_rate_limiter(),
            get_time_authority(),
            interval_seconds=get_engine_config().sweep_interval_seconds,
        )
    return _eviction_monitor


async def start_background_services() -> None:
    """Start the ingestion worker and periodic monitors."""
    await get_ingestion_worker().start()
    await get_reconciliation_monitor().start()
    await get_eviction_monitor().start()
    logger.info("background_services_started")


async def stop_background_services() -> None:
    """Stop background services that were started."""
    if _eviction_monitor is not None:
        await _eviction_monitor.stop()
    if _reconciliation_monitor is not None:
        await _reconciliation_monitor.stop()
    if _stake_scheduler is not None:
        await _stake_scheduler.shutdown()
    if _ingestion_worker is not None and _ingestion_worker.running:
        await _ingestion_worker.stop(drain=False)
    logger.info("background_services_stopped")


def set_engine_config(config: EngineConfig) -> None:
    """Set custom engine config for testing."""
    global _engine_config
    _engine_config = config


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority for testing."""
    global _time_authority
    _time_authority = time_authority


def set_read_model(read_model: ReadModelPort) -> None:
    """Set custom read model for testing."""
    global _read_model
    _read_model = read_model


def set_token_custody(custody: TokenCustodyPort) -> None:
    """Set custom token custody adapter for testing."""
    global _token_custody
    _token_custody = custody


def reset_engine_dependencies() -> None:
    """Reset engine dependency singletons."""
    global _engine_config
    global _time_authority
    global _read_model
    global _replay_index
    global _token_custody
    global _validator
    global _replay_guard
    global _rate_limiter
    global _aggregator
    global _escrow
    global _ingestion
    global _query
    global _action_submission
    global _campaign_submission
    global _ingestion_worker
    global _stake_scheduler
    global _reconciliation_monitor
    global _eviction_monitor

    _engine_config = None
    _time_authority = None
    _read_model = None
    _replay_index = None
    _token_custody = None
    _validator = None
    _replay_guard = None
    _rate_limiter = None
    _aggregator = None
    _escrow = None
    _ingestion = None
    _query = None
    _action_submission = None
    _campaign_submission = None
    _ingestion_worker = None
    _stake_scheduler = None
    _reconciliation_monitor = None
    _eviction_monitor = None
