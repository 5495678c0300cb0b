"""Background workers for the Movement engine.

Workers:
- RelayIngestionWorker: bounded queue and consumers for relay events
- StakeReconciliationMonitor: periodic stake sweep
- ReplayEvictionMonitor: periodic replay eviction and rate state pruning
- StakeTimerScheduler: per-stake refund timers
"""

from movement.workers.relay_ingestion_worker import (
    IngestionWorkerStats,
    RelayIngestionWorker,
    run_relay_ingestion_worker,
)
from movement.workers.replay_eviction_monitor import (
    EvictionSummary,
    ReplayEvictionMonitor,
)
from movement.workers.stake_reconciliation_monitor import StakeReconciliationMonitor
from movement.workers.stake_timer_scheduler import StakeTimerScheduler

__all__ = [
    "EvictionSummary",
    "IngestionWorkerStats",
    "RelayIngestionWorker",
    "ReplayEvictionMonitor",
    "StakeReconciliationMonitor",
    "StakeTimerScheduler",
    "run_relay_ingestion_worker",
]
