"""Processing modules for the PWA discovery job"""

from pwaland.jobs.pwa_discovery.processing.batch_runner import (
    RUNNER_KINDS,
    BatchRunner,
    ChunkedBatchRunner,
    WorkerPoolRunner,
    create_runner,
)
from pwaland.jobs.pwa_discovery.processing.dedup_gate import DedupGate

__all__ = [
    "BatchRunner",
    "ChunkedBatchRunner",
    "DedupGate",
    "RUNNER_KINDS",
    "WorkerPoolRunner",
    "create_runner",
]
