"""Monitor memory, open files and sockets of a long running batch job"""

import gc
import logging
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


class SystemMonitor:
    """Log process resource usage between batches so leaks show up during long runs."""

    def __init__(self) -> None:
        self.process = psutil.Process()
        self.baseline_rss_mb: Optional[float] = None

    def collect_metrics(self) -> dict[str, float | int]:
        """Collect current process metrics. Counters that cannot be read are reported as -1."""
        memory_info = self.process.memory_info()
        rss_mb = memory_info.rss / (1024 * 1024)
        if self.baseline_rss_mb is None:
            self.baseline_rss_mb = rss_mb

        try:
            open_files = len(self.process.open_files())
        except psutil.Error as e:
            logger.warning(f"Could not get open files count: {e}")
            open_files = -1

        try:
            connections = len(self.process.net_connections(kind="inet"))
        except psutil.Error as e:
            logger.warning(f"Could not get connection count: {e}")
            connections = -1

        return {
            "rss_mb": rss_mb,
            "rss_growth_mb": rss_mb - self.baseline_rss_mb,
            "memory_percent": self.process.memory_percent(),
            "open_files": open_files,
            "connections": connections,
            "gc_objects": sum(gc.get_count()),
        }

    def log_metrics(self, completed: Optional[int] = None, total: Optional[int] = None) -> None:
        """Log current process metrics, prefixed with batch progress when known."""
        metrics = self.collect_metrics()
        progress = f"[{completed}/{total}] " if completed is not None else ""
        logger.info(
            f"{progress}System metrics - "
            f"memory: {metrics['rss_mb']:.2f} MB (+{metrics['rss_growth_mb']:.2f} MB, "
            f"{metrics['memory_percent']:.1f}%), "
            f"files: {metrics['open_files']}, "
            f"connections: {metrics['connections']}",
            extra=metrics,
        )
