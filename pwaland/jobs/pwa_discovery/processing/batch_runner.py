"""Bounded-concurrency execution of per-item operations with failure isolation"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Sequence

import aiodogstatsd

from pwaland.jobs.pwa_discovery.models import (
    BatchProgress,
    BatchReport,
    BatchSummary,
    ItemOutcome,
    ItemStatus,
)
from pwaland.jobs.pwa_discovery.scrapers import describe_error
from pwaland.jobs.utils.system_monitor import SystemMonitor

logger = logging.getLogger(__name__)

ItemOperation = Callable[[Any], Awaitable[ItemOutcome]]
ProgressCallback = Callable[[BatchProgress], None]

RUNNER_KINDS: tuple[str, ...] = ("chunked", "pool")


class BatchRunner(ABC):
    """Run an async operation over a list of items.

    An exception raised by the operation only fails its own item; it is recorded as a
    `failed` outcome and the batch continues. Outcomes are reported in input order.
    """

    def __init__(
        self,
        cancel_event: Optional[asyncio.Event] = None,
        metrics_client: Optional[aiodogstatsd.Client] = None,
        monitor: Optional[SystemMonitor] = None,
    ) -> None:
        self.cancel_event = cancel_event
        self.metrics_client = metrics_client
        self.monitor = monitor

    @abstractmethod
    async def run(
        self,
        items: Sequence[Any],
        operation: ItemOperation,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """Process every item and return the summary with per-item outcomes."""

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _to_outcome(self, item: Any, result: Any) -> ItemOutcome:
        """Turn a gathered result or exception into the item's outcome."""
        if isinstance(result, BaseException):
            error = describe_error(result)
            logger.warning(f"Error processing item {item}: {error}")
            outcome = ItemOutcome(item=item, status=ItemStatus.FAILED, error=error)
        elif isinstance(result, ItemOutcome):
            outcome = result
            if outcome.item is None:
                outcome = outcome.model_copy(update={"item": item})
        else:
            logger.error(f"Unexpected result type for item {item}: {result!r}")
            outcome = ItemOutcome(
                item=item, status=ItemStatus.FAILED, error=f"Unexpected result: {result!r}"
            )

        if self.metrics_client is not None:
            self.metrics_client.increment(f"batch.item.{outcome.status}")
        return outcome

    def _report_progress(
        self,
        completed: int,
        total: int,
        summary: BatchSummary,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        logger.info(
            f"Progress: {completed}/{total} processed, {summary.added} added, "
            f"{summary.updated} updated, {summary.skipped} skipped, {summary.failed} failed"
        )
        if self.monitor is not None:
            self.monitor.log_metrics(completed=completed, total=total)
        if on_progress is not None:
            on_progress(BatchProgress(completed=completed, total=total, summary=summary))


class ChunkedBatchRunner(BatchRunner):
    """Process items in fixed-size chunks, gathering each chunk before starting the next.

    Sleeps `delay_sec` between chunks to rate limit the remote services.
    """

    def __init__(self, chunk_size: int = 3, delay_sec: float = 0.0, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.chunk_size = chunk_size
        self.delay_sec = delay_sec

    async def run(
        self,
        items: Sequence[Any],
        operation: ItemOperation,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """Process the items chunk by chunk."""
        total = len(items)
        summary = BatchSummary(total=total)
        outcomes: list[ItemOutcome] = []
        total_chunks = (total + self.chunk_size - 1) // self.chunk_size

        for i in range(0, total, self.chunk_size):
            if self._cancelled():
                logger.info(f"Batch cancelled after {i}/{total} items")
                break

            chunk = items[i : i + self.chunk_size]
            chunk_num = i // self.chunk_size + 1
            logger.debug(f"Processing chunk {chunk_num}/{total_chunks}")

            results = await asyncio.gather(
                *(operation(item) for item in chunk), return_exceptions=True
            )
            for item, result in zip(chunk, results):
                outcome = self._to_outcome(item, result)
                summary.record(outcome)
                outcomes.append(outcome)

            self._report_progress(len(outcomes), total, summary, on_progress)

            if i + self.chunk_size < total and self.delay_sec > 0:
                await asyncio.sleep(self.delay_sec)

        return BatchReport(summary=summary, outcomes=outcomes)


class WorkerPoolRunner(BatchRunner):
    """Process items with a fixed number of workers claiming the next unprocessed index.

    Keeps `concurrency` operations in flight at all times instead of waiting for the slowest
    item of a chunk.
    """

    def __init__(self, concurrency: int = 5, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency

    async def run(
        self,
        items: Sequence[Any],
        operation: ItemOperation,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchReport:
        """Process the items with min(concurrency, len(items)) workers."""
        total = len(items)
        summary = BatchSummary(total=total)
        slots: list[Optional[ItemOutcome]] = [None] * total
        cursor = 0
        completed = 0
        errors: list[Exception] = []

        async def worker() -> None:
            nonlocal cursor, completed
            while cursor < total and not errors and not self._cancelled():
                index = cursor
                cursor += 1
                item = items[index]
                try:
                    result: Any = await operation(item)
                except Exception as e:
                    result = e
                try:
                    outcome = self._to_outcome(item, result)
                    slots[index] = outcome
                    summary.record(outcome)
                    completed += 1
                    self._report_progress(completed, total, summary, on_progress)
                except Exception as e:
                    errors.append(e)

        # Every worker has stopped before a bookkeeping error is raised.
        await asyncio.gather(*(worker() for _ in range(min(self.concurrency, total))))
        if errors:
            raise errors[0]

        return BatchReport(
            summary=summary, outcomes=[outcome for outcome in slots if outcome is not None]
        )


def create_runner(
    kind: str,
    concurrency: int,
    delay_sec: float = 0.0,
    cancel_event: Optional[asyncio.Event] = None,
    metrics_client: Optional[aiodogstatsd.Client] = None,
    monitor: Optional[SystemMonitor] = None,
) -> BatchRunner:
    """Build the runner selected by configuration. `delay_sec` applies to chunked runs only."""
    match kind:
        case "chunked":
            return ChunkedBatchRunner(
                chunk_size=concurrency,
                delay_sec=delay_sec,
                cancel_event=cancel_event,
                metrics_client=metrics_client,
                monitor=monitor,
            )
        case "pool":
            return WorkerPoolRunner(
                concurrency=concurrency,
                cancel_event=cancel_event,
                metrics_client=metrics_client,
                monitor=monitor,
            )
        case _:
            raise ValueError(f"Unknown batch runner: {kind}. Expected one of {RUNNER_KINDS}")
