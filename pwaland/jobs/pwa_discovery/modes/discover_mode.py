"""Discovery workflow: collect candidate domains, classify them and add new PWAs to the store"""

import logging
from typing import Optional

import aiodogstatsd

from pwaland.jobs.pwa_discovery.constants import DEFAULT_SAVE_EVERY_BATCHES
from pwaland.jobs.pwa_discovery.io import DiscoverHistory
from pwaland.jobs.pwa_discovery.models import (
    BatchProgress,
    DirectoryEntry,
    DiscoverResult,
    DiscoverSummary,
    ItemOutcome,
    ItemStatus,
    SkipReason,
)
from pwaland.jobs.pwa_discovery.processing import BatchRunner, DedupGate
from pwaland.jobs.pwa_discovery.scrapers import describe_error
from pwaland.jobs.pwa_discovery.sources import DomainSourceAggregator
from pwaland.jobs.pwa_discovery.strategies import PwaCheckStrategy

logger = logging.getLogger(__name__)


async def process_domain(
    domain: str,
    strategy: PwaCheckStrategy,
    gate: DedupGate,
    dry_run: bool = False,
    tags: Optional[list[str]] = None,
    metrics_client: Optional[aiodogstatsd.Client] = None,
) -> ItemOutcome:
    """Check one domain and insert it when it is a new PWA with a title and an icon.

    Failures are returned as a `failed` outcome carrying the error text, so the domain still
    shows up in the run summary.
    """
    try:
        check = await strategy.check(domain)
    except Exception as e:
        error = describe_error(e)
        logger.warning(f"PWA check failed for {domain}: {error}")
        return ItemOutcome(
            item=domain,
            status=ItemStatus.FAILED,
            error=error,
            result=DiscoverResult(domain=domain, error=error),
        )

    if not check.is_pwa:
        return ItemOutcome(
            item=domain, status=ItemStatus.CHECKED, result=DiscoverResult(domain=domain)
        )

    suggestion = check.suggestion
    found = DiscoverResult(domain=domain, is_pwa=True, title=suggestion.title)
    logger.info(f"Found PWA: {suggestion.title} ({domain})")
    if metrics_client is not None:
        metrics_client.increment("pwa.check.found")

    if dry_run:
        return ItemOutcome(
            item=domain,
            status=ItemStatus.SKIPPED,
            reason=SkipReason.DRY_RUN,
            result=found.model_copy(update={"skipped": True}),
        )

    if not suggestion.title or not suggestion.icon:
        logger.info(f"Skipped (missing title or icon): {domain}")
        return ItemOutcome(
            item=domain,
            status=ItemStatus.SKIPPED,
            reason=SkipReason.NO_TITLE_OR_ICON,
            result=found.model_copy(update={"skipped": True}),
        )

    entry = DirectoryEntry(
        title=suggestion.title,
        link=suggestion.link,
        icon=suggestion.icon,
        description=suggestion.description,
        tags=tags,
    )
    try:
        outcome = await gate.add_entry(entry)
    except Exception as e:
        error = describe_error(e)
        logger.warning(f"Could not add {domain} to the store: {error}")
        return ItemOutcome(
            item=domain,
            status=ItemStatus.FAILED,
            error=error,
            result=found.model_copy(update={"error": error}),
        )

    if outcome.status == ItemStatus.ADDED:
        return outcome.model_copy(
            update={"item": domain, "result": found.model_copy(update={"added": True})}
        )
    return outcome.model_copy(
        update={"item": domain, "result": found.model_copy(update={"skipped": True})}
    )


async def run_discover_mode(
    aggregator: DomainSourceAggregator,
    strategy: PwaCheckStrategy,
    gate: DedupGate,
    runner: BatchRunner,
    history: DiscoverHistory,
    source: str = "all",
    limit: int = 500,
    offset: int = 0,
    dry_run: bool = False,
    tags: Optional[list[str]] = None,
    save_every_batches: int = DEFAULT_SAVE_EVERY_BATCHES,
    metrics_client: Optional[aiodogstatsd.Client] = None,
) -> DiscoverSummary:
    """Run one discovery pass over `limit` candidates starting at `offset`.

    The history file gets an intermediate summary every `save_every_batches` progress reports
    and the final summary at the end.

    Raises:
        NoDomainsError: when no source produced any candidate.
    """
    logger.info(
        f"Starting PWA discovery: source={source}, limit={limit}, offset={offset}, "
        f"dry_run={dry_run}"
    )
    candidates = await aggregator.collect(source, limit, offset)
    to_check = candidates[offset : offset + limit]
    logger.info(f"Checking {len(to_check)} domains (offset={offset}, limit={limit})")

    summary = DiscoverSummary(source=source, total_domains=len(candidates), dry_run=dry_run)
    reports = 0

    async def operation(domain: str) -> ItemOutcome:
        outcome = await process_domain(domain, strategy, gate, dry_run, tags, metrics_client)
        summary.record(outcome.result)
        return outcome

    def on_progress(progress: BatchProgress) -> None:
        nonlocal reports
        reports += 1
        if save_every_batches > 0 and reports % save_every_batches == 0:
            if progress.completed < progress.total:
                history.append(summary)

    await runner.run(to_check, operation, on_progress)
    history.append(summary)

    logger.info(
        f"Discovery complete: {summary.checked} checked, {summary.found} found, "
        f"{summary.added} added, {summary.skipped} skipped, {summary.failed} failed",
        extra=summary.model_dump(exclude={"results"}),
    )
    return summary
