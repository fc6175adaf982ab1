"""Archive store records that repeat the title of an earlier record"""

import logging

from pwaland.jobs.pwa_discovery.io import RecordStore, fetch_all_records
from pwaland.jobs.pwa_discovery.models import (
    BatchSummary,
    ItemOutcome,
    ItemStatus,
    SkipReason,
    StoreRecord,
)
from pwaland.jobs.pwa_discovery.processing import BatchRunner

logger = logging.getLogger(__name__)


def find_duplicate_titles(records: list[StoreRecord]) -> list[StoreRecord]:
    """Return every record whose title was already seen, keeping the first of each title.

    Records without a title are never treated as duplicates.
    """
    seen: set[str] = set()
    duplicates: list[StoreRecord] = []
    for record in records:
        if not record.title:
            continue
        if record.title in seen:
            duplicates.append(record)
        else:
            seen.add(record.title)
    return duplicates


async def run_duplicates_mode(
    store: RecordStore, runner: BatchRunner, dry_run: bool = False
) -> BatchSummary:
    """Archive duplicate records. Archived records are counted as updated."""
    records = await fetch_all_records(store, sort_field="title")
    duplicates = find_duplicate_titles(records)
    logger.info(f"Found {len(duplicates)} duplicate records among {len(records)}")

    async def operation(record: StoreRecord) -> ItemOutcome:
        if dry_run:
            logger.info(f"[DRY RUN] Would archive: {record.title} ({record.id})")
            return ItemOutcome(item=record, status=ItemStatus.SKIPPED, reason=SkipReason.DRY_RUN)
        await store.archive_record(record.id)
        logger.info(f"Archived duplicate: {record.title} ({record.id})")
        return ItemOutcome(item=record, status=ItemStatus.UPDATED)

    report = await runner.run(duplicates, operation)
    summary = report.summary
    logger.info(
        f"Duplicate removal complete: {summary.total} duplicates, {summary.updated} archived, "
        f"{summary.skipped} skipped, {summary.failed} failed",
        extra=summary.model_dump(),
    )
    return summary
