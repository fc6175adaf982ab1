"""Import the local directory file into the record store"""

import logging
from typing import Any, Optional

from pwaland.jobs.pwa_discovery.io import DirectoryFile
from pwaland.jobs.pwa_discovery.models import (
    BatchSummary,
    DirectoryEntry,
    ItemOutcome,
    ItemStatus,
    SkipReason,
)
from pwaland.jobs.pwa_discovery.processing import BatchRunner, DedupGate
from pwaland.jobs.pwa_discovery.validators import REQUIRED_ENTRY_FIELDS

logger = logging.getLogger(__name__)


def _field(item: Any, name: str) -> str:
    value = item.get(name) if isinstance(item, dict) else None
    return value.strip() if isinstance(value, str) else ""


async def import_item(
    item: Any, gate: DedupGate, dry_run: bool = False, tags: Optional[list[str]] = None
) -> ItemOutcome:
    """Insert one raw directory item unless it is incomplete or already stored."""
    if not all(_field(item, name) for name in REQUIRED_ENTRY_FIELDS):
        logger.info(f"Skipped (missing fields): {_field(item, 'title') or item!r}")
        return ItemOutcome(item=item, status=ItemStatus.SKIPPED, reason=SkipReason.MISSING_FIELDS)

    entry = DirectoryEntry(
        title=_field(item, "title"),
        link=_field(item, "link"),
        icon=_field(item, "icon"),
        description=_field(item, "description"),
        tags=tags,
    )
    return await gate.add_entry(entry, dry_run=dry_run)


async def run_import_mode(
    directory: DirectoryFile,
    gate: DedupGate,
    runner: BatchRunner,
    dry_run: bool = False,
    tags: Optional[list[str]] = None,
) -> BatchSummary:
    """Import every item of the directory file.

    Raises:
        CandidateFileError: when the directory file cannot be read.
    """
    items = directory.load_raw()
    logger.info(f"Importing {len(items)} entries from {directory.path} (dry_run={dry_run})")

    async def operation(item: Any) -> ItemOutcome:
        return await import_item(item, gate, dry_run, tags)

    report = await runner.run(items, operation)
    summary = report.summary
    logger.info(
        f"Import complete: {summary.total} total, {summary.added} added, "
        f"{summary.skipped} skipped, {summary.failed} failed",
        extra=summary.model_dump(),
    )
    return summary
