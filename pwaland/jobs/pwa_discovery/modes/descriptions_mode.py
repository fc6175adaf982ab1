"""Replace empty, placeholder and non-English descriptions in the record store"""

import asyncio
import logging
from typing import Optional

from pwaland.exceptions import FetchError
from pwaland.jobs.pwa_discovery.extractors import Extractor
from pwaland.jobs.pwa_discovery.io import RecordStore, fetch_all_records
from pwaland.jobs.pwa_discovery.models import (
    BatchSummary,
    ItemOutcome,
    ItemStatus,
    SkipReason,
    StoreRecord,
)
from pwaland.jobs.pwa_discovery.processing import BatchRunner
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher
from pwaland.jobs.pwa_discovery.utils import ensure_scheme
from pwaland.jobs.pwa_discovery.validators import generate_description, needs_description_update

logger = logging.getLogger(__name__)


async def fetch_page_description(
    url: str, fetcher: PageFetcher, extractor: Extractor
) -> Optional[str]:
    """Return the meta description of the page, or None when it cannot be fetched."""
    try:
        html = await fetcher.fetch_text(ensure_scheme(url))
    except FetchError as e:
        logger.warning(f"Failed to fetch {url}: {e}")
        return None
    return extractor.extract_meta_description(html)


async def update_record_description(
    record: StoreRecord,
    store: RecordStore,
    fetcher: PageFetcher,
    extractor: Extractor,
    dry_run: bool = False,
    item_delay_sec: float = 0.0,
) -> ItemOutcome:
    """Fetch a new description for one record and write it back."""
    if item_delay_sec > 0:
        await asyncio.sleep(item_delay_sec)

    fetched = None
    if record.link:
        fetched = await fetch_page_description(record.link, fetcher, extractor)
    description = generate_description(record.title, fetched)

    if dry_run:
        logger.info(
            f"[DRY RUN] Would update: {record.title}",
            extra={"old": record.description, "fetched": fetched, "new": description},
        )
        return ItemOutcome(
            item=record, status=ItemStatus.SKIPPED, reason=SkipReason.DRY_RUN, result=description
        )

    await store.update_record(record.id, description)
    logger.info(f"Updated description: {record.title} ({'page' if fetched else 'fallback'})")
    return ItemOutcome(item=record, status=ItemStatus.UPDATED, result=description)


async def run_descriptions_mode(
    store: RecordStore,
    fetcher: PageFetcher,
    extractor: Extractor,
    runner: BatchRunner,
    dry_run: bool = False,
    item_delay_sec: float = 0.0,
) -> BatchSummary:
    """Update every record whose description is empty, a placeholder or not English."""
    records = await fetch_all_records(store)
    targets = [record for record in records if needs_description_update(record.description)]
    logger.info(f"Found {len(targets)} of {len(records)} records needing a description update")

    async def operation(record: StoreRecord) -> ItemOutcome:
        return await update_record_description(
            record, store, fetcher, extractor, dry_run, item_delay_sec
        )

    report = await runner.run(targets, operation)
    summary = report.summary
    logger.info(
        f"Description update complete: {summary.total} total, {summary.updated} updated, "
        f"{summary.skipped} skipped, {summary.failed} failed",
        extra=summary.model_dump(),
    )
    return summary
