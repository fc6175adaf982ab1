"""Single-site workflows: check one URL, add one entry"""

import logging

from pwaland.jobs.pwa_discovery.models import DirectoryEntry, ItemOutcome, PwaCheckResponse
from pwaland.jobs.pwa_discovery.processing import DedupGate
from pwaland.jobs.pwa_discovery.strategies import PwaCheckStrategy
from pwaland.jobs.pwa_discovery.validators import validate_entry, validate_url

logger = logging.getLogger(__name__)


async def run_check_mode(url: str, strategy: PwaCheckStrategy) -> PwaCheckResponse:
    """Classify one site.

    Raises:
        EntryValidationError: when the URL is empty.
    """
    response = await strategy.check(validate_url(url))
    logger.info(
        f"Checked {response.url}: {'PWA' if response.is_pwa else 'not a PWA'}",
        extra={"url": response.url, "is_pwa": response.is_pwa},
    )
    return response


async def run_add_mode(
    entry: DirectoryEntry, gate: DedupGate, dry_run: bool = False
) -> ItemOutcome:
    """Add one entry to the store unless its link is already there.

    Raises:
        EntryValidationError: when title, link or icon is empty.
    """
    outcome = await gate.add_entry(validate_entry(entry), dry_run=dry_run)
    logger.info(
        f"Add {entry.link}: {outcome.status}",
        extra={"status": outcome.status, "reason": outcome.reason},
    )
    return outcome
