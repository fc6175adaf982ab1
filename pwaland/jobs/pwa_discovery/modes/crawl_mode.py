"""File workflow: check candidate URLs from a sources file and extend the local directory file"""

import json
import logging
from pathlib import Path

from pwaland.exceptions import CandidateFileError
from pwaland.jobs.pwa_discovery.io import DirectoryFile
from pwaland.jobs.pwa_discovery.models import (
    BatchSummary,
    DirectoryEntry,
    ItemOutcome,
    ItemStatus,
    SkipReason,
)
from pwaland.jobs.pwa_discovery.processing import BatchRunner, DedupGate
from pwaland.jobs.pwa_discovery.strategies import PwaCheckStrategy

logger = logging.getLogger(__name__)


def load_candidates(path: str | Path) -> list[str]:
    """Read candidate URLs: a JSON array of strings, or one URL per line.

    Blank lines and lines starting with `#` are ignored.

    Raises:
        CandidateFileError: when the file cannot be read or the JSON is not an array of strings.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CandidateFileError(f"Cannot read sources file {path}: {e}") from e

    if text.lstrip().startswith("["):
        try:
            data = json.loads(text)
        except ValueError as e:
            raise CandidateFileError(f"Sources file {path} is not valid JSON: {e}") from e
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise CandidateFileError(f"Sources file {path} must be a JSON array of URLs")
        return [item.strip() for item in data if item.strip()]

    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]


async def check_candidate(
    candidate: str, strategy: PwaCheckStrategy, dry_run: bool = False
) -> ItemOutcome:
    """Accept a site whose manifest and icon checks pass, producing a directory entry."""
    check = await strategy.check(candidate)
    if not (check.checks.manifest.passed and check.checks.icons.passed):
        logger.debug(f"Rejected {candidate}: {check.checks.manifest.detail}")
        return ItemOutcome(item=candidate, status=ItemStatus.CHECKED, result=check)

    suggestion = check.suggestion
    if not suggestion.title or not suggestion.icon:
        return ItemOutcome(
            item=candidate, status=ItemStatus.SKIPPED, reason=SkipReason.NO_TITLE_OR_ICON
        )

    manifest = check.checks.manifest.data
    entry = DirectoryEntry(
        title=suggestion.title,
        link=suggestion.link,
        icon=suggestion.icon,
        short_name=manifest.short_name if manifest else None,
        description=suggestion.description or None,
    )
    logger.info(f"Found PWA: {entry.title} ({candidate})")
    if dry_run:
        return ItemOutcome(
            item=candidate, status=ItemStatus.SKIPPED, reason=SkipReason.DRY_RUN, result=entry
        )
    return ItemOutcome(item=candidate, status=ItemStatus.ADDED, result=entry)


async def run_crawl_mode(
    strategy: PwaCheckStrategy,
    runner: BatchRunner,
    directory: DirectoryFile,
    sources_file: str | Path,
    dry_run: bool = False,
) -> BatchSummary:
    """Check every candidate not yet in the directory file and append the accepted sites.

    Candidates whose hostname is already listed are not checked again. Accepted sites are
    deduplicated by hostname before the file is rewritten.

    Raises:
        CandidateFileError: when the sources or directory file cannot be read.
    """
    candidates = load_candidates(sources_file)
    existing = directory.load()
    fresh = DedupGate.filter_candidates(candidates, DedupGate.known_hostnames(existing))
    logger.info(
        f"Crawling {len(fresh)} new candidates "
        f"({len(candidates) - len(fresh)} already listed or duplicated)"
    )

    async def operation(candidate: str) -> ItemOutcome:
        return await check_candidate(candidate, strategy, dry_run)

    report = await runner.run(fresh, operation)
    summary = report.summary

    accepted = [
        outcome.result for outcome in report.outcomes if outcome.status == ItemStatus.ADDED
    ]
    new_entries = DedupGate.dedupe_by_hostname(accepted)
    dropped = len(accepted) - len(new_entries)
    if dropped:
        summary.added -= dropped
        summary.skipped += dropped
        summary.skip_reasons[SkipReason.DUPLICATE] = (
            summary.skip_reasons.get(SkipReason.DUPLICATE, 0) + dropped
        )

    if new_entries:
        directory.merge(new_entries)

    logger.info(
        f"Crawl complete: {summary.processed} checked, {summary.added} added, "
        f"{summary.skipped} skipped, {summary.failed} failed",
        extra=summary.model_dump(),
    )
    return summary
