"""Duplicate checks in front of the record store and the local directory file"""

import logging
from typing import Iterable, Optional, Sequence

from pwaland.jobs.pwa_discovery.io.record_store import RecordStore
from pwaland.jobs.pwa_discovery.models import DirectoryEntry, ItemOutcome, ItemStatus, SkipReason
from pwaland.jobs.pwa_discovery.utils import is_candidate_domain, normalize_hostname
from pwaland.jobs.pwa_discovery.validators import validate_entry

logger = logging.getLogger(__name__)


class DedupGate:
    """Decide whether an entry is new before it is persisted.

    Two rules are applied at different points: the record store
    check is an exact match on `link`, while file workflows compare normalized hostnames.
    The store check and the insert are separate requests, so two concurrent runs can still
    insert the same link.
    """

    def __init__(self, store: Optional[RecordStore] = None) -> None:
        self.store = store

    async def exists(self, link: str) -> bool:
        """Check whether a record with exactly this link is already in the store."""
        if self.store is None:
            raise RuntimeError("DedupGate has no record store")
        return bool(await self.store.query_by_field_equals("link", link))

    async def add_entry(self, entry: DirectoryEntry, dry_run: bool = False) -> ItemOutcome:
        """Validate the entry and insert it unless its link is already stored.

        Raises:
            EntryValidationError: when title, link or icon is empty.
        """
        validate_entry(entry)
        if await self.exists(entry.link):
            logger.info(f"Skipped duplicate: {entry.link}")
            return ItemOutcome(item=entry, status=ItemStatus.SKIPPED, reason=SkipReason.DUPLICATE)
        if dry_run:
            return ItemOutcome(item=entry, status=ItemStatus.SKIPPED, reason=SkipReason.DRY_RUN)

        record_id = await self.store.insert_record(entry)  # type: ignore[union-attr]
        logger.info(f"Added to store: {entry.title}", extra={"record_id": record_id})
        return ItemOutcome(item=entry, status=ItemStatus.ADDED, result=record_id)

    @staticmethod
    def dedupe_by_hostname(entries: Iterable[DirectoryEntry]) -> list[DirectoryEntry]:
        """Keep the first entry per normalized hostname of its link."""
        kept: list[DirectoryEntry] = []
        seen: set[str] = set()
        for entry in entries:
            key = normalize_hostname(entry.link)
            if key in seen:
                continue
            seen.add(key)
            kept.append(entry)
        return kept

    @staticmethod
    def known_hostnames(entries: Iterable[DirectoryEntry]) -> set[str]:
        """Return the normalized hostnames of existing entries."""
        return {normalize_hostname(entry.link) for entry in entries if entry.link}

    @staticmethod
    def filter_candidates(candidates: Sequence[str], known: set[str]) -> list[str]:
        """Drop candidates already known, duplicated earlier in the list, or without a dot."""
        fresh: list[str] = []
        seen = set(known)
        for candidate in candidates:
            key = normalize_hostname(candidate)
            if key in seen or not is_candidate_domain(key):
                continue
            seen.add(key)
            fresh.append(candidate)
        return fresh
