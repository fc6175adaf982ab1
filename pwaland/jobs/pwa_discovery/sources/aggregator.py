"""Merge candidate domains from the configured sources"""

import logging
from typing import Iterable, Optional

from pwaland.exceptions import NoDomainsError
from pwaland.jobs.pwa_discovery.sources.markdown_lists import MarkdownListSource
from pwaland.jobs.pwa_discovery.sources.tranco import TrancoSource
from pwaland.jobs.pwa_discovery.utils import is_candidate_domain, normalize_hostname

logger = logging.getLogger(__name__)

SOURCE_CHOICES: tuple[str, ...] = ("tranco", "github", "all")


def merge_and_deduplicate(*lists: Iterable[str]) -> list[str]:
    """Merge candidate lists, keeping the first original entry per normalized hostname.

    Entries whose hostname has no dot are dropped.
    """
    merged: list[str] = []
    seen: set[str] = set()
    for entries in lists:
        for entry in entries:
            key = normalize_hostname(entry)
            if key in seen or not is_candidate_domain(key):
                continue
            seen.add(key)
            merged.append(entry)
    return merged


class DomainSourceAggregator:
    """Collect the candidate list for one discovery run."""

    def __init__(
        self,
        tranco: Optional[TrancoSource] = None,
        markdown_lists: Optional[MarkdownListSource] = None,
    ) -> None:
        self.tranco = tranco
        self.markdown_lists = markdown_lists

    async def collect(self, source: str, limit: int, offset: int = 0) -> list[str]:
        """Return candidates from `source` (tranco, github or all), merged and deduplicated.

        Tranco is asked for `limit + offset` domains so the caller can page into the ranking.

        Raises:
            NoDomainsError: when every selected source produced nothing.
        """
        if source not in SOURCE_CHOICES:
            raise ValueError(f"Unknown domain source: {source}. Expected one of {SOURCE_CHOICES}")

        lists: list[list[str]] = []
        if source in ("tranco", "all") and self.tranco is not None:
            lists.append(await self.tranco.fetch(limit + offset))
        if source in ("github", "all") and self.markdown_lists is not None:
            lists.append(await self.markdown_lists.fetch())

        candidates = merge_and_deduplicate(*lists)
        if not candidates:
            raise NoDomainsError(f"No domains fetched from source: {source}")

        logger.info(
            f"Collected {len(candidates)} unique candidate domains",
            extra={"source": source, "lists": len(lists)},
        )
        return candidates
