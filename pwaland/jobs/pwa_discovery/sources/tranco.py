"""Download top domains from the Tranco research ranking"""

import logging
from typing import Optional

from pwaland.exceptions import FetchError
from pwaland.jobs.pwa_discovery.constants import FALLBACK_TOP_DOMAINS, TRANCO_LIST_ID_PATTERNS
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher

logger = logging.getLogger(__name__)


def find_list_id(page: str) -> Optional[str]:
    """Find the id of the latest list on the Tranco listing page."""
    for pattern in TRANCO_LIST_ID_PATTERNS:
        if match := pattern.search(page):
            return match.group(1)
    return None


def parse_ranking_csv(text: str, limit: int) -> list[str]:
    """Parse `rank,domain` lines, keeping at most `limit` domains that contain a dot.

    A line without a comma is taken as a bare domain.
    """
    domains: list[str] = []
    for line in text.splitlines():
        if len(domains) >= limit:
            break
        first, separator, rest = line.partition(",")
        domain = (rest if separator else first).strip()
        if "." in domain:
            domains.append(domain)
    return domains


class TrancoSource:
    """Top domains from the Tranco list.

    `fetch` never raises: any failure, or a download without usable rows, returns the built in
    list of well known domains instead.
    """

    name = "tranco"

    def __init__(
        self,
        fetcher: PageFetcher,
        list_url: str,
        download_url: str,
        fallback_url: str,
    ) -> None:
        self.fetcher = fetcher
        self.list_url = list_url
        self.download_url = download_url
        self.fallback_url = fallback_url

    async def fetch(self, limit: int) -> list[str]:
        """Return up to `limit` domains in rank order."""
        try:
            listing = await self.fetcher.fetch_text(self.list_url)
            list_id = find_list_id(listing)
            csv_url = (
                self.download_url.format(list_id=list_id) if list_id else self.fallback_url
            )
            logger.info(f"Downloading Tranco list from {csv_url}")
            domains = parse_ranking_csv(await self.fetcher.fetch_text(csv_url), limit)
        except FetchError as e:
            logger.warning(f"Tranco list unavailable, using fallback domains: {e}")
            return FALLBACK_TOP_DOMAINS[:limit]

        if not domains:
            logger.warning("Tranco list had no usable rows, using fallback domains")
            return FALLBACK_TOP_DOMAINS[:limit]

        logger.info(f"Fetched {len(domains)} domains from Tranco")
        return domains
