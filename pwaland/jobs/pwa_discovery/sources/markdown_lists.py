"""Collect app URLs from curated markdown lists such as the awesome-pwa READMEs"""

import logging
from urllib.parse import urldefrag

from pwaland.exceptions import FetchError
from pwaland.jobs.pwa_discovery.constants import (
    BARE_URL_PATTERN,
    EXCLUDED_URL_PATTERNS,
    MARKDOWN_LINK_PATTERN,
    TRAILING_PUNCTUATION_PATTERN,
)
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher

logger = logging.getLogger(__name__)


def clean_url(url: str) -> str:
    """Strip trailing sentence punctuation and the fragment."""
    url = TRAILING_PUNCTUATION_PATTERN.sub("", url.strip())
    return urldefrag(url).url


def is_valid_app_url(url: str) -> bool:
    """Reject links to code hosting, packages, docs, badges and CI services."""
    return not any(pattern.search(url) for pattern in EXCLUDED_URL_PATTERNS)


def extract_urls_from_markdown(markdown: str) -> list[str]:
    """Return the app URLs linked from a markdown document, in order of first appearance.

    Both `[text](url)` links and bare URLs are collected.
    """
    found = [match.group(2) for match in MARKDOWN_LINK_PATTERN.finditer(markdown)]
    found.extend(match.group(1) for match in BARE_URL_PATTERN.finditer(markdown))

    urls: list[str] = []
    seen: set[str] = set()
    for raw in found:
        url = clean_url(raw)
        if url and url not in seen and is_valid_app_url(url):
            seen.add(url)
            urls.append(url)
    return urls


class MarkdownListSource:
    """App URLs from a set of raw markdown documents. A source that fails contributes nothing."""

    name = "github"

    def __init__(self, fetcher: PageFetcher, urls: list[str]) -> None:
        self.fetcher = fetcher
        self.urls = urls

    async def fetch(self) -> list[str]:
        """Fetch every list and return the deduplicated URLs."""
        urls: list[str] = []
        seen: set[str] = set()
        for source_url in self.urls:
            try:
                markdown = await self.fetcher.fetch_text(source_url)
            except FetchError as e:
                logger.warning(f"Skipping markdown list {source_url}: {e}")
                continue

            extracted = extract_urls_from_markdown(markdown)
            logger.info(f"Found {len(extracted)} URLs in {source_url}")
            for url in extracted:
                if url not in seen:
                    seen.add(url)
                    urls.append(url)
        return urls
