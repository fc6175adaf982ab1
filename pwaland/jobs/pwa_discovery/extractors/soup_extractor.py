"""BeautifulSoup based extractor"""

from typing import Optional

from bs4 import BeautifulSoup

from pwaland.jobs.pwa_discovery.constants import (
    MANIFEST_SELECTOR,
    META_DESCRIPTION_SELECTORS,
    PARSER,
)
from pwaland.jobs.pwa_discovery.extractors.base import Extractor


class SoupExtractor(Extractor):
    """Extractor that parses the page into a DOM tree before selecting tags.

    Slower than the regex extractor but tolerant of attribute quoting and spacing quirks.
    """

    name = "soup"

    def _parse(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, PARSER)

    def extract_manifest_link(self, html: str) -> Optional[str]:
        """Return the href of the first manifest link element."""
        link = self._parse(html).select_one(MANIFEST_SELECTOR)
        if link is None:
            return None
        href = link.get("href")
        return str(href) if href else None

    def extract_meta_description(self, html: str) -> Optional[str]:
        """Return the first non-empty description, checking the standard meta tag first."""
        page = self._parse(html)
        for selector in META_DESCRIPTION_SELECTORS:
            for meta in page.select(selector):
                content = str(meta.get("content", "")).strip()
                if content:
                    return content
        return None
