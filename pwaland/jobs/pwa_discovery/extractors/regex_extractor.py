"""Pattern based extractor working directly on the page source"""

from typing import Optional

from pwaland.jobs.pwa_discovery.constants import (
    MANIFEST_LINK_PATTERNS,
    META_DESCRIPTION_PATTERNS,
)
from pwaland.jobs.pwa_discovery.extractors.base import Extractor


class RegexExtractor(Extractor):
    """Lightweight extractor that matches tags with regular expressions."""

    name = "regex"

    def extract_manifest_link(self, html: str) -> Optional[str]:
        """Return the href of the first manifest link in either attribute order."""
        for pattern in MANIFEST_LINK_PATTERNS:
            match = pattern.search(html)
            if match and match.group(1):
                return match.group(1)
        return None

    def extract_meta_description(self, html: str) -> Optional[str]:
        """Return `meta[name=description]`, then `meta[property=og:description]` content."""
        for pattern in META_DESCRIPTION_PATTERNS:
            match = pattern.search(html)
            if match and match.group(1):
                return match.group(1).strip()
        return None
