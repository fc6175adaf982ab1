"""Extractor interface and the extraction helpers shared by every implementation"""

import re
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from pwaland.jobs.pwa_discovery.constants import PREFERRED_ICON_SIZES, SERVICE_WORKER_PATTERNS
from pwaland.jobs.pwa_discovery.models import ManifestIcon, ServiceWorkerDetection
from pwaland.jobs.pwa_discovery.utils import resolve_url

_SIZE_SEPARATORS = re.compile(r"[\s,]+")


class Extractor(ABC):
    """Pull PWA signals out of raw page source. Implementations never touch the network."""

    name: str

    @abstractmethod
    def extract_manifest_link(self, html: str) -> Optional[str]:
        """Return the href of the first `<link rel="manifest">`, verbatim, or None."""

    @abstractmethod
    def extract_meta_description(self, html: str) -> Optional[str]:
        """Return the trimmed `description` or `og:description` meta content, or None."""

    def detect_service_worker(self, html: str) -> ServiceWorkerDetection:
        """Scan the page source for service worker registration signatures."""
        return detect_service_worker(html)


def detect_service_worker(html: str) -> ServiceWorkerDetection:
    """Test every service worker signature against the raw source.

    Workers registered from bundles that are loaded dynamically are not visible here.
    """
    matched = [pattern.pattern for pattern in SERVICE_WORKER_PATTERNS if pattern.search(html)]
    if matched:
        return ServiceWorkerDetection(
            found=True,
            detail=f"Service Worker registration detected ({len(matched)} pattern(s) matched)",
            matched_patterns=matched,
        )
    return ServiceWorkerDetection(
        found=False,
        detail="No Service Worker registration patterns found in HTML source",
    )


def _size_tokens(icon: ManifestIcon) -> list[str]:
    return [token for token in _SIZE_SEPARATORS.split((icon.sizes or "").lower()) if token]


def find_best_icon(icons: Optional[Sequence[ManifestIcon]], base_url: str) -> Optional[str]:
    """Pick the largest preferred square icon and return its absolute URL.

    Falls back to the first icon that has a `src`. Returns None when there is nothing to pick.
    """
    if not icons:
        return None

    for size in PREFERRED_ICON_SIZES:
        for icon in icons:
            if icon.src and size in _size_tokens(icon):
                return resolve_url(icon.src, base_url)

    fallback = next((icon for icon in icons if icon.src), None)
    return resolve_url(fallback.src, base_url) if fallback else None
