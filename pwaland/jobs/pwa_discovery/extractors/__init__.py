"""Extraction of PWA signals from page source"""

from typing import Optional

from pwaland.jobs.pwa_discovery.extractors.base import (
    Extractor,
    detect_service_worker,
    find_best_icon,
)
from pwaland.jobs.pwa_discovery.extractors.regex_extractor import RegexExtractor
from pwaland.jobs.pwa_discovery.extractors.soup_extractor import SoupExtractor

EXTRACTORS: dict[str, type[Extractor]] = {
    RegexExtractor.name: RegexExtractor,
    SoupExtractor.name: SoupExtractor,
}

_default_extractor = RegexExtractor()


def get_extractor(name: str) -> Extractor:
    """Create the extractor registered under `name`."""
    try:
        return EXTRACTORS[name]()
    except KeyError:
        raise ValueError(f"Unknown extractor: {name}. Expected one of {sorted(EXTRACTORS)}")


def extract_manifest_link(html: str) -> Optional[str]:
    """Return the href of the first `<link rel="manifest">` in the page, or None."""
    return _default_extractor.extract_manifest_link(html)


def extract_meta_description(html: str) -> Optional[str]:
    """Return the page's meta description, or None."""
    return _default_extractor.extract_meta_description(html)


__all__ = [
    "Extractor",
    "RegexExtractor",
    "SoupExtractor",
    "detect_service_worker",
    "extract_manifest_link",
    "extract_meta_description",
    "find_best_icon",
    "get_extractor",
]
