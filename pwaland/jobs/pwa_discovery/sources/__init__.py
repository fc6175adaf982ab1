"""Candidate domain sources"""

from pwaland.jobs.pwa_discovery.sources.aggregator import (
    SOURCE_CHOICES,
    DomainSourceAggregator,
    merge_and_deduplicate,
)
from pwaland.jobs.pwa_discovery.sources.markdown_lists import (
    MarkdownListSource,
    clean_url,
    extract_urls_from_markdown,
    is_valid_app_url,
)
from pwaland.jobs.pwa_discovery.sources.tranco import TrancoSource

__all__ = [
    "DomainSourceAggregator",
    "MarkdownListSource",
    "SOURCE_CHOICES",
    "TrancoSource",
    "clean_url",
    "extract_urls_from_markdown",
    "is_valid_app_url",
    "merge_and_deduplicate",
]
