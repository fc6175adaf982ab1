"""Network access for the PWA discovery job"""

from pwaland.jobs.pwa_discovery.scrapers.page_fetcher import PageFetcher, describe_error

__all__ = ["PageFetcher", "describe_error"]
