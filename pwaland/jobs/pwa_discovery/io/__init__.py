"""I/O operations for the PWA discovery job"""

from pwaland.jobs.pwa_discovery.io.directory_file import DirectoryFile
from pwaland.jobs.pwa_discovery.io.discover_history import DiscoverHistory
from pwaland.jobs.pwa_discovery.io.notion_store import NotionRecordStore
from pwaland.jobs.pwa_discovery.io.record_store import RecordStore, fetch_all_records

__all__ = [
    "DirectoryFile",
    "DiscoverHistory",
    "NotionRecordStore",
    "RecordStore",
    "fetch_all_records",
]
