"""Interface of the hosted database that holds the directory records"""

from abc import ABC, abstractmethod
from typing import Optional

from pwaland.jobs.pwa_discovery.models import DirectoryEntry, RecordPage, StoreRecord


class RecordStore(ABC):
    """A store bound to one database of directory records.

    Every method raises `RecordStoreError` when the store rejects the request or cannot be
    reached.
    """

    @abstractmethod
    async def query_by_field_equals(self, field: str, value: str) -> list[StoreRecord]:
        """Return the records whose `field` equals `value` exactly."""

    @abstractmethod
    async def insert_record(self, entry: DirectoryEntry) -> str:
        """Insert the entry and return the new record id."""

    @abstractmethod
    async def paginated_query(
        self, sort_field: Optional[str] = None, cursor: Optional[str] = None
    ) -> RecordPage:
        """Return one page of records, optionally sorted ascending by `sort_field`."""

    @abstractmethod
    async def update_record(self, record_id: str, description: str) -> None:
        """Replace the description of a record."""

    @abstractmethod
    async def archive_record(self, record_id: str) -> None:
        """Archive a record so it no longer shows up in queries."""

    async def close(self) -> None:  # noqa: B027
        """Release resources held by the store."""


async def fetch_all_records(
    store: RecordStore, sort_field: Optional[str] = None
) -> list[StoreRecord]:
    """Follow the pagination cursor until every record has been read."""
    records: list[StoreRecord] = []
    cursor: Optional[str] = None
    while True:
        page = await store.paginated_query(sort_field=sort_field, cursor=cursor)
        records.extend(page.records)
        if not page.has_more or not page.next_cursor:
            return records
        cursor = page.next_cursor
