"""Record store backed by a Notion database, reached through the Notion REST API"""

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from pwaland.configs import settings
from pwaland.exceptions import RecordStoreError
from pwaland.jobs.pwa_discovery.constants import DEFAULT_TAG
from pwaland.jobs.pwa_discovery.io.record_store import RecordStore
from pwaland.jobs.pwa_discovery.models import DirectoryEntry, RecordPage, StoreRecord
from pwaland.utils.http_client import create_http_client

logger = logging.getLogger(__name__)

store_settings = settings.record_store

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class RetryableStoreError(RecordStoreError):
    """Raised for responses worth retrying: rate limiting and server errors."""


def _plain_text(fragments: Optional[list[dict[str, Any]]], separator: str = "") -> str:
    return separator.join(fragment.get("plain_text", "") for fragment in fragments or [])


def parse_page(page: dict[str, Any]) -> StoreRecord:
    """Convert a Notion page object into a store record. Missing properties become empty."""
    properties = page.get("properties", {})
    return StoreRecord(
        id=page["id"],
        title=_plain_text(properties.get("title", {}).get("title")),
        link=properties.get("link", {}).get("url") or "",
        icon=properties.get("icon", {}).get("url") or "",
        description=_plain_text(properties.get("description", {}).get("rich_text")),
        tags=[tag["name"] for tag in properties.get("tags", {}).get("multi_select") or []],
    )


def rich_text(content: str) -> list[dict[str, Any]]:
    """Build a single-fragment rich text value."""
    return [{"text": {"content": content}}]


def entry_properties(entry: DirectoryEntry) -> dict[str, Any]:
    """Build the page properties for a new directory record."""
    tags = entry.tags or [DEFAULT_TAG]
    return {
        "title": {"title": rich_text(entry.title)},
        "link": {"type": "url", "url": entry.link},
        "icon": {"type": "url", "url": entry.icon},
        "description": {"type": "rich_text", "rich_text": rich_text(entry.description or "")},
        "tags": {"type": "multi_select", "multi_select": [{"name": tag} for tag in tags]},
    }


class NotionRecordStore(RecordStore):
    """Directory records stored as pages of one Notion database.

    Transport errors, rate limiting and server errors are retried with exponential backoff;
    any failure left after the retries is raised as `RecordStoreError`.
    """

    def __init__(
        self,
        database_id: str,
        api_key: str,
        api_url: str = store_settings.api_url,
        notion_version: str = store_settings.notion_version,
        page_size: int = store_settings.page_size,
        timeout: float = store_settings.timeout_sec,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not database_id or not api_key:
            raise RecordStoreError("Notion database id and API key must be configured")
        self.database_id = database_id
        self.page_size = page_size
        self.client = client or create_http_client(
            base_url=api_url,
            request_timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": notion_version,
            },
        )

    @retry(
        wait=wait_exponential_jitter(
            initial=store_settings.retry_wait_initial_sec,
            jitter=store_settings.retry_wait_jitter_sec,
        ),
        stop=stop_after_attempt(store_settings.retry_count),
        retry=retry_if_exception_type((httpx.TransportError, RetryableStoreError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.request(method, path, json=payload)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableStoreError(
                f"Notion API {method} {path} returned HTTP {response.status_code}"
            )
        if not response.is_success:
            raise RecordStoreError(
                f"Notion API {method} {path} returned HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )
        return response.json()

    async def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a request, converting transport failures left after retries."""
        try:
            return await self._send(method, path, payload)
        except httpx.HTTPError as e:
            raise RecordStoreError(f"Notion API {method} {path} failed: {e!r}") from e
        except ValueError as e:
            raise RecordStoreError(f"Notion API {method} {path} returned invalid JSON") from e

    async def query_by_field_equals(self, field: str, value: str) -> list[StoreRecord]:
        """Return the records whose url property `field` equals `value`."""
        data = await self._request(
            "POST",
            f"databases/{self.database_id}/query",
            {"filter": {"property": field, "url": {"equals": value}}},
        )
        return [parse_page(page) for page in data.get("results", [])]

    async def insert_record(self, entry: DirectoryEntry) -> str:
        """Create a page for the entry, tagged `Uncategorized` when it has no tags."""
        data = await self._request(
            "POST",
            "pages",
            {
                "parent": {"type": "database_id", "database_id": self.database_id},
                "properties": entry_properties(entry),
            },
        )
        return str(data["id"])

    async def paginated_query(
        self, sort_field: Optional[str] = None, cursor: Optional[str] = None
    ) -> RecordPage:
        """Return one page of records."""
        payload: dict[str, Any] = {"page_size": self.page_size}
        if sort_field:
            payload["sorts"] = [{"property": sort_field, "direction": "ascending"}]
        if cursor:
            payload["start_cursor"] = cursor

        data = await self._request("POST", f"databases/{self.database_id}/query", payload)
        return RecordPage(
            records=[parse_page(page) for page in data.get("results", [])],
            has_more=bool(data.get("has_more")),
            next_cursor=data.get("next_cursor"),
        )

    async def update_record(self, record_id: str, description: str) -> None:
        """Replace the description property of a page."""
        await self._request(
            "PATCH",
            f"pages/{record_id}",
            {"properties": {"description": {"rich_text": rich_text(description)}}},
        )

    async def archive_record(self, record_id: str) -> None:
        """Archive a page."""
        await self._request("PATCH", f"pages/{record_id}", {"archived": True})

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
