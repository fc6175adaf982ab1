# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Unit tests for the Notion backed record store."""

import json
from typing import Any, Callable

import httpx
import pytest
from pytest_mock import MockerFixture
from tenacity import stop_after_attempt, wait_none

from pwaland.exceptions import RecordStoreError
from pwaland.jobs.pwa_discovery.io import NotionRecordStore, fetch_all_records
from pwaland.jobs.pwa_discovery.io.notion_store import RetryableStoreError, parse_page
from pwaland.jobs.pwa_discovery.models import DirectoryEntry, StoreRecord

BASE_URL = "https://notion.test/v1"

Handler = Callable[[httpx.Request], httpx.Response]


def notion_page(
    page_id: str, title: str, link: str, description: str = "", tags: tuple[str, ...] = ()
) -> dict[str, Any]:
    """Build a Notion page object as returned by the query endpoint."""
    return {
        "object": "page",
        "id": page_id,
        "properties": {
            "title": {"title": [{"plain_text": title}]},
            "link": {"url": link},
            "icon": {"url": f"{link}/icon.png"},
            "description": {"rich_text": [{"plain_text": description}] if description else []},
            "tags": {"multi_select": [{"name": tag} for tag in tags]},
        },
    }


class Recorder:
    """Mock transport handler that records requests and replays canned responses.

    The last response is repeated once the others are used up.
    """

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )

    def body(self, index: int = -1) -> Any:
        """Return the decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)


def make_store(handler: Handler) -> NotionRecordStore:
    """Build a store whose client talks to the handler."""
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return NotionRecordStore(database_id="db-1", api_key="secret", client=client)


class TestNotionRecordStoreRequests:
    """Tests for the requests sent to the Notion API."""

    @pytest.mark.asyncio
    async def test_query_by_field_equals(self) -> None:
        """Test the filter sent for an exact link lookup and the parsed records."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "results": [
                        notion_page("p1", "Example", "https://app.example.com", "Hi", ("Tools",))
                    ]
                },
            )
        )
        store = make_store(recorder)

        records = await store.query_by_field_equals("link", "https://app.example.com")

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/databases/db-1/query"
        assert recorder.body() == {
            "filter": {"property": "link", "url": {"equals": "https://app.example.com"}}
        }
        assert records == [
            StoreRecord(
                id="p1",
                title="Example",
                link="https://app.example.com",
                icon="https://app.example.com/icon.png",
                description="Hi",
                tags=["Tools"],
            )
        ]
        await store.close()

    @pytest.mark.asyncio
    async def test_insert_record_defaults_tag(self) -> None:
        """Test the page created for an entry without tags."""
        recorder = Recorder(httpx.Response(200, json={"id": "new-page"}))
        store = make_store(recorder)
        entry = DirectoryEntry(
            title="Example", link="https://app.example.com", icon="https://app.example.com/i.png"
        )

        record_id = await store.insert_record(entry)

        assert record_id == "new-page"
        assert str(recorder.requests[0].url) == f"{BASE_URL}/pages"
        body = recorder.body()
        assert body["parent"] == {"type": "database_id", "database_id": "db-1"}
        properties = body["properties"]
        assert properties["title"] == {"title": [{"text": {"content": "Example"}}]}
        assert properties["link"] == {"type": "url", "url": "https://app.example.com"}
        assert properties["description"]["rich_text"] == [{"text": {"content": ""}}]
        assert properties["tags"]["multi_select"] == [{"name": "Uncategorized"}]
        await store.close()

    @pytest.mark.asyncio
    async def test_insert_record_with_tags(self) -> None:
        """Test that given tags replace the default tag."""
        recorder = Recorder(httpx.Response(200, json={"id": "new-page"}))
        store = make_store(recorder)
        entry = DirectoryEntry(
            title="Example",
            link="https://app.example.com",
            icon="https://app.example.com/i.png",
            description="Offline notes",
            tags=["Auto-discovered", "Notes"],
        )

        await store.insert_record(entry)

        properties = recorder.body()["properties"]
        assert properties["tags"]["multi_select"] == [
            {"name": "Auto-discovered"},
            {"name": "Notes"},
        ]
        assert properties["description"]["rich_text"] == [{"text": {"content": "Offline notes"}}]
        await store.close()

    @pytest.mark.asyncio
    async def test_paginated_query(self) -> None:
        """Test the sort and cursor of a page request and the returned page."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "results": [notion_page("p3", "C", "https://c.app")],
                    "has_more": True,
                    "next_cursor": "cursor-2",
                },
            )
        )
        store = make_store(recorder)

        page = await store.paginated_query(sort_field="title", cursor="cursor-1")

        assert recorder.body() == {
            "page_size": 100,
            "sorts": [{"property": "title", "direction": "ascending"}],
            "start_cursor": "cursor-1",
        }
        assert [record.id for record in page.records] == ["p3"]
        assert page.has_more
        assert page.next_cursor == "cursor-2"
        await store.close()

    @pytest.mark.asyncio
    async def test_fetch_all_records_follows_cursor(self) -> None:
        """Test that every page is read until has_more is false."""
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "results": [notion_page("p1", "A", "https://a.app")],
                    "has_more": True,
                    "next_cursor": "c2",
                },
            ),
            httpx.Response(
                200,
                json={
                    "results": [notion_page("p2", "B", "https://b.app")],
                    "has_more": False,
                    "next_cursor": None,
                },
            ),
        )
        store = make_store(recorder)

        records = await fetch_all_records(store)

        assert [record.id for record in records] == ["p1", "p2"]
        assert "start_cursor" not in recorder.body(0)
        assert recorder.body(1)["start_cursor"] == "c2"
        await store.close()

    @pytest.mark.asyncio
    async def test_update_and_archive(self) -> None:
        """Test the PATCH requests for description updates and archiving."""
        recorder = Recorder(httpx.Response(200, json={"id": "p1"}))
        store = make_store(recorder)

        await store.update_record("p1", "A better description")
        await store.archive_record("p1")

        assert [request.method for request in recorder.requests] == ["PATCH", "PATCH"]
        assert str(recorder.requests[0].url) == f"{BASE_URL}/pages/p1"
        assert recorder.body(0) == {
            "properties": {
                "description": {"rich_text": [{"text": {"content": "A better description"}}]}
            }
        }
        assert recorder.body(1) == {"archived": True}
        await store.close()

    @pytest.mark.asyncio
    async def test_default_client_headers(self) -> None:
        """Test that the default client authenticates against the configured API."""
        store = NotionRecordStore(database_id="db-1", api_key="secret")

        assert store.client.headers["Authorization"] == "Bearer secret"
        assert store.client.headers["Notion-Version"] == "2022-06-28"
        assert str(store.client.base_url).rstrip("/") == BASE_URL
        await store.close()

    @pytest.mark.parametrize(("database_id", "api_key"), [("", "secret"), ("db-1", "")])
    def test_missing_credentials(self, database_id: str, api_key: str) -> None:
        """Test that a store cannot be built without a database id and an API key."""
        with pytest.raises(RecordStoreError, match="must be configured"):
            NotionRecordStore(database_id=database_id, api_key=api_key)


class TestNotionRecordStoreErrors:
    """Tests for error mapping and retries."""

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, mocker: MockerFixture) -> None:
        """Test that a 4xx response raises RecordStoreError straight away."""
        mocker.patch.object(
            NotionRecordStore,
            "_send",
            NotionRecordStore._send.retry_with(stop=stop_after_attempt(3), wait=wait_none()),
        )
        recorder = Recorder(httpx.Response(400, json={"message": "body failed validation"}))
        store = make_store(recorder)

        with pytest.raises(RecordStoreError, match="returned HTTP 400: .*body failed validation"):
            await store.archive_record("p1")

        assert len(recorder.requests) == 1
        await store.close()

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, mocker: MockerFixture) -> None:
        """Test that rate limiting and server errors are retried until a success."""
        mocker.patch.object(
            NotionRecordStore,
            "_send",
            NotionRecordStore._send.retry_with(stop=stop_after_attempt(3), wait=wait_none()),
        )
        recorder = Recorder(
            httpx.Response(429),
            httpx.Response(502),
            httpx.Response(200, json={"id": "p9"}),
        )
        store = make_store(recorder)

        record_id = await store.insert_record(
            DirectoryEntry(title="A", link="https://a.app", icon="https://a.app/i.png")
        )

        assert record_id == "p9"
        assert len(recorder.requests) == 3
        await store.close()

    @pytest.mark.asyncio
    async def test_server_error_after_retries(self) -> None:
        """Test that a server error left after the configured attempts is raised."""
        store = make_store(Recorder(httpx.Response(503)))

        with pytest.raises(RetryableStoreError, match="returned HTTP 503"):
            await store.paginated_query()

        await store.close()

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        """Test that connection failures are raised as RecordStoreError."""
        store = make_store(Recorder(httpx.ConnectError("connection refused")))

        with pytest.raises(RecordStoreError, match="failed: ConnectError"):
            await store.query_by_field_equals("link", "https://a.app")

        await store.close()

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        """Test that a success response without JSON is raised as RecordStoreError."""
        store = make_store(Recorder(httpx.Response(200, text="<html>maintenance</html>")))

        with pytest.raises(RecordStoreError, match="returned invalid JSON"):
            await store.query_by_field_equals("link", "https://a.app")

        await store.close()


def test_parse_page_with_missing_properties() -> None:
    """Test that absent or empty properties become empty values."""
    record = parse_page({"id": "p1", "properties": {"link": {"url": None}}})

    assert record == StoreRecord(id="p1")


def test_parse_page_joins_rich_text_fragments() -> None:
    """Test that multi-fragment titles and descriptions are concatenated."""
    record = parse_page(
        {
            "id": "p1",
            "properties": {
                "title": {"title": [{"plain_text": "Hello "}, {"plain_text": "World"}]},
                "description": {"rich_text": [{"plain_text": "Two "}, {"plain_text": "parts"}]},
            },
        }
    )

    assert record.title == "Hello World"
    assert record.description == "Two parts"
