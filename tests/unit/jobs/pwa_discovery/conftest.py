# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Module for test configurations for the pwa_discovery job unit test directory."""

import copy
from typing import Any, Callable, Optional

import httpx
import pytest

from pwaland.exceptions import RecordStoreError
from pwaland.jobs.pwa_discovery.io import RecordStore
from pwaland.jobs.pwa_discovery.models import (
    CheckResult,
    DirectoryEntry,
    PwaChecks,
    PwaCheckResponse,
    RecordPage,
    StoreRecord,
    Suggestion,
)
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher
from pwaland.jobs.pwa_discovery.strategies import PwaCheckStrategy
from pwaland.jobs.pwa_discovery.utils import ensure_scheme

PWA_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Example App</title>
  <meta name="description" content="An example progressive web app">
  <link rel="manifest" href="/manifest.json">
</head>
<body>
  <script>
    if ("serviceWorker" in navigator) {
      navigator.serviceWorker.register("/sw.js");
    }
  </script>
</body>
</html>
"""

PLAIN_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Plain Site</title>
  <meta property="og:description" content="Just a website">
</head>
<body><p>Hello</p></body>
</html>
"""

PWA_MANIFEST: dict[str, Any] = {
    "name": "Example App",
    "short_name": "Example",
    "description": "Do example things offline",
    "start_url": "/",
    "display": "standalone",
    "icons": [
        {"src": "/icons/icon-192.png", "sizes": "192x192", "type": "image/png"},
        {"src": "/icons/icon-512.png", "sizes": "512x512", "type": "image/png"},
    ],
}

# A route maps an absolute URL to what the mock transport serves:
# str -> 200 HTML, dict/list -> 200 JSON, int -> empty response with that status,
# Exception -> raised by the transport.
Routes = dict[str, Any]


def serve(routes: Routes, request: httpx.Request) -> httpx.Response:
    """Build a fresh response for the request from the route table.

    URLs are compared without a trailing slash.
    """
    requested = str(request.url).rstrip("/")
    target = next((value for url, value in routes.items() if url.rstrip("/") == requested), None)
    if target is None:
        return httpx.Response(404)
    if isinstance(target, Exception):
        raise target
    if isinstance(target, int):
        return httpx.Response(target)
    if isinstance(target, (dict, list)):
        return httpx.Response(200, json=target)
    return httpx.Response(200, text=target, headers={"content-type": "text/html"})


@pytest.fixture(name="make_fetcher")
def fixture_make_fetcher() -> Callable[[Routes], PageFetcher]:
    """Return a factory for page fetchers backed by an in-memory route table."""

    def make_fetcher(routes: Routes) -> PageFetcher:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: serve(routes, request)),
            follow_redirects=True,
        )
        return PageFetcher(timeout=5.0, client=client)

    return make_fetcher


@pytest.fixture(name="pwa_page")
def fixture_pwa_page() -> str:
    """Return the source of a page with a manifest link and a service worker registration."""
    return PWA_PAGE


@pytest.fixture(name="plain_page")
def fixture_plain_page() -> str:
    """Return the source of a page without any PWA signal."""
    return PLAIN_PAGE


@pytest.fixture(name="pwa_manifest")
def fixture_pwa_manifest() -> dict[str, Any]:
    """Return a manifest that satisfies every manifest based sub-check."""
    return copy.deepcopy(PWA_MANIFEST)


@pytest.fixture(name="pwa_routes")
def fixture_pwa_routes() -> Routes:
    """Return routes for a site that passes every PWA sub-check."""
    return {
        "https://example.com/": PWA_PAGE,
        "https://example.com/manifest.json": PWA_MANIFEST,
    }


class FakeRecordStore(RecordStore):
    """In-memory record store with a page size of two."""

    page_size = 2

    def __init__(self, records: Optional[list[StoreRecord]] = None) -> None:
        self.records = list(records or [])
        self.inserted: list[DirectoryEntry] = []
        self.updated: dict[str, str] = {}
        self.archived: list[str] = []
        self.queries: list[tuple[str, str]] = []
        self.fail_links: set[str] = set()
        self.closed = False

    async def query_by_field_equals(self, field: str, value: str) -> list[StoreRecord]:
        self.queries.append((field, value))
        return [record for record in self.records if getattr(record, field) == value]

    async def insert_record(self, entry: DirectoryEntry) -> str:
        if entry.link in self.fail_links:
            raise RecordStoreError(f"Notion API POST pages returned HTTP 400: {entry.link}")
        record_id = f"record-{len(self.records) + 1}"
        self.records.append(
            StoreRecord(
                id=record_id,
                title=entry.title,
                link=entry.link,
                icon=entry.icon,
                description=entry.description or "",
                tags=entry.tags or [],
            )
        )
        self.inserted.append(entry)
        return record_id

    async def paginated_query(
        self, sort_field: Optional[str] = None, cursor: Optional[str] = None
    ) -> RecordPage:
        records = self.records
        if sort_field:
            records = sorted(records, key=lambda record: getattr(record, sort_field))
        start = int(cursor or 0)
        end = start + self.page_size
        has_more = end < len(records)
        return RecordPage(
            records=records[start:end],
            has_more=has_more,
            next_cursor=str(end) if has_more else None,
        )

    async def update_record(self, record_id: str, description: str) -> None:
        self.updated[record_id] = description

    async def archive_record(self, record_id: str) -> None:
        self.archived.append(record_id)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(name="fake_store")
def fixture_fake_store() -> FakeRecordStore:
    """Return an empty in-memory record store."""
    return FakeRecordStore()


@pytest.fixture(name="make_store")
def fixture_make_store() -> Callable[..., FakeRecordStore]:
    """Return a factory for in-memory record stores holding the given records."""

    def make_store(records: Optional[list[StoreRecord]] = None) -> FakeRecordStore:
        return FakeRecordStore(records)

    return make_store


def passed(detail: str = "ok") -> CheckResult:
    """Return a passing sub-check."""
    return CheckResult(passed=True, detail=detail)


def failed(detail: str = "nope") -> CheckResult:
    """Return a failing sub-check."""
    return CheckResult(passed=False, detail=detail)


@pytest.fixture(name="make_pwa_response")
def fixture_make_pwa_response() -> Callable[..., PwaCheckResponse]:
    """Return a factory for check responses of a site that passes every sub-check."""

    def make_pwa_response(
        domain: str,
        title: str = "Example App",
        icon: Optional[str] = "https://example.com/icon-512.png",
        is_pwa: bool = True,
    ) -> PwaCheckResponse:
        url = ensure_scheme(domain)
        return PwaCheckResponse(
            is_pwa=is_pwa,
            url=url,
            checks=PwaChecks(
                https=passed(),
                manifest=passed() if is_pwa else failed(),
                service_worker=passed() if is_pwa else failed(),
                icons=CheckResult(passed=bool(icon), best_icon=icon),
                display=passed(),
            ),
            suggestion=Suggestion(
                title=title, icon=icon or "", description=f"About {title}", link=url
            ),
        )

    return make_pwa_response


class FakeStrategy(PwaCheckStrategy):
    """Strategy answering from a table of responses keyed by the checked domain.

    Unknown domains are reported as reachable sites that are not PWAs.
    """

    name = "fake"

    def __init__(self, responses: dict[str, PwaCheckResponse | Exception]) -> None:
        super().__init__()
        self.responses = responses
        self.checked: list[str] = []
        self.closed = False

    async def check(self, url: str) -> PwaCheckResponse:
        self.checked.append(url)
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return PwaCheckResponse(url=ensure_scheme(url))
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(name="make_strategy")
def fixture_make_strategy() -> Callable[[dict[str, Any]], FakeStrategy]:
    """Return a factory for strategies with canned responses."""

    def make_strategy(responses: dict[str, Any]) -> FakeStrategy:
        return FakeStrategy(responses)

    return make_strategy
