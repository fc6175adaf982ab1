"""Async fetcher for pages, manifests and source lists"""

import logging
from typing import Any, Optional

import httpx

from pwaland.exceptions import FetchError
from pwaland.jobs.pwa_discovery.constants import REQUEST_HEADERS, TIMEOUT
from pwaland.utils.http_client import create_http_client

logger = logging.getLogger(__name__)


def describe_error(error: BaseException) -> str:
    """Return a readable message for exceptions whose str() is empty, such as timeouts."""
    return str(error) or error.__class__.__name__


class PageFetcher:
    """Fetch remote documents with browser-like headers, redirects and a per-request timeout.

    Use as an async context manager, or call `close()` when done.
    """

    def __init__(
        self, timeout: float = TIMEOUT, client: Optional[httpx.AsyncClient] = None
    ) -> None:
        self.timeout = timeout
        self.session = client or create_http_client(
            request_timeout=timeout,
            connect_timeout=timeout,
            headers=REQUEST_HEADERS,
        )

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    async def fetch(self, url: str) -> httpx.Response:
        """GET the URL and return the response.

        Raises:
            FetchError: on transport errors, timeouts and non-2xx responses.
        """
        try:
            response = await self.session.get(
                url,
                headers=REQUEST_HEADERS,
                follow_redirects=True,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.debug(f"Failed to fetch URL {url}: {e!r}")
            raise FetchError(describe_error(e)) from e

        if not response.is_success:
            raise FetchError(f"HTTP {response.status_code} {response.reason_phrase}".strip())
        return response

    async def fetch_text(self, url: str) -> str:
        """Fetch the URL and return the body as text."""
        response = await self.fetch(url)
        return response.text

    async def fetch_json(self, url: str) -> Any:
        """Fetch the URL and decode the body as JSON.

        Raises:
            FetchError: when the body cannot be fetched.
            ValueError: when the body is not valid JSON.
        """
        response = await self.fetch(url)
        return response.json()

    async def close(self) -> None:
        """Close HTTP session and release resources."""
        await self.session.aclose()
