"""PWA check in a headless browser, for sites that register their service worker from script
bundles the static heuristic cannot see.

Requires the `rendered` extra and a Chromium build installed with `playwright install chromium`.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from pwaland.exceptions import BrowserLaunchError, FetchError
from pwaland.jobs.pwa_discovery.constants import COULD_NOT_ANALYZE
from pwaland.jobs.pwa_discovery.extractors import Extractor, RegexExtractor
from pwaland.jobs.pwa_discovery.models import CheckResult, PwaChecks, PwaCheckResponse
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher, describe_error
from pwaland.jobs.pwa_discovery.strategies.base import (
    GatingPolicy,
    PwaCheckStrategy,
    build_suggestion,
    check_display,
    check_https,
    check_icons,
    check_manifest_fields,
    parse_manifest,
)
from pwaland.jobs.pwa_discovery.utils import ensure_scheme

logger = logging.getLogger(__name__)

# Resolves to true once a service worker controls the page, false after `timeoutMs`.
SERVICE_WORKER_READY_SCRIPT = """
async (timeoutMs) => {
    if (!("serviceWorker" in navigator)) return false;
    const timeout = new Promise((resolve) => setTimeout(() => resolve(false), timeoutMs));
    const ready = navigator.serviceWorker.ready.then(() => true, () => false);
    return Promise.race([ready, timeout]);
}
"""

MANIFEST_HREF_SCRIPT = """
() => {
    const link = document.querySelector('link[rel~="manifest" i][href]');
    return link ? link.href : null;
}
"""


class RenderedStrategy(PwaCheckStrategy):
    """Classify a site after letting a headless Chromium execute its scripts.

    One browser is launched on first use and shared by every check; each check gets its own
    browser context. Call `close()` when done.
    """

    name = "rendered"

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: Optional[Extractor] = None,
        policy: Optional[GatingPolicy] = None,
        timeout_sec: float = 15.0,
        service_worker_wait_sec: float = 5.0,
    ) -> None:
        super().__init__(policy)
        self.fetcher = fetcher
        self.extractor = extractor or RegexExtractor()
        self.timeout_ms = int(timeout_sec * 1000)
        self.service_worker_wait_ms = int(service_worker_wait_sec * 1000)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._launch_lock = asyncio.Lock()

    async def _get_browser(self) -> Browser:
        async with self._launch_lock:
            if self._browser is None:
                try:
                    self._playwright = await async_playwright().start()
                    self._browser = await self._playwright.chromium.launch(headless=True)
                except PlaywrightError as e:
                    await self.close()
                    raise BrowserLaunchError(f"Could not launch headless Chromium: {e}") from e
                logger.info("Launched headless Chromium for rendered PWA checks")
            return self._browser

    async def check(self, url: str) -> PwaCheckResponse:
        """Load the page in the browser, then run the five sub-checks.

        Raises:
            BrowserLaunchError: when the browser cannot be started.
        """
        url = ensure_scheme(url)
        https = check_https(url)
        browser = await self._get_browser()

        context = await browser.new_context()
        try:
            page = await context.new_page()
            try:
                await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
            except PlaywrightError as e:
                logger.debug(f"Could not render page {url}: {e}")
                checks = PwaChecks(
                    https=https,
                    manifest=CheckResult(
                        passed=False, detail=f"Failed to fetch page: {describe_error(e)}"
                    ),
                    service_worker=CheckResult(passed=False, detail=COULD_NOT_ANALYZE),
                    icons=CheckResult(passed=False, detail=COULD_NOT_ANALYZE),
                    display=CheckResult(passed=False, detail=COULD_NOT_ANALYZE),
                )
                return PwaCheckResponse(
                    is_pwa=self.policy.evaluate(checks),
                    url=url,
                    checks=checks,
                    suggestion=build_suggestion(url, None, checks.icons, None),
                )

            sw_ready = await page.evaluate(
                SERVICE_WORKER_READY_SCRIPT, self.service_worker_wait_ms
            )
            manifest_url = await page.evaluate(MANIFEST_HREF_SCRIPT)
            html = await page.content()
        finally:
            await context.close()

        service_worker = CheckResult(
            passed=bool(sw_ready),
            detail=(
                "Service Worker registered and ready"
                if sw_ready
                else "No Service Worker became ready after rendering the page"
            ),
        )

        manifest = None
        if not manifest_url:
            manifest_check = CheckResult(
                passed=False, detail='No <link rel="manifest"> found in HTML'
            )
        else:
            try:
                manifest = parse_manifest(await self.fetcher.fetch_json(manifest_url))
                manifest_check = check_manifest_fields(manifest)
            except (FetchError, ValueError) as e:
                manifest_check = CheckResult(
                    passed=False,
                    detail=f"Manifest link found but failed to fetch/parse: {describe_error(e)}",
                )

        icons = check_icons(manifest, url)
        checks = PwaChecks(
            https=https,
            manifest=manifest_check,
            service_worker=service_worker,
            icons=icons,
            display=check_display(manifest),
        )
        return PwaCheckResponse(
            is_pwa=self.policy.evaluate(checks),
            url=url,
            checks=checks,
            suggestion=build_suggestion(
                url, manifest, icons, self.extractor.extract_meta_description(html)
            ),
        )

    async def close(self) -> None:
        """Shut down the browser and the playwright driver."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
