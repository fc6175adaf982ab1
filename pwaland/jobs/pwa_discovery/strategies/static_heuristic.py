"""PWA check from the raw page source and its Web App Manifest"""

import logging
from typing import Optional

from pwaland.exceptions import FetchError
from pwaland.jobs.pwa_discovery.constants import COULD_NOT_ANALYZE
from pwaland.jobs.pwa_discovery.extractors import Extractor, RegexExtractor
from pwaland.jobs.pwa_discovery.models import (
    CheckResult,
    ManifestData,
    PwaChecks,
    PwaCheckResponse,
)
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
from pwaland.jobs.pwa_discovery.utils import ensure_scheme, resolve_url

logger = logging.getLogger(__name__)


class StaticHeuristicStrategy(PwaCheckStrategy):
    """Classify a site without executing JavaScript.

    The page is fetched once and scanned for a manifest link and service worker
    registration signatures. The manifest is fetched fresh on every check.
    """

    name = "static-heuristic"

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: Optional[Extractor] = None,
        policy: Optional[GatingPolicy] = None,
    ) -> None:
        super().__init__(policy)
        self.fetcher = fetcher
        self.extractor = extractor or RegexExtractor()

    async def check(self, url: str) -> PwaCheckResponse:
        """Run the five sub-checks against the URL or bare domain."""
        url = ensure_scheme(url)
        https = check_https(url)

        try:
            html = await self.fetcher.fetch_text(url)
        except FetchError as e:
            logger.debug(f"Could not fetch page {url}: {e}")
            checks = PwaChecks(
                https=https,
                manifest=CheckResult(passed=False, detail=f"Failed to fetch page: {e}"),
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

        manifest_check, manifest = await self._check_manifest(html, url)

        detection = self.extractor.detect_service_worker(html)
        service_worker = CheckResult(passed=detection.found, detail=detection.detail)

        icons = check_icons(manifest, url)
        display = check_display(manifest)

        checks = PwaChecks(
            https=https,
            manifest=manifest_check,
            service_worker=service_worker,
            icons=icons,
            display=display,
        )
        meta_description = self.extractor.extract_meta_description(html)
        return PwaCheckResponse(
            is_pwa=self.policy.evaluate(checks),
            url=url,
            checks=checks,
            suggestion=build_suggestion(url, manifest, icons, meta_description),
        )

    async def _check_manifest(
        self, html: str, page_url: str
    ) -> tuple[CheckResult, Optional[ManifestData]]:
        """Locate, fetch and parse the manifest.

        Returns the manifest check and the parsed manifest (None if it could not be parsed).
        """
        href = self.extractor.extract_manifest_link(html)
        if not href:
            return (
                CheckResult(passed=False, detail='No <link rel="manifest"> found in HTML'),
                None,
            )

        manifest_url = resolve_url(href, page_url)
        try:
            manifest = parse_manifest(await self.fetcher.fetch_json(manifest_url))
        except (FetchError, ValueError) as e:
            return (
                CheckResult(
                    passed=False,
                    detail=f"Manifest link found but failed to fetch/parse: {describe_error(e)}",
                ),
                None,
            )

        return check_manifest_fields(manifest), manifest
