"""PWA check strategy interface and the pass/fail policy shared by every strategy"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from pydantic import ValidationError

from pwaland.jobs.pwa_discovery.constants import (
    CHECK_NAMES,
    DEFAULT_REQUIRED_CHECKS,
    INSTALLABLE_DISPLAY_MODES,
)
from pwaland.jobs.pwa_discovery.extractors import find_best_icon
from pwaland.jobs.pwa_discovery.models import (
    CheckResult,
    ManifestData,
    PwaChecks,
    PwaCheckResponse,
    Suggestion,
)
from pwaland.jobs.pwa_discovery.utils import is_https


@dataclass(frozen=True)
class GatingPolicy:
    """Which sub-checks must pass for a site to be classified as a PWA."""

    required: frozenset[str] = DEFAULT_REQUIRED_CHECKS

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "GatingPolicy":
        """Build a policy from check names, rejecting unknown ones."""
        required = frozenset(names)
        unknown = required.difference(CHECK_NAMES)
        if unknown:
            raise ValueError(f"Unknown PWA checks in gating policy: {sorted(unknown)}")
        if not required:
            raise ValueError("Gating policy must require at least one check")
        return cls(required=required)

    def evaluate(self, checks: PwaChecks) -> bool:
        """Return True when every required check passed."""
        return all(getattr(checks, name).passed for name in self.required)


class PwaCheckStrategy(ABC):
    """Classify a single site as PWA or not.

    Implementations return a response for every reachable site, PWA or not. They raise only
    for failures the caller must report per item, such as a browser that cannot start.
    """

    name: str

    def __init__(self, policy: Optional[GatingPolicy] = None) -> None:
        self.policy = policy or GatingPolicy()

    @abstractmethod
    async def check(self, url: str) -> PwaCheckResponse:
        """Check the URL or bare domain."""

    async def close(self) -> None:  # noqa: B027
        """Release resources held by the strategy."""


def parse_manifest(payload: object) -> ManifestData:
    """Validate decoded manifest JSON.

    Raises:
        ValueError: when the payload is not a JSON object or has fields of the wrong type.
    """
    if not isinstance(payload, dict):
        raise ValueError("Manifest is not a JSON object")
    try:
        return ManifestData.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"Manifest has invalid fields: {e.error_count()} error(s)") from e


def check_https(url: str) -> CheckResult:
    """Pass when the URL uses the https scheme."""
    if is_https(url):
        return CheckResult(passed=True, detail="Site is served over HTTPS")
    return CheckResult(passed=False, detail="Site is not served over HTTPS")


def check_manifest_fields(manifest: ManifestData) -> CheckResult:
    """Pass when the manifest has a display name."""
    if not manifest.display_name:
        return CheckResult(
            passed=False,
            detail='Manifest found but missing both "name" and "short_name"',
            data=manifest,
        )
    return CheckResult(
        passed=True,
        detail=f'Valid manifest found: "{manifest.display_name}"',
        data=manifest,
    )


def check_icons(manifest: Optional[ManifestData], base_url: str) -> CheckResult:
    """Pass when the manifest declares icons and one of them resolves to a URL."""
    if manifest is None:
        return CheckResult(passed=False, detail="Cannot check icons without manifest")
    if not manifest.icons:
        return CheckResult(passed=False, detail="No icons defined in manifest")

    best_icon = find_best_icon(manifest.icons, base_url)
    if not best_icon:
        return CheckResult(passed=False, detail="Icons defined but no valid src found")
    return CheckResult(
        passed=True,
        detail=f"{len(manifest.icons)} icon(s) defined in manifest",
        best_icon=best_icon,
    )


def check_display(manifest: Optional[ManifestData]) -> CheckResult:
    """Pass when the display mode allows installation."""
    if manifest is None:
        return CheckResult(passed=False, detail="Cannot check display mode without manifest")
    if not manifest.display:
        return CheckResult(passed=False, detail="No display mode specified in manifest")
    if manifest.display in INSTALLABLE_DISPLAY_MODES:
        return CheckResult(passed=True, detail=f'Display mode: "{manifest.display}"')
    return CheckResult(
        passed=False,
        detail=(
            f'Display mode "{manifest.display}" does not support installability '
            "(need standalone, fullscreen, or minimal-ui)"
        ),
    )


def build_suggestion(
    url: str,
    manifest: Optional[ManifestData],
    icons: CheckResult,
    meta_description: Optional[str],
) -> Suggestion:
    """Pre-fill a directory entry from the manifest, falling back to the meta description."""
    return Suggestion(
        title=(manifest.display_name if manifest else None) or "",
        icon=icons.best_icon or "",
        description=(manifest.description if manifest else None) or meta_description or "",
        link=url,
    )
