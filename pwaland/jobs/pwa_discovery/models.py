"""Data models for the PWA discovery job"""

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ManifestIcon(BaseModel):
    """One icon declared in a Web App Manifest."""

    model_config = ConfigDict(extra="allow")

    src: str = ""
    sizes: Optional[str] = None
    type: Optional[str] = None
    purpose: Optional[str] = None


class ManifestData(BaseModel):
    """The fields of a Web App Manifest used by the PWA heuristic. Other keys are kept."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    short_name: Optional[str] = None
    description: Optional[str] = None
    start_url: Optional[str] = None
    display: Optional[str] = None
    theme_color: Optional[str] = None
    background_color: Optional[str] = None
    icons: list[ManifestIcon] = Field(default_factory=list)

    @field_validator("icons", mode="before")
    @classmethod
    def drop_malformed_icons(cls, value: Any) -> list[Any]:
        """Keep only icon entries that are JSON objects."""
        if not isinstance(value, list):
            return []
        return [icon for icon in value if isinstance(icon, dict)]

    @property
    def display_name(self) -> Optional[str]:
        """Return `name`, falling back to `short_name`."""
        return self.name or self.short_name


class CheckResult(BaseModel):
    """Outcome of one sub-check of a PWA check."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    passed: bool = Field(default=False, alias="pass")
    detail: str = ""
    data: Optional[ManifestData] = None
    best_icon: Optional[str] = Field(default=None, alias="bestIcon")


class PwaChecks(BaseModel):
    """The five sub-checks of a PWA check."""

    model_config = ConfigDict(populate_by_name=True)

    https: CheckResult = CheckResult()
    manifest: CheckResult = CheckResult()
    service_worker: CheckResult = Field(default=CheckResult(), alias="serviceWorker")
    icons: CheckResult = CheckResult()
    display: CheckResult = CheckResult()


class Suggestion(BaseModel):
    """A directory entry pre-filled from a PWA check."""

    title: str = ""
    icon: str = ""
    description: str = ""
    link: str = ""


class PwaCheckResponse(BaseModel):
    """Aggregate result of checking a single site."""

    model_config = ConfigDict(populate_by_name=True)

    is_pwa: bool = Field(default=False, alias="isPwa")
    url: str
    checks: PwaChecks = Field(default_factory=PwaChecks)
    suggestion: Suggestion = Field(default_factory=Suggestion)


class ServiceWorkerDetection(BaseModel):
    """Result of scanning page source for service worker registration signatures."""

    found: bool
    detail: str
    matched_patterns: list[str] = Field(default_factory=list)


class DirectoryEntry(BaseModel):
    """A directory listing, as stored in the local JSON file or sent to the record store."""

    model_config = ConfigDict(extra="ignore")

    title: str
    link: str
    icon: str
    short_name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None


class StoreRecord(BaseModel):
    """A directory entry as returned by the record store."""

    id: str
    title: str = ""
    link: str = ""
    icon: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class RecordPage(BaseModel):
    """One page of a paginated record store query."""

    records: list[StoreRecord] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None


class DiscoverResult(BaseModel):
    """Outcome of running one candidate domain through the discovery pipeline."""

    model_config = ConfigDict(frozen=True)

    domain: str
    is_pwa: bool = False
    added: bool = False
    skipped: bool = False
    error: Optional[str] = None
    title: Optional[str] = None


class DiscoverSummary(BaseModel):
    """Counters and per-domain results of one discovery run."""

    source: str
    total_domains: int = 0
    checked: int = 0
    found: int = 0
    added: int = 0
    skipped: int = 0
    failed: int = 0
    dry_run: bool = False
    results: list[DiscoverResult] = Field(default_factory=list)

    def record(self, result: DiscoverResult) -> None:
        """Append a result and update the counters."""
        self.results.append(result)
        self.checked += 1
        self.found += int(result.is_pwa)
        self.added += int(result.added)
        self.skipped += int(result.skipped)
        self.failed += int(result.error is not None)

    def pruned(self) -> "DiscoverSummary":
        """Return a copy keeping only the PWA-positive results."""
        return self.model_copy(update={"results": [r for r in self.results if r.is_pwa]})


class ItemStatus(StrEnum):
    """Outcome category of one batch item."""

    ADDED = "added"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"
    # Processed without attempting a mutating step, e.g. a site that is not a PWA.
    CHECKED = "checked"


class SkipReason(StrEnum):
    """Why a batch item was skipped."""

    DUPLICATE = "duplicate"
    MISSING_FIELDS = "missing_fields"
    DRY_RUN = "dry_run"
    NO_TITLE_OR_ICON = "no_title_or_icon"


class ItemOutcome(BaseModel):
    """Outcome of one batch item."""

    item: Any = None
    status: ItemStatus
    reason: Optional[SkipReason] = None
    error: Optional[str] = None
    result: Any = None


class BatchSummary(BaseModel):
    """Run-level totals of a batch."""

    total: int = 0
    processed: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    skip_reasons: dict[str, int] = Field(default_factory=dict)

    def record(self, outcome: ItemOutcome) -> None:
        """Count an item outcome."""
        self.processed += 1
        match outcome.status:
            case ItemStatus.ADDED:
                self.added += 1
            case ItemStatus.UPDATED:
                self.updated += 1
            case ItemStatus.SKIPPED:
                self.skipped += 1
                if outcome.reason:
                    self.skip_reasons[outcome.reason] = (
                        self.skip_reasons.get(outcome.reason, 0) + 1
                    )
            case ItemStatus.FAILED:
                self.failed += 1


class BatchProgress(BaseModel):
    """Progress snapshot passed to batch progress callbacks."""

    completed: int
    total: int
    summary: BatchSummary


class BatchReport(BaseModel):
    """Totals and ordered outcomes of a finished batch."""

    summary: BatchSummary
    outcomes: list[ItemOutcome] = Field(default_factory=list)
