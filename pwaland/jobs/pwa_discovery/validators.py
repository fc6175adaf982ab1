"""Validation functions for the PWA discovery job"""

from typing import Optional

from pwaland.exceptions import EntryValidationError
from pwaland.jobs.pwa_discovery.constants import (
    ENGLISH_TEXT_PATTERN,
    FALLBACK_DESCRIPTION_TEMPLATE,
    PLACEHOLDER_DESCRIPTIONS,
)
from pwaland.jobs.pwa_discovery.models import DirectoryEntry

REQUIRED_ENTRY_FIELDS: tuple[str, ...] = ("title", "link", "icon")


def validate_entry(entry: DirectoryEntry) -> DirectoryEntry:
    """Reject entries with an empty title, link or icon before anything is sent to the store."""
    missing = [field for field in REQUIRED_ENTRY_FIELDS if not getattr(entry, field).strip()]
    if missing:
        raise EntryValidationError(f"Missing required field(s): {', '.join(missing)}")
    return entry


def validate_url(url: Optional[str]) -> str:
    """Reject an empty URL for a check request."""
    if not url or not url.strip():
        raise EntryValidationError("Missing required field(s): url")
    return url.strip()


def is_english(text: Optional[str]) -> bool:
    """Check whether text uses only Latin letters, digits and common punctuation.

    Empty text counts as English.
    """
    if not text or not text.strip():
        return True
    return bool(ENGLISH_TEXT_PATTERN.match(text))


def needs_description_update(description: Optional[str]) -> bool:
    """Select empty, placeholder and non-English descriptions for replacement."""
    if not description or not description.strip():
        return True
    if description.strip().lower() in PLACEHOLDER_DESCRIPTIONS:
        return True
    return not is_english(description)


def generate_description(title: str, fetched_description: Optional[str]) -> str:
    """Prefer the fetched description when it is English, otherwise build a generic sentence."""
    if fetched_description and is_english(fetched_description):
        return fetched_description
    return FALLBACK_DESCRIPTION_TEMPLATE.format(title=title)
