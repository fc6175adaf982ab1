# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Unit tests for the validators.py module."""

import pytest

from pwaland.exceptions import EntryValidationError
from pwaland.jobs.pwa_discovery.models import DirectoryEntry
from pwaland.jobs.pwa_discovery.validators import (
    generate_description,
    is_english,
    needs_description_update,
    validate_entry,
    validate_url,
)


def test_validate_entry_accepts_complete_entry() -> None:
    """Test that a complete entry is returned unchanged."""
    entry = DirectoryEntry(title="App", link="https://app.example.com", icon="https://i.png")

    assert validate_entry(entry) is entry


def test_validate_entry_lists_every_missing_field() -> None:
    """Test that all empty required fields are named."""
    entry = DirectoryEntry(title="", link="https://app.example.com", icon=" ")

    with pytest.raises(EntryValidationError) as excinfo:
        validate_entry(entry)

    assert str(excinfo.value) == "Missing required field(s): title, icon"


def test_entry_validation_error_is_a_value_error() -> None:
    """Test that callers catching ValueError also see validation failures."""
    assert issubclass(EntryValidationError, ValueError)


@pytest.mark.parametrize("url", [None, "", "   "])
def test_validate_url_rejects_empty(url: str | None) -> None:
    """Test that a check request needs a URL."""
    with pytest.raises(EntryValidationError, match="url"):
        validate_url(url)


def test_validate_url_strips() -> None:
    """Test that surrounding whitespace is removed."""
    assert validate_url("  example.com ") == "example.com"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("A fast, offline-first notes app!", True),
        ("Café & crème: 100% naïve", True),
        ("", True),
        (None, True),
        ("日本語の説明", False),
        ("Приложение для заметок", False),
        ("Notes app 📝", False),
    ],
)
def test_is_english(text: str | None, expected: bool) -> None:
    """Test the Latin text check."""
    assert is_english(text) is expected


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        (None, True),
        ("   ", True),
        ("Hello", True),
        (" hello ", True),
        ("Hello world, this is an app", False),
        ("这是一个应用", True),
        ("Track your runs offline", False),
    ],
)
def test_needs_description_update(description: str | None, expected: bool) -> None:
    """Test which descriptions are selected for replacement."""
    assert needs_description_update(description) is expected


def test_generate_description_prefers_fetched_english() -> None:
    """Test that an English page description is used as is."""
    assert generate_description("Notes", "Take notes anywhere") == "Take notes anywhere"


@pytest.mark.parametrize("fetched", [None, "", "メモを取る"])
def test_generate_description_fallback(fetched: str | None) -> None:
    """Test the generic sentence used when the page has no usable description."""
    assert generate_description("Notes", fetched) == (
        "Notes is a powerful web application offering excellent functionality and user "
        "experience."
    )
