# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Unit tests for the file based crawl workflow."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from pwaland.exceptions import CandidateFileError
from pwaland.jobs.pwa_discovery.io import DirectoryFile
from pwaland.jobs.pwa_discovery.models import (
    CheckResult,
    DirectoryEntry,
    ItemStatus,
    ManifestData,
    SkipReason,
)
from pwaland.jobs.pwa_discovery.modes import run_crawl_mode
from pwaland.jobs.pwa_discovery.modes.crawl_mode import check_candidate, load_candidates
from pwaland.jobs.pwa_discovery.processing import create_runner


class TestLoadCandidates:
    """Tests for load_candidates."""

    def test_lines(self, tmp_path: Path) -> None:
        """Test that comments and blank lines are ignored."""
        path = tmp_path / "sources.txt"
        path.write_text(
            "# curated\nhttps://a.app\n\n  b.app  \n# https://skipped.app\n", encoding="utf-8"
        )

        assert load_candidates(path) == ["https://a.app", "b.app"]

    def test_json_array(self, tmp_path: Path) -> None:
        """Test a JSON array of URLs."""
        path = tmp_path / "sources.json"
        path.write_text(json.dumps(["https://a.app", " ", "b.app"]), encoding="utf-8")

        assert load_candidates(path) == ["https://a.app", "b.app"]

    @pytest.mark.parametrize(
        ("content", "message"),
        [("[not json", "is not valid JSON"), ('["a.app", 3]', "must be a JSON array of URLs")],
    )
    def test_invalid_json(self, tmp_path: Path, content: str, message: str) -> None:
        """Test that malformed JSON sources raise CandidateFileError."""
        path = tmp_path / "sources.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(CandidateFileError, match=message):
            load_candidates(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing sources file raises CandidateFileError."""
        with pytest.raises(CandidateFileError, match="Cannot read sources file"):
            load_candidates(tmp_path / "missing.txt")


class TestCheckCandidate:
    """Tests for check_candidate."""

    @pytest.mark.asyncio
    async def test_accepts_manifest_and_icons(
        self, make_strategy: Callable[..., Any], make_pwa_response: Callable[..., Any]
    ) -> None:
        """Test that a site with manifest and icons is accepted without a service worker."""
        response = make_pwa_response("a.app", title="Alpha", icon="https://a.app/i.png")
        response.is_pwa = False
        response.checks.service_worker = CheckResult(passed=False)
        response.checks.manifest = CheckResult(
            passed=True, data=ManifestData(name="Alpha", short_name="A")
        )

        outcome = await check_candidate("a.app", make_strategy({"a.app": response}))

        assert outcome.status == ItemStatus.ADDED
        assert outcome.result == DirectoryEntry(
            title="Alpha",
            link="https://a.app",
            icon="https://a.app/i.png",
            short_name="A",
            description="About Alpha",
        )

    @pytest.mark.asyncio
    async def test_rejects_without_manifest(self, make_strategy: Callable[..., Any]) -> None:
        """Test that a site failing the manifest check is only checked."""
        outcome = await check_candidate("plain.app", make_strategy({}))

        assert outcome.status == ItemStatus.CHECKED

    @pytest.mark.asyncio
    async def test_dry_run(
        self, make_strategy: Callable[..., Any], make_pwa_response: Callable[..., Any]
    ) -> None:
        """Test that a dry run keeps the entry but reports a skip."""
        strategy = make_strategy({"a.app": make_pwa_response("a.app")})

        outcome = await check_candidate("a.app", strategy, dry_run=True)

        assert outcome.status == ItemStatus.SKIPPED
        assert outcome.reason == SkipReason.DRY_RUN
        assert outcome.result.link == "https://a.app"


class TestRunCrawlMode:
    """Tests for run_crawl_mode."""

    @pytest.fixture(name="sources_file")
    def fixture_sources_file(self, tmp_path: Path) -> Path:
        """Return a sources file with known, repeated, plain and mirrored candidates."""
        path = tmp_path / "sources.txt"
        path.write_text(
            "\n".join(
                [
                    "https://www.known.app",
                    "new.app",
                    "https://new.app/start",
                    "plain.app",
                    "mirror-one.dev",
                    "mirror-two.dev",
                ]
            ),
            encoding="utf-8",
        )
        return path

    @pytest.fixture(name="strategy")
    def fixture_strategy(
        self, make_strategy: Callable[..., Any], make_pwa_response: Callable[..., Any]
    ) -> Any:
        """Return a strategy where both mirrors resolve to the same app."""
        mirror = make_pwa_response("https://shared.app", title="Shared")
        return make_strategy(
            {
                "new.app": make_pwa_response("new.app", title="New"),
                "mirror-one.dev": mirror,
                "mirror-two.dev": mirror,
            }
        )

    @pytest.mark.asyncio
    async def test_extends_directory_file(
        self, tmp_path: Path, sources_file: Path, strategy: Any
    ) -> None:
        """Test that only new hostnames are checked and accepted sites are deduplicated."""
        directory = DirectoryFile(tmp_path / "pwa.json")
        directory.write(
            [DirectoryEntry(title="Known", link="https://known.app", icon="https://known.app/i")]
        )

        summary = await run_crawl_mode(
            strategy, create_runner("pool", 2), directory, sources_file
        )

        assert sorted(strategy.checked) == [
            "mirror-one.dev",
            "mirror-two.dev",
            "new.app",
            "plain.app",
        ]
        assert (summary.total, summary.added, summary.skipped) == (4, 2, 1)
        assert summary.skip_reasons == {"duplicate": 1}
        assert [entry.title for entry in directory.load()] == ["Known", "New", "Shared"]

    @pytest.mark.asyncio
    async def test_dry_run_leaves_file(
        self, tmp_path: Path, sources_file: Path, strategy: Any
    ) -> None:
        """Test that a dry run does not create or change the directory file."""
        directory = DirectoryFile(tmp_path / "pwa.json")

        summary = await run_crawl_mode(
            strategy, create_runner("pool", 2), directory, sources_file, dry_run=True
        )

        assert summary.added == 0
        assert summary.skip_reasons == {"dry_run": 3}
        assert not directory.path.exists()
