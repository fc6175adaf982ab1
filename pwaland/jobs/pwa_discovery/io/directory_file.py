"""Local JSON file holding the directory entries"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from pwaland.exceptions import CandidateFileError
from pwaland.jobs.pwa_discovery.models import DirectoryEntry

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, data: object) -> None:
    """Write JSON to a temporary file next to `path`, then replace `path` with it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class DirectoryFile:
    """The directory as a JSON array of entries."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load_raw(self) -> list[Any]:
        """Read the JSON array without validating its items. A missing file reads as empty.

        Raises:
            CandidateFileError: when the file cannot be read or is not a JSON array.
        """
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise CandidateFileError(f"Cannot read directory file {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise CandidateFileError(f"Directory file {self.path} is not a JSON array")
        return raw

    def load(self) -> list[DirectoryEntry]:
        """Read every entry.

        Raises:
            CandidateFileError: when the file cannot be read or holds an invalid entry.
        """
        raw = self.load_raw()
        try:
            return [DirectoryEntry.model_validate(item) for item in raw]
        except ValidationError as e:
            raise CandidateFileError(f"Directory file {self.path} has invalid entries: {e}") from e

    def write(self, entries: Iterable[DirectoryEntry]) -> None:
        """Replace the file contents atomically."""
        write_json_atomic(
            self.path, [entry.model_dump(exclude_none=True) for entry in entries]
        )

    def merge(self, new_entries: Iterable[DirectoryEntry]) -> list[DirectoryEntry]:
        """Append new entries to the existing ones, write the result and return it."""
        merged = self.load()
        added = list(new_entries)
        merged.extend(added)
        self.write(merged)
        logger.info(f"Wrote {len(merged)} entries to {self.path} ({len(added)} new)")
        return merged
