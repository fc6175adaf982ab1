"""History of discovery runs, kept as a JSON array of run summaries"""

import json
import logging
from pathlib import Path
from typing import Any

from pwaland.jobs.pwa_discovery.io.directory_file import write_json_atomic
from pwaland.jobs.pwa_discovery.models import DiscoverSummary

logger = logging.getLogger(__name__)


class DiscoverHistory:
    """Append-only log of discovery summaries. Only PWA-positive results are kept."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[dict[str, Any]]:
        """Return the saved summaries. Unreadable or malformed content reads as no history."""
        try:
            with open(self.path, encoding="utf-8") as f:
                existing = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable discovery history {self.path}: {e}")
            return []
        return existing if isinstance(existing, list) else []

    def append(self, summary: DiscoverSummary) -> None:
        """Add the pruned summary to the history file."""
        history = self.load()
        history.append(summary.pruned().model_dump(mode="json"))
        write_json_atomic(self.path, history)
        logger.debug(f"Saved discovery summary to {self.path}")
