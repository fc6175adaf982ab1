"""Run modes for the PWA discovery job"""

from pwaland.jobs.pwa_discovery.modes.crawl_mode import run_crawl_mode
from pwaland.jobs.pwa_discovery.modes.descriptions_mode import run_descriptions_mode
from pwaland.jobs.pwa_discovery.modes.discover_mode import run_discover_mode
from pwaland.jobs.pwa_discovery.modes.duplicates_mode import run_duplicates_mode
from pwaland.jobs.pwa_discovery.modes.import_mode import run_import_mode
from pwaland.jobs.pwa_discovery.modes.single_mode import run_add_mode, run_check_mode

__all__ = [
    "run_add_mode",
    "run_check_mode",
    "run_crawl_mode",
    "run_descriptions_mode",
    "run_discover_mode",
    "run_duplicates_mode",
    "run_import_mode",
]
