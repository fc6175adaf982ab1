"""PWA classifier strategies"""

from typing import Optional

from pwaland.jobs.pwa_discovery.extractors import Extractor
from pwaland.jobs.pwa_discovery.scrapers import PageFetcher
from pwaland.jobs.pwa_discovery.strategies.base import GatingPolicy, PwaCheckStrategy
from pwaland.jobs.pwa_discovery.strategies.static_heuristic import StaticHeuristicStrategy

STRATEGY_NAMES: tuple[str, ...] = (StaticHeuristicStrategy.name, "rendered")


def create_strategy(
    name: str,
    fetcher: PageFetcher,
    extractor: Optional[Extractor] = None,
    policy: Optional[GatingPolicy] = None,
    timeout_sec: float = 15.0,
) -> PwaCheckStrategy:
    """Build the strategy registered under `name`.

    The rendered strategy is imported on demand since playwright is an optional dependency.
    """
    match name:
        case StaticHeuristicStrategy.name:
            return StaticHeuristicStrategy(fetcher, extractor, policy)
        case "rendered":
            from pwaland.jobs.pwa_discovery.strategies.rendered import RenderedStrategy

            return RenderedStrategy(fetcher, extractor, policy, timeout_sec=timeout_sec)
        case _:
            raise ValueError(
                f"Unknown PWA check strategy: {name}. Expected one of {STRATEGY_NAMES}"
            )


__all__ = [
    "GatingPolicy",
    "PwaCheckStrategy",
    "STRATEGY_NAMES",
    "StaticHeuristicStrategy",
    "create_strategy",
]
