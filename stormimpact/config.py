"""
Pipeline configuration
======================

The report needs only a handful of knobs: where the data lives, where to cache
it, and how many event types each chart shows. They are kept together in one
dataclass so the CLI can override any of them.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

DEFAULT_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
DEFAULT_CACHE_PATH = Path("data") / "StormData.csv.bz2"


@dataclass
class PipelineConfig:
    """Source location, local cache path and per-chart top-N cutoffs."""
    url: str = DEFAULT_URL
    cache_path: Path = DEFAULT_CACHE_PATH

    # Fatalities/injuries grouped chart (and table)
    top_n_health: int = 15
    # Absolute economic damage chart (and table)
    top_n_economic_absolute: int = 15
    # Percent-of-total economic damage chart
    top_n_economic_percent: int = 30

    def __post_init__(self) -> None:
        self.cache_path = Path(self.cache_path)
        for name in ("top_n_health", "top_n_economic_absolute", "top_n_economic_percent"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
