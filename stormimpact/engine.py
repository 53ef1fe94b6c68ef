"""
Pipeline engine
===============

ImpactEngine runs the report as one linear pass:

1) fetch     -> make sure the compressed CSV is cached locally
2) load      -> parse it into a DataFrame (kept resident in a DatasetCache)
3) aggregate -> population and economic impact tables, ranked
4) report    -> done by the caller with `report.py` (tables, charts, DOCX)

There is no background work and no shared state besides the cached table, so a
run is deterministic given the same cached input file.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from .aggregate import MergeResult, economic_impact, population_impact
from .config import PipelineConfig
from .fetcher import ensure_download
from .loader import DatasetCache
from .models import COLUMNS, StormColumns

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImpactTables:
    """Everything the reporter needs from one run."""
    raw: pd.DataFrame
    population: MergeResult
    economic: MergeResult


@dataclass
class ImpactEngine:
    """Fetch, load and aggregate the storm table.

    The engine stores:
    - config: source URL, cache path, top-N cutoffs
    - cache: the loaded table (parsed at most once per path)
    """
    config: PipelineConfig = field(default_factory=PipelineConfig)
    cache: DatasetCache = field(default_factory=DatasetCache)
    columns: StormColumns = COLUMNS

    def __post_init__(self) -> None:
        if self.cache.columns != self.columns:
            self.cache = DatasetCache(columns=self.columns)

    def fetch(self) -> Path:
        return ensure_download(self.config.url, self.config.cache_path)

    def load(self) -> pd.DataFrame:
        return self.cache.get(self.fetch())

    def run(self, df: Optional[pd.DataFrame] = None) -> ImpactTables:
        """Compute both impact tables from `df` (default: the cached dataset)."""
        if df is None:
            df = self.load()
        population = population_impact(df, self.columns)
        economic = economic_impact(df, self.columns)
        log.info(
            "Aggregated %d rows into %d population and %d economic event types",
            len(df), len(population.table), len(economic.table),
        )
        return ImpactTables(raw=df, population=population, economic=economic)
