"""
Dataset loader (compressed CSV -> DataFrame)
============================================

This module reads the storm events CSV (bzip2/gzip compressed, header row) into
a pandas DataFrame.

Key ideas:
- Only empty fields become missing (NaN); strings such as "NA" stay as text.
- We try multiple possible column names because exports may vary, then rename
  the consumed columns to the canonical names in `models.StormColumns`.
- Unused columns are kept as they are; they must not break parsing.
- `DatasetCache` keeps the loaded table resident so it is parsed only once.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union
import logging
import re

import pandas as pd

from .models import COLUMNS, StormColumns

log = logging.getLogger(__name__)

# StormColumns field -> accepted header variants (the configured name is tried first)
_CANDIDATES: Dict[str, tuple] = {
    "event_type": ("EVTYPE", "EVENT_TYPE", "Event Type"),
    "fatalities": ("FATALITIES", "DEATHS", "DEATHS_DIRECT"),
    "injuries": ("INJURIES", "INJURIES_DIRECT"),
    "property_damage": ("PROPDMG", "PROPERTY_DAMAGE", "Property Damage"),
    "crop_damage": ("CROPDMG", "CROP_DAMAGE", "Crop Damage"),
}

_OPTIONAL: Dict[str, tuple] = {
    "begin_date": ("BGN_DATE", "BEGIN_DATE", "Begin Date"),
}


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, *names: str) -> str:
    """Find the first matching column (exact name first, then normalized)."""
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")


def _optional_col(df: pd.DataFrame, *names: str) -> Optional[str]:
    try:
        return _col(df, *names)
    except KeyError:
        return None


def load_storm_data(path: Union[str, Path], columns: StormColumns = COLUMNS) -> pd.DataFrame:
    """Load the storm table and normalize the consumed columns.

    Raises KeyError if a required column is missing and ValueError if a
    metric column holds non-numeric text.
    """
    df = pd.read_csv(path, keep_default_na=False, na_values=[""], low_memory=False)
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)

    renames = {}
    for attr, names in _CANDIDATES.items():
        canonical = getattr(columns, attr)
        renames[_col(df, canonical, *names)] = canonical
    for attr, names in _OPTIONAL.items():
        canonical = getattr(columns, attr)
        found = _optional_col(df, canonical, *names)
        if found is not None:
            renames[found] = canonical
    df.rename(columns={src: dst for src, dst in renames.items() if src != dst}, inplace=True)

    for c in columns.metrics():
        df[c] = pd.to_numeric(df[c])

    log.info("Loaded %d rows x %d columns from %s", len(df), len(df.columns), path)
    return df


@dataclass
class DatasetCache:
    """Holds one loaded table so repeated requests skip parsing."""
    table: Optional[pd.DataFrame] = None
    path: Optional[Path] = None
    columns: StormColumns = COLUMNS

    def get(self, path: Union[str, Path]) -> pd.DataFrame:
        path = Path(path)
        if self.table is not None and self.path == path:
            log.debug("Table for %s already resident, skipping load", path)
            return self.table
        self.table = load_storm_data(path, self.columns)
        self.path = path
        return self.table
