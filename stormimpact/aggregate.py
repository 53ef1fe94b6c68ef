"""
Aggregation (group-by / rank / merge)
=====================================

This is the heart of the report. Every summary is recomputed from the full
storm table on each run:

1) summarize -> one row per event type with the summed metric
2) rank      -> stable, descending sort (optional tie-break metric)
3) merge     -> inner join of two summaries on the event type
4) derive    -> total economic damage = property + crop, then re-rank

Two rules matter for reproducing the published numbers:
- Missing metric cells count as zero in sums; an all-missing group sums to 0.
- The merge is an INNER join. Event types present in only one summary are
  dropped from the merged table (the dropped count is logged).
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional
import logging

import pandas as pd

from .models import COLUMNS, StormColumns

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    """A merged summary plus how many keys the inner join dropped."""
    table: pd.DataFrame
    left_only: int = 0
    right_only: int = 0

    @property
    def dropped(self) -> int:
        return self.left_only + self.right_only


# ---------------- Primitives ----------------

def summarize(df: pd.DataFrame, column: str, by: str = COLUMNS.event_type) -> pd.DataFrame:
    """Sum `column` per distinct value of `by`.

    The missing key forms its own group; missing values add nothing.
    """
    return (
        df.groupby(by, dropna=False, sort=True)[column]
        .sum(min_count=0)
        .reset_index()
    )


def rank(summary: pd.DataFrame, by: str, tiebreak: Optional[str] = None) -> pd.DataFrame:
    """Sort descending by `by` (then `tiebreak`); equal rows keep their prior order."""
    keys = [by] if tiebreak is None else [by, tiebreak]
    return summary.sort_values(keys, ascending=False, kind="stable").reset_index(drop=True)


def merge_summaries(left: pd.DataFrame, right: pd.DataFrame, on: str = COLUMNS.event_type) -> MergeResult:
    """Inner-join two single-metric summaries on the event type."""
    left_only = int((~left[on].isin(right[on])).sum())
    right_only = int((~right[on].isin(left[on])).sum())
    merged = left.merge(right, on=on, how="inner", validate="one_to_one")
    if left_only or right_only:
        log.warning(
            "Inner join on %s dropped %d event types (%d only on the left, %d only on the right)",
            on, left_only + right_only, left_only, right_only,
        )
    return MergeResult(table=merged, left_only=left_only, right_only=right_only)


def add_total(summary: pd.DataFrame, left: str, right: str, name: str = COLUMNS.total_damage) -> pd.DataFrame:
    """Add `name` = `left` + `right` row-wise and re-rank by it."""
    out = summary.copy()
    out[name] = out[left] + out[right]
    return rank(out, name)


def percent_of_total(table: pd.DataFrame, column: str) -> pd.Series:
    """Share (0-100) of each row in the sum of `column` over the WHOLE table.

    Callers slice the top-N *after* this, so the denominator still covers the
    event types that are not displayed. A zero total gives 0.0 for every row.
    """
    total = table[column].sum()
    if total == 0:
        return pd.Series(0.0, index=table.index, name=column)
    return table[column] / total * 100.0


# ---------------- Report tables ----------------

def population_impact(df: pd.DataFrame, columns: StormColumns = COLUMNS) -> MergeResult:
    """Fatalities and injuries per event type, ranked by fatalities then injuries."""
    fatalities = rank(summarize(df, columns.fatalities, by=columns.event_type), columns.fatalities)
    injuries = rank(summarize(df, columns.injuries, by=columns.event_type), columns.injuries)
    merged = merge_summaries(fatalities, injuries, on=columns.event_type)
    return replace(merged, table=rank(merged.table, columns.fatalities, tiebreak=columns.injuries))


def economic_impact(df: pd.DataFrame, columns: StormColumns = COLUMNS) -> MergeResult:
    """Property, crop and total damage per event type, ranked by total damage."""
    prop = rank(summarize(df, columns.property_damage, by=columns.event_type), columns.property_damage)
    crop = rank(summarize(df, columns.crop_damage, by=columns.event_type), columns.crop_damage)
    merged = merge_summaries(prop, crop, on=columns.event_type)
    table = add_total(merged.table, columns.property_damage, columns.crop_damage, name=columns.total_damage)
    return replace(merged, table=table)
