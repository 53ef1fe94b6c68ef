from __future__ import annotations

"""
Storm impact reporter
---------------------
Turns the ranked summary tables into console tables, bar charts and
(optionally) a DOCX report.

Design goals:
- Chart category order follows the rank order of the rows passed in, never
  alphabetical order.
- The percent chart divides by the total over the WHOLE summary table, and
  only then keeps the top-N rows.
- Keep the pipeline usable even if report dependencies are missing (lazy
  imports of matplotlib / python-docx).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import io
import numbers
import os
import tempfile

import pandas as pd

from .aggregate import MergeResult, percent_of_total
from .config import PipelineConfig
from .models import COLUMNS, StormColumns


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "U.S. National Oceanic and Atmospheric Administration (NOAA)"
    location: str = "Asheville, NC, USA"
    access_date_iso: Optional[str] = None
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Bzip2-compressed CSV covering events from 1950 to November 2011."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Health and Economic Impact of Severe Weather Events in the U.S."
    subtitle: str = "NOAA Storm Database, 1950-2011"
    dataset_name: str = "NOAA Storm Database (StormData.csv.bz2)"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # Top-N cutoffs for tables and charts
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)


# -----------------------------
# Helpers
# -----------------------------

def _pyplot():
    try:
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install it with: python -m pip install matplotlib"
        ) from e
    return plt


def _labels(values: pd.Series) -> List[str]:
    """Category labels in row order; the missing event type gets a visible name."""
    return ["(missing)" if pd.isna(v) else str(v) for v in values]


def _year_range(df: pd.DataFrame, columns: StormColumns = COLUMNS) -> Optional[Tuple[int, int]]:
    if columns.begin_date not in df.columns:
        return None
    dates = pd.to_datetime(df[columns.begin_date], errors="coerce").dropna()
    if dates.empty:
        return None
    return int(dates.dt.year.min()), int(dates.dt.year.max())


# -----------------------------
# Tables
# -----------------------------

def format_top(table: pd.DataFrame, n: int, title: Optional[str] = None) -> str:
    """Render the first `n` ranked rows as a plain-text table."""
    top = table.head(n).copy()
    top.index = range(1, len(top) + 1)
    body = top.to_string(float_format=lambda v: f"{v:,.2f}")
    if title:
        return f"{title}\n{'-' * len(title)}\n{body}"
    return body


# -----------------------------
# Charts
# -----------------------------

def plot_population_impact(
    table: pd.DataFrame,
    n: int,
    *,
    log_y: bool = True,
    columns: StormColumns = COLUMNS,
):
    """Grouped bars: fatalities and injuries for the top-n event types."""
    import numpy as np
    plt = _pyplot()

    top = table.head(n)
    x = np.arange(len(top))
    width = 0.4

    fig, ax = plt.subplots(figsize=(11, 6))
    ax.bar(x - width / 2, top[columns.fatalities], width, label="Fatalities", color="C3")
    ax.bar(x + width / 2, top[columns.injuries], width, label="Injuries", color="C0")
    ax.set_xticks(x)
    ax.set_xticklabels(_labels(top[columns.event_type]), rotation=45, ha="right")
    if log_y:
        ax.set_yscale("log")
    ax.set_xlabel("Event type")
    ax.set_ylabel("Number of people (log scale)" if log_y else "Number of people")
    ax.set_title(f"Top {len(top)} event types by fatalities and injuries")
    ax.legend(title="Impact")
    fig.tight_layout()
    return fig


def _single_series(labels: List[str], values: pd.Series, title: str, ylabel: str, color: str):
    import numpy as np
    plt = _pyplot()

    x = np.arange(len(labels))
    fig, ax = plt.subplots(figsize=(11, 6))
    ax.bar(x, values.to_numpy(), color=color)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_xlabel("Event type")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_economic_damage(
    table: pd.DataFrame,
    n: int,
    column: str = COLUMNS.total_damage,
    *,
    columns: StormColumns = COLUMNS,
):
    """Bars of absolute damage for the top-n event types."""
    top = table.head(n)
    return _single_series(
        _labels(top[columns.event_type]),
        top[column],
        f"Top {len(top)} event types by economic damage ({column})",
        "Damage (US$)",
        "C2",
    )


def plot_economic_share(
    table: pd.DataFrame,
    n: int,
    column: str = COLUMNS.total_damage,
    *,
    columns: StormColumns = COLUMNS,
):
    """Bars of each event type's percent of ALL damage, top-n shown."""
    shares = percent_of_total(table, column).head(n)
    top = table.head(n)
    return _single_series(
        _labels(top[columns.event_type]),
        shares,
        f"Top {len(top)} event types by share of total economic damage ({column})",
        "% of total damage (all event types)",
        "C1",
    )


def build_figures(
    population: pd.DataFrame,
    economic: pd.DataFrame,
    pipeline: PipelineConfig,
    columns: StormColumns = COLUMNS,
) -> Dict[str, object]:
    """All report charts keyed by a file-friendly name, in report order."""
    return {
        "population_impact": plot_population_impact(population, pipeline.top_n_health, columns=columns),
        "economic_damage": plot_economic_damage(
            economic, pipeline.top_n_economic_absolute, columns.total_damage, columns=columns),
        "economic_share": plot_economic_share(
            economic, pipeline.top_n_economic_percent, columns.total_damage, columns=columns),
    }


def save_figures(figures: Dict[str, object], out_dir: str, dpi: int = 150) -> List[str]:
    """Write each figure as `<name>.png` in `out_dir` and close it."""
    plt = _pyplot()
    os.makedirs(out_dir, exist_ok=True)
    paths: List[str] = []
    for name, fig in figures.items():
        path = os.path.join(out_dir, f"{name}.png")
        fig.savefig(path, dpi=dpi)
        plt.close(fig)
        paths.append(path)
    return paths


# -----------------------------
# DOCX report
# -----------------------------

def generate_docx_report(
    raw: pd.DataFrame,
    population: MergeResult,
    economic: MergeResult,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    columns: StormColumns = COLUMNS,
) -> str:
    """
    Write a DOCX report with the ranked tables and the three charts.

    This only writes `out_path`; the cached dataset is never touched.
    """
    config = config or ReportConfig()
    cutoffs = config.pipeline

    # Lazy import: only required when a DOCX report is requested.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    figures = build_figures(population.table, economic.table, cutoffs, columns)
    # scratch PNGs; only their bytes outlive this block
    with tempfile.TemporaryDirectory(prefix="stormimpact_report_") as tmpdir:
        chart_images = {}
        for name, path in zip(figures, save_figures(figures, tmpdir, dpi=200)):
            with open(path, "rb") as f:
                chart_images[name] = io.BytesIO(f.read())

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(df: pd.DataFrame, n: int) -> None:
        top = df.head(n)
        t = doc.add_table(rows=1, cols=len(top.columns) + 1)
        t.style = "Table Grid"
        header = t.rows[0].cells
        header[0].text = "Rank"
        for i, c in enumerate(top.columns, start=1):
            header[i].text = str(c)
        for pos, (_, row) in enumerate(top.iterrows(), start=1):
            cells = t.add_row().cells
            cells[0].text = str(pos)
            for i, c in enumerate(top.columns, start=1):
                v = row[c]
                if pd.isna(v):
                    cells[i].text = "(missing)"
                elif isinstance(v, numbers.Real) and not isinstance(v, bool):
                    cells[i].text = f"{v:,.0f}" if float(v).is_integer() else f"{v:,.2f}"
                else:
                    cells[i].text = str(v)

    _center_title(config.title, 20, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    _kv("Total records", f"{len(raw):,}")
    _kv("Distinct event types", f"{raw[columns.event_type].nunique(dropna=False):,}")
    years = _year_range(raw, columns)
    if years is not None:
        _kv("Year range (begin date)", f"{years[0]} to {years[1]}")

    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")
    if cit.file_note:
        doc.add_paragraph(f"File note: {cit.file_note}")
    accessed = f" (accessed {cit.access_date_iso})" if cit.access_date_iso else ""
    doc.add_paragraph(
        f"{cit.institutional_author}{accessed}. "
        f"{cit.database_name}. {cit.location}. {cit.website}."
    )

    doc.add_heading("Columns used (data dictionary)", level=1)
    t = doc.add_table(rows=1, cols=2)
    t.rows[0].cells[0].text = "Column"
    t.rows[0].cells[1].text = "Meaning"
    for k, v in [
        (columns.event_type, "Event type label (grouping key)"),
        (columns.fatalities, "Fatalities"),
        (columns.injuries, "Injuries"),
        (columns.property_damage, "Property damage"),
        (columns.crop_damage, "Crop damage"),
        (columns.total_damage, "Derived: property damage + crop damage"),
    ]:
        row = t.add_row().cells
        row[0].text = k
        row[1].text = v

    # Missing cells are summed as zero, so show how many there are.
    doc.add_heading("Data completeness", level=1)
    t2 = doc.add_table(rows=1, cols=3)
    t2.rows[0].cells[0].text = "Column"
    t2.rows[0].cells[1].text = "Available"
    t2.rows[0].cells[2].text = "Missing"
    for c in columns.metrics():
        missing = int(raw[c].isna().sum())
        row = t2.add_row().cells
        row[0].text = c
        row[1].text = f"{len(raw) - missing:,}"
        row[2].text = f"{missing:,}"

    doc.add_heading("Impact on population health", level=1)
    doc.add_paragraph(
        f"Top {cutoffs.top_n_health} event types by fatalities (ties broken by injuries)."
    )
    _table(population.table, cutoffs.top_n_health)
    doc.add_paragraph("")
    doc.add_picture(chart_images["population_impact"], width=Inches(6.5))

    doc.add_heading("Economic impact", level=1)
    doc.add_paragraph(
        f"Top {cutoffs.top_n_economic_absolute} event types by total damage "
        f"({columns.property_damage} + {columns.crop_damage})."
    )
    _table(economic.table, cutoffs.top_n_economic_absolute)
    doc.add_paragraph("")
    doc.add_picture(chart_images["economic_damage"], width=Inches(6.5))
    doc.add_paragraph(
        f"Share of total damage for the top {cutoffs.top_n_economic_percent} event types. "
        "Percentages are relative to the damage of all event types."
    )
    doc.add_picture(chart_images["economic_share"], width=Inches(6.5))

    doc.add_heading("Notes", level=1)
    doc.add_paragraph(
        "Summaries are merged with an inner join on the event type, so event types "
        "missing from one of the two summaries do not appear in the merged tables."
    )
    doc.add_paragraph(
        f"Dropped on merge: {population.dropped} (population tables), "
        f"{economic.dropped} (economic tables)."
    )

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as pkg_version
    from datetime import datetime as _dt
    generated_at = _dt.now().isoformat(timespec="seconds")

    doc.add_paragraph(f"stormimpact version: {pkg_version}")
    doc.add_paragraph(f"Report generated at: {generated_at}")
    doc.add_paragraph(f"Records: {len(raw):,}")
    doc.add_paragraph(f"Source URL: {cutoffs.url}")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
