"""
stormimpact command line interface
==================================

Runs the whole report in one go:

    python -m stormimpact.cli
    python -m stormimpact.cli --chart-dir charts --docx report.docx

Steps: download the dataset (skipped if cached), load it, print the ranked
tables, and optionally write the charts (PNG) and a DOCX report.
Any error aborts the run with a non-zero exit code.
"""

from __future__ import annotations
import argparse
import logging
import os
from typing import List, Optional

from .aggregate import percent_of_total
from .config import DEFAULT_CACHE_PATH, DEFAULT_URL, PipelineConfig
from .engine import ImpactEngine
from .report import (
    DatasetCitation,
    ReportConfig,
    build_figures,
    format_top,
    generate_docx_report,
    save_figures,
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stormimpact",
        description="Rank U.S. storm event types by health and economic impact (NOAA, 1950-2011).",
    )
    ap.add_argument("--url", default=DEFAULT_URL, help="Remote location of the compressed CSV")
    ap.add_argument("--cache", default=str(DEFAULT_CACHE_PATH), help="Local cache path for the download")
    ap.add_argument("--top-health", type=int, default=15, help="Rows in the fatalities/injuries table and chart")
    ap.add_argument("--top-economic", type=int, default=15, help="Rows in the absolute damage table and chart")
    ap.add_argument("--top-share", type=int, default=30, help="Rows in the percent-of-total damage chart")
    ap.add_argument("--chart-dir", help="Write the charts as PNG files into this directory")
    ap.add_argument("--docx", help="Write a DOCX report to this path")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log progress (INFO level)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the stormimpact CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = PipelineConfig(
        url=args.url,
        cache_path=args.cache,
        top_n_health=args.top_health,
        top_n_economic_absolute=args.top_economic,
        top_n_economic_percent=args.top_share,
    )
    engine = ImpactEngine(config=config)

    print("Loading dataset...")
    tables = engine.run()
    print(f"Loaded {len(tables.raw):,} events.")
    print()

    cols = engine.columns
    share = tables.economic.table[[cols.event_type, cols.total_damage]].copy()
    share["PCT_OF_TOTAL"] = percent_of_total(tables.economic.table, cols.total_damage)

    print(format_top(
        tables.population.table, config.top_n_health,
        f"Top {config.top_n_health} event types by fatalities (then injuries)",
    ))
    print()
    print(format_top(
        tables.economic.table, config.top_n_economic_absolute,
        f"Top {config.top_n_economic_absolute} event types by total economic damage",
    ))
    print()
    print(format_top(
        share, config.top_n_economic_percent,
        f"Top {config.top_n_economic_percent} event types by share of total economic damage (%)",
    ))

    if args.chart_dir:
        figures = build_figures(tables.population.table, tables.economic.table, config, cols)
        for path in save_figures(figures, args.chart_dir):
            print(f"Chart written to {path}")

    if args.docx:
        cfg = ReportConfig(
            citation=DatasetCitation(file_name=os.path.basename(str(config.cache_path))),
            pipeline=config,
        )
        generate_docx_report(
            tables.raw, tables.population, tables.economic, args.docx, config=cfg, columns=cols,
        )
        print(f"Report written to {args.docx}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
