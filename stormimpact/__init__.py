"""
stormimpact package
===================

Storm impact report over the NOAA Storm Database (1950-2011).

- The CLI entry point is in `stormimpact/cli.py`.
- The pipeline object (fetch -> load -> aggregate) is in `stormimpact/engine.py`.
- Group-by / rank / merge helpers are in `stormimpact/aggregate.py`.
- Tables, charts and the DOCX report are in `stormimpact/report.py`.
"""

__version__ = '0.1.0'
