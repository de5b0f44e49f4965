"""Writers module for exporting records and chart data."""

from market_atlas.writers.base import BaseWriter
from market_atlas.writers.chart_writer import ChartWriter
from market_atlas.writers.record_writer import RecordWriter

__all__ = ["BaseWriter", "ChartWriter", "RecordWriter"]
