"""InsightFlow: schema-free spreadsheet profiling, aggregation and forecasting."""
from .analytics import (
    aggregate,
    build_pivot,
    profile_columns,
    profile_sheet,
    splice_forecast,
)
from .workbook import load_workbook, parse_workbook

__all__ = [
    "aggregate",
    "build_pivot",
    "profile_columns",
    "profile_sheet",
    "splice_forecast",
    "load_workbook",
    "parse_workbook",
]
__version__ = "1.0.0"
