"""Tabular profiling and aggregation engine for spreadsheet visualization."""
from .errors import (
    AnalyticsError,
    WorkbookParseError,
    UnsupportedWorkbookError,
    WorkbookNotFoundError,
    InsightGenerationError,
    ChartValidationError,
)
from .models import (
    AnalysisResult,
    ChartConfiguration,
    ColumnProfile,
    Dataset,
    Sheet,
)
from .coercion import is_absent, stringify, to_number
from .reducers import reduce_values
from .profiler import infer_column_type, profile_columns, profile_dataframe, profile_sheet
from .aggregator import aggregate
from .pivot import PivotTable, build_pivot
from .forecast import splice_forecast
from .charts import ChartView, build_chart_series, categorical_columns, numeric_columns, stack_keys
from .validator import filter_valid_charts, validate_chart

__all__ = [
    "AnalyticsError",
    "WorkbookParseError",
    "UnsupportedWorkbookError",
    "WorkbookNotFoundError",
    "InsightGenerationError",
    "ChartValidationError",
    "AnalysisResult",
    "ChartConfiguration",
    "ColumnProfile",
    "Dataset",
    "Sheet",
    "is_absent",
    "stringify",
    "to_number",
    "reduce_values",
    "infer_column_type",
    "profile_columns",
    "profile_dataframe",
    "profile_sheet",
    "aggregate",
    "PivotTable",
    "build_pivot",
    "splice_forecast",
    "ChartView",
    "build_chart_series",
    "categorical_columns",
    "numeric_columns",
    "stack_keys",
    "filter_valid_charts",
    "validate_chart",
]
