"""Domain layer for insightflow."""
from .types import (
    ABSENT_LABEL,
    AGGREGATION_TYPES,
    COUNT_FIELD,
    FORECAST_FLAG,
    FORECAST_SUFFIX,
    SAMPLE_VALUE_LIMIT,
    TOTAL_LABEL,
    UNKNOWN_LABEL,
    AggregationType,
    ChartType,
    ColumnType,
    ContextType,
    ErrorCode,
    SSEEventType,
    forecast_key,
)

__all__ = [
    "ABSENT_LABEL",
    "AGGREGATION_TYPES",
    "COUNT_FIELD",
    "FORECAST_FLAG",
    "FORECAST_SUFFIX",
    "SAMPLE_VALUE_LIMIT",
    "TOTAL_LABEL",
    "UNKNOWN_LABEL",
    "AggregationType",
    "ChartType",
    "ColumnType",
    "ContextType",
    "ErrorCode",
    "SSEEventType",
    "forecast_key",
]
