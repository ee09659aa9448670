"""
Core type definitions and constants.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal

ColumnType = Literal["string", "number", "date", "boolean"]
AggregationType = Literal["sum", "avg", "count", "min", "max"]
ContextType = Literal["overview", "sheet"]
SSEEventType = Literal["meta", "token", "done", "error"]

AGGREGATION_TYPES: tuple[str, ...] = ("sum", "avg", "count", "min", "max")


class ChartType(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"
    COMPOSED = "composed"


ABSENT_LABEL = "N/A"
TOTAL_LABEL = "Total"
UNKNOWN_LABEL = "Unknown"

COUNT_FIELD = "_count"
FORECAST_SUFFIX = "_forecast"
FORECAST_FLAG = "_is_forecast"

SAMPLE_VALUE_LIMIT = 5


def forecast_key(metric_key: str) -> str:
    return f"{metric_key}{FORECAST_SUFFIX}"


class ErrorCode:
    LLM_ERROR = "LLM_ERROR"
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"
    STREAM_ERROR = "STREAM_ERROR"
    NOT_FOUND = "NOT_FOUND"
    SHEET_NOT_FOUND = "SHEET_NOT_FOUND"
    INVALID_FILENAME = "INVALID_FILENAME"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    PARSE_ERROR = "PARSE_ERROR"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
