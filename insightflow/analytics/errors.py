from __future__ import annotations


class AnalyticsError(Exception):
    """Base error class for the layers around the profiling engine."""


class WorkbookParseError(AnalyticsError):
    """Raised when an uploaded workbook yields no usable sheet."""


class UnsupportedWorkbookError(WorkbookParseError):
    """Raised when the file extension is not a supported spreadsheet type."""


class WorkbookNotFoundError(AnalyticsError):
    """Raised when a workbook id or sheet name is not registered."""


class InsightGenerationError(AnalyticsError):
    """Raised when the LLM analysis cannot be obtained or validated."""


class ChartValidationError(AnalyticsError):
    """Raised when a chart recommendation references unknown sheets or columns."""
