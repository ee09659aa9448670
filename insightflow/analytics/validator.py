"""Validate LLM chart recommendations against the profiled sheets."""
from __future__ import annotations

import logging
from typing import Sequence

from .errors import ChartValidationError
from .models import ChartConfiguration, Sheet

logger = logging.getLogger(__name__)


def validate_chart(config: ChartConfiguration, sheets: Sequence[Sheet]) -> None:
    """Check that the chart only references known sheets and profiled columns.

    Raises ChartValidationError on any violation.
    """
    sheet = next((s for s in sheets if s.sheet_name == config.sheet_name), None)
    if sheet is None:
        raise ChartValidationError(f"Chart '{config.id}' references unknown sheet '{config.sheet_name}'")

    known = {c.name for c in sheet.columns}
    if config.x_axis_key not in known:
        raise ChartValidationError(
            f"Chart '{config.id}' x_axis_key '{config.x_axis_key}' not found in sheet '{sheet.sheet_name}'"
        )
    for key in config.data_keys:
        if key not in known:
            raise ChartValidationError(
                f"Chart '{config.id}' data key '{key}' not found in sheet '{sheet.sheet_name}'"
            )
    if config.group_by_key and config.group_by_key not in known:
        raise ChartValidationError(
            f"Chart '{config.id}' group_by_key '{config.group_by_key}' not found in sheet '{sheet.sheet_name}'"
        )


def filter_valid_charts(charts: Sequence[ChartConfiguration], sheets: Sequence[Sheet]) -> list[ChartConfiguration]:
    """Drop recommendations that fail validation, logging each one."""
    valid = []
    for chart in charts:
        try:
            validate_chart(chart, sheets)
        except ChartValidationError as exc:
            logger.warning("Dropping chart recommendation: %s", exc)
            continue
        valid.append(chart)
    return valid
