"""Infer a type profile for every column of a sheet without a declared schema."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import pandas as pd

from ..domain.types import SAMPLE_VALUE_LIMIT, ColumnType
from .coercion import distinct_key, is_absent, is_number, is_numeric_literal, looks_like_date, to_numeric_series, to_python_scalar
from .models import ColumnProfile, Sheet

logger = logging.getLogger(__name__)


def infer_column_type(sample: Any) -> ColumnType:
    """Classify a column from its first non-absent value.

    Only one sample is inspected; later values never change the result.
    A date-shaped string that is itself a numeric literal counts as a number.
    """
    if isinstance(sample, bool):
        return "boolean"
    if is_number(sample):
        return "number"
    if looks_like_date(sample):
        if isinstance(sample, str) and is_numeric_literal(sample):
            return "number"
        return "date"
    return "string"


def profile_column(name: str, rows: Sequence[Mapping[str, Any]]) -> ColumnProfile:
    values = [row.get(name) for row in rows]
    values = [v for v in values if not is_absent(v)]
    if not values:
        return ColumnProfile(name=name, type="string", sample_values=[], distinct_count=0)

    distinct: dict[tuple[str, Any], Any] = {}
    for value in values:
        distinct.setdefault(distinct_key(value), value)
    column_type = infer_column_type(values[0])

    min_value: int | float | None = None
    max_value: int | float | None = None
    if column_type == "number":
        numeric = to_numeric_series(values)
        min_value = to_python_scalar(numeric.min())
        max_value = to_python_scalar(numeric.max())

    return ColumnProfile(
        name=name,
        type=column_type,
        sample_values=list(distinct.values())[:SAMPLE_VALUE_LIMIT],
        distinct_count=len(distinct),
        min_value=min_value,
        max_value=max_value,
    )


def profile_columns(rows: Sequence[Mapping[str, Any]]) -> list[ColumnProfile]:
    """Profile every column present in the first row; later rows add no columns."""
    if not rows:
        return []
    return [profile_column(str(name), rows) for name in rows[0].keys()]


def profile_sheet(sheet_name: str, rows: Sequence[Mapping[str, Any]]) -> Sheet:
    columns = profile_columns(rows)
    logger.debug("Profiled sheet %s: %d row(s), %d column(s)", sheet_name, len(rows), len(columns))
    return Sheet(sheet_name=sheet_name, rows=[dict(r) for r in rows], columns=columns, row_count=len(rows))


def profile_dataframe(df: pd.DataFrame) -> list[ColumnProfile]:
    """Profile a pandas DataFrame using the same cell normalization as ingestion."""
    from ..workbook import records_from_dataframe

    return profile_columns(records_from_dataframe(df))
