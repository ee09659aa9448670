"""Cell helpers shared by the profiler, aggregator and pivot builder.

Every function here is total: malformed input degrades to a documented
fallback instead of raising.
"""
from __future__ import annotations

import datetime as dt
import math
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd
from dateutil import parser as dateparser


def is_absent(value: Any) -> bool:
    """``None`` and float NaN are the absent markers."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_python_scalar(value: Any) -> Any:
    return value.item() if isinstance(value, np.generic) else value


def _numeric_candidate(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        # Digit-group underscores parse in Python but are not numbers in a sheet
        return text if text and "_" not in text else None
    if is_number(value):
        return value
    return None


def to_numeric_series(values: Iterable[Any]) -> pd.Series:
    """Coerce cells to numbers, falling back to 0.

    Booleans map to 1/0, ints and floats pass through, strings are parsed
    after trimming. Empty or unparseable strings, non-finite results and
    any other type all yield 0. A Series keeps its index.
    """
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    numeric = pd.to_numeric(series.astype(object).map(_numeric_candidate), errors="coerce")
    return numeric.where(np.isfinite(numeric.astype("float64")), 0)


def to_number(value: Any) -> int | float:
    """Scalar form of :func:`to_numeric_series`."""
    return to_python_scalar(to_numeric_series([value]).iloc[0])


def rows_to_frame(rows: Sequence[Mapping[str, Any]], columns: Iterable[str]) -> pd.DataFrame:
    """Object-typed frame of ``columns``; cells keep their original Python values.

    Columns missing from every row come back filled with NaN.
    """
    return pd.DataFrame(list(rows), dtype=object).reindex(columns=list(dict.fromkeys(columns)))


def is_numeric_literal(text: str) -> bool:
    stripped = text.strip()
    if not stripped or "_" in stripped:
        return False
    try:
        return math.isfinite(float(stripped))
    except ValueError:
        return False


def stringify(value: Any) -> str:
    """Text identity of a cell, used for bucket keys and axis labels.

    ``1`` and ``1.0`` both become ``"1"`` so numeric and string keys that
    print identically share one bucket.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    return str(value)


def looks_like_date(value: Any) -> bool:
    if isinstance(value, (dt.datetime, dt.date)):
        return True
    if not isinstance(value, str):
        return False
    if len(value) <= 5 or ("-" not in value and "/" not in value):
        return False
    try:
        dateparser.parse(value)
    except (ValueError, OverflowError):
        return False
    return True


def distinct_key(value: Any) -> tuple[str, Any]:
    # bool must not collide with 1/0, and 1 must equal 1.0
    if isinstance(value, bool):
        return ("boolean", value)
    if is_number(value):
        return ("number", value)
    return (type(value).__name__, value)
