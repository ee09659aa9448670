from __future__ import annotations

import logging
from typing import Any, Hashable, Sequence

import pandas as pd

from .coercion import to_python_scalar

logger = logging.getLogger(__name__)

# Reducer name -> pandas aggregation. Inputs are already coerced, so "count" equals bucket size.
REDUCER_AGGREGATIONS = {"sum": "sum", "avg": "mean", "min": "min", "max": "max", "count": "count"}


def reduce_values(values: Sequence[int | float] | pd.Series, reducer: str) -> int | float | None:
    """Collapse a bucket's numeric values with one of sum/avg/min/max/count.

    Returns ``None`` for an empty bucket so callers can tell "no data" from
    zero. Unknown reducer names reduce to 0.
    """
    if len(values) == 0:
        return None
    how = REDUCER_AGGREGATIONS.get(reducer)
    if how is None:
        logger.debug("Unknown reducer %r, reducing to 0", reducer)
        return 0
    return to_python_scalar(pd.Series(values).agg(how))


def reduce_groups(values: pd.Series, by: pd.Series | list[pd.Series], reducer: str) -> dict[Hashable, Any]:
    """Reduce ``values`` per group of ``by``; groups with no rows are absent from the result."""
    grouped = values.groupby(by, sort=False)
    how = REDUCER_AGGREGATIONS.get(reducer)
    if how is None:
        logger.debug("Unknown reducer %r, reducing to 0", reducer)
        return {key: 0 for key in grouped.size().index}
    return {key: to_python_scalar(v) for key, v in grouped.agg(how).items()}
