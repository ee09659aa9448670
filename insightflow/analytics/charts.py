"""Chart views over a profiled sheet: column pickers, stack keys and series assembly."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .aggregator import aggregate
from .coercion import distinct_key, is_absent
from .forecast import splice_forecast
from .models import ChartConfiguration, ColumnProfile


@dataclass(frozen=True)
class ChartView:
    """The user-adjustable part of a chart: axis, metric, reducer and stack."""
    x_axis_key: str
    metric_key: str
    aggregation: str = "sum"
    group_by_key: str | None = None

    @classmethod
    def from_config(cls, config: ChartConfiguration) -> "ChartView":
        return cls(
            x_axis_key=config.x_axis_key,
            metric_key=config.data_keys[0],
            aggregation=config.aggregation,
            group_by_key=config.group_by_key or None,
        )

    @property
    def can_forecast(self) -> bool:
        return not self.group_by_key


def numeric_columns(columns: Sequence[ColumnProfile]) -> list[ColumnProfile]:
    return [c for c in columns if c.type == "number"]


def categorical_columns(columns: Sequence[ColumnProfile]) -> list[ColumnProfile]:
    return [c for c in columns if c.type in ("string", "date")]


def stack_keys(rows: Sequence[Mapping[str, Any]], breakdown_key: str, limit: int = 10) -> list[Any]:
    """Distinct breakdown values in first-seen order, capped at ``limit``."""
    seen: dict[tuple[str, Any], Any] = {}
    for row in rows:
        value = row.get(breakdown_key)
        if is_absent(value):
            continue
        seen.setdefault(distinct_key(value), value)
        if len(seen) >= limit:
            break
    return list(seen.values())


def build_chart_series(
    rows: Sequence[Mapping[str, Any]],
    view: ChartView,
    forecast: Sequence[Mapping[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    series = aggregate(rows, view.x_axis_key, view.metric_key, view.aggregation, view.group_by_key)
    if forecast and view.can_forecast:
        return splice_forecast(series, forecast, view.metric_key)
    return series
