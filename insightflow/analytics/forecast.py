"""Splice a forecast tail onto a historical series as one continuous line."""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..domain.types import FORECAST_FLAG, forecast_key


def splice_forecast(
    historical: Sequence[Mapping[str, Any]],
    forecast: Sequence[Mapping[str, Any]] | None,
    metric_key: str,
) -> list[dict[str, Any]]:
    """Merge ``forecast`` after ``historical`` with two value channels.

    Historical points get ``<metric>_forecast = None`` except the last one,
    which repeats its own metric there so both lines share a junction point.
    Forecast points null the historical metric and are flagged
    ``_is_forecast``. An empty forecast returns the history untouched.
    """
    if not forecast:
        return [dict(point) for point in historical]

    key = forecast_key(metric_key)
    combined = [{**point, key: None} for point in historical]
    if combined:
        combined[-1][key] = combined[-1].get(metric_key)

    for point in forecast:
        combined.append({
            **point,
            metric_key: None,
            key: point.get(metric_key),
            FORECAST_FLAG: True,
        })
    return combined
