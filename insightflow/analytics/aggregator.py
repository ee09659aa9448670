"""Group rows by one key, optionally break down by a second, and reduce a metric."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..domain.types import COUNT_FIELD, UNKNOWN_LABEL
from .coercion import is_absent, is_number, rows_to_frame, stringify, to_numeric_series, to_python_scalar
from .reducers import reduce_groups

logger = logging.getLogger(__name__)


def _sort_key(value: Any) -> tuple[int, float, str]:
    if is_number(value):
        return (0, float(value), "")
    return (1, 0.0, stringify(value))


def _channel(value: Any) -> str:
    return UNKNOWN_LABEL if is_absent(value) or value == "" else stringify(value)


def aggregate(
    rows: Sequence[Mapping[str, Any]],
    group_key: str,
    metric_key: str,
    reducer: str,
    breakdown_key: str | None = None,
) -> list[dict[str, Any]]:
    """Bucket rows by ``group_key`` and reduce ``metric_key`` per bucket.

    Rows with an absent group value are dropped. Buckets are keyed by the
    stringified group value, so ``1`` and ``"1"`` share a bucket; the point
    keeps the first-seen original value. Each point carries its bucket size
    under ``_count``.

    With a ``breakdown_key`` the point gets one summed field per breakdown
    value (absent values go under ``"Unknown"``) and the reduced metric is
    not written. A breakdown value named like the group key or ``_count``
    never replaces those fields. Points are ordered numbers first, then by
    text, stable on ties.
    """
    frame = rows_to_frame(rows, [group_key, metric_key, breakdown_key] if breakdown_key else [group_key, metric_key])
    absent = frame[group_key].map(is_absent).astype(bool)
    if absent.any():
        logger.debug("Dropped %d row(s) with absent '%s'", int(absent.sum()), group_key)
    frame = frame[~absent]
    if frame.empty:
        return []

    keys = frame[group_key].map(stringify).rename("_group")
    values = to_numeric_series(frame[metric_key])
    first_seen = ~keys.duplicated()
    originals = dict(zip(keys[first_seen], frame.loc[first_seen, group_key]))
    counts = values.groupby(keys, sort=False).size()

    channels: dict[str, dict[str, Any]] = {}
    reduced: dict[Any, Any] = {}
    if breakdown_key:
        labels = frame[breakdown_key].map(_channel).rename("_channel")
        for (key, label), total in values.groupby([keys, labels], sort=False).sum().items():
            channels.setdefault(key, {})[label] = to_python_scalar(total)
    else:
        reduced = reduce_groups(values, keys, reducer)

    points: list[dict[str, Any]] = []
    for key, original in originals.items():
        point: dict[str, Any] = dict(channels.get(key, {}))
        point[group_key] = original
        point[COUNT_FIELD] = int(counts[key])
        if not breakdown_key:
            point[metric_key] = reduced.get(key)
        points.append(point)

    return sorted(points, key=lambda p: _sort_key(p[group_key]))
