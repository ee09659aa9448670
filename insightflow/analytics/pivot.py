"""Two-dimensional cross-tabulation of row label x column label."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import pandas as pd

from ..domain.types import ABSENT_LABEL, TOTAL_LABEL
from .coercion import is_absent, rows_to_frame, stringify, to_numeric_series
from .reducers import reduce_groups


@dataclass(frozen=True)
class PivotTable:
    row_key: str
    col_key: str | None
    value_key: str
    reducer: str
    row_labels: list[str] = field(default_factory=list)
    col_labels: list[str] = field(default_factory=list)
    cells: dict[tuple[str, str], int | float] = field(default_factory=dict)

    def cell(self, row_label: str, col_label: str) -> int | float | None:
        """Reduced cell value, or ``None`` when no row contributed."""
        return self.cells.get((row_label, col_label))

    def to_records(self) -> list[dict[str, Any]]:
        records = []
        for row_label in self.row_labels:
            record: dict[str, Any] = {self.row_key: row_label}
            for col_label in self.col_labels:
                record[col_label] = self.cell(row_label, col_label)
            records.append(record)
        return records


def _label(value: Any) -> str:
    return ABSENT_LABEL if is_absent(value) else stringify(value)


def build_pivot(
    rows: Sequence[Mapping[str, Any]],
    row_key: str,
    col_key: str | None,
    value_key: str,
    reducer: str,
) -> PivotTable:
    """Cross-tabulate ``value_key`` by ``row_key`` and ``col_key``.

    Absent labels become ``"N/A"``. Without a ``col_key`` every row lands in
    the single column ``"Total"``. Both label axes are sorted lexicographically.
    """
    frame = rows_to_frame(rows, [row_key, col_key, value_key] if col_key else [row_key, value_key])
    row_labels = frame[row_key].map(_label).astype(object).rename("_row")
    if col_key:
        col_labels = frame[col_key].map(_label).astype(object).rename("_col")
    else:
        col_labels = pd.Series(TOTAL_LABEL, index=frame.index, dtype=object, name="_col")

    cells = reduce_groups(to_numeric_series(frame[value_key]), [row_labels, col_labels], reducer)

    return PivotTable(
        row_key=row_key,
        col_key=col_key,
        value_key=value_key,
        reducer=reducer,
        row_labels=sorted(set(row_labels)),
        col_labels=sorted(set(col_labels)),
        cells=cells,
    )
