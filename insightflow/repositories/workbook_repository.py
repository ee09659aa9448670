from __future__ import annotations

import uuid
from dataclasses import dataclass

from ..analytics.errors import WorkbookNotFoundError
from ..analytics.models import Dataset, Sheet


@dataclass(frozen=True)
class WorkbookInfo:
    workbook_id: str
    file_name: str
    sheet_names: list[str]
    total_rows: int


class WorkbookRepository:
    """Process-local registry of parsed workbooks. Nothing is written to disk."""

    def __init__(self) -> None:
        self._datasets: dict[str, Dataset] = {}

    def save(self, dataset: Dataset) -> str:
        workbook_id = uuid.uuid4().hex
        self._datasets[workbook_id] = dataset
        return workbook_id

    def get(self, workbook_id: str) -> Dataset:
        dataset = self._datasets.get(workbook_id)
        if dataset is None:
            raise WorkbookNotFoundError(f"Workbook not found: {workbook_id}")
        return dataset

    def get_sheet(self, workbook_id: str, sheet_name: str) -> Sheet:
        sheet = self.get(workbook_id).sheet(sheet_name)
        if sheet is None:
            raise WorkbookNotFoundError(f"Sheet '{sheet_name}' not found in workbook {workbook_id}")
        return sheet

    def list_workbooks(self) -> list[WorkbookInfo]:
        return [
            WorkbookInfo(wid, d.file_name, [s.sheet_name for s in d.sheets], d.total_rows)
            for wid, d in self._datasets.items()
        ]

    def delete(self, workbook_id: str) -> bool:
        return self._datasets.pop(workbook_id, None) is not None

    def clear(self) -> None:
        self._datasets.clear()

    def __len__(self) -> int:
        return len(self._datasets)
