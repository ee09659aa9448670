"""
Workbook decoding.

Turns uploaded XLSX, XLS and CSV files into profiled sheets of row records.
Every cell ends up as a Python scalar or ``None``.
"""
from __future__ import annotations

import datetime as dt
import io
import logging
import zipfile
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from .analytics.errors import UnsupportedWorkbookError, WorkbookParseError
from .analytics.models import Dataset, Sheet
from .analytics.profiler import profile_sheet

logger = logging.getLogger(__name__)

CSV_SHEET_NAME = "Sheet1"


class WorkbookType(str, Enum):
    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


def get_workbook_type_from_filename(filename: str) -> WorkbookType | None:
    suffix = Path(filename).suffix.lower().lstrip(".")
    try:
        return WorkbookType(suffix)
    except ValueError:
        return None


def _normalize_cell_value(x: Any) -> Any:
    """Convert a pandas cell into a plain scalar.

    Timestamps with a midnight time component become 'YYYY-MM-DD' so they
    read as date-like strings; other timestamps keep their time part.
    """
    if x is None:
        return None
    if isinstance(x, float) and np.isnan(x):
        return None
    if isinstance(x, np.generic):
        x = x.item()
        if isinstance(x, float) and np.isnan(x):
            return None
    if isinstance(x, pd.Timestamp):
        x = x.to_pydatetime()
    if isinstance(x, dt.datetime):
        if x.hour == 0 and x.minute == 0 and x.second == 0 and x.microsecond == 0:
            return x.strftime("%Y-%m-%d")
        return x.isoformat(sep=" ")
    if isinstance(x, dt.date):
        return x.strftime("%Y-%m-%d")
    return x


def records_from_dataframe(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a DataFrame into row dicts keyed by stringified headers."""
    df2 = df.astype(object).where(pd.notnull(df), None)
    df2.columns = [str(c) for c in df.columns]
    for col in df2.columns:
        df2[col] = df2[col].map(_normalize_cell_value)
    # map re-infers dtypes, which turns None back into NaN in numeric columns
    df2 = df2.astype(object).where(pd.notnull(df2), None)
    return df2.to_dict(orient="records")


def _read_frames(filename: str, content: bytes) -> dict[str, pd.DataFrame]:
    wb_type = get_workbook_type_from_filename(filename)
    if wb_type is None:
        raise UnsupportedWorkbookError(f"Unsupported file type: {filename}. Allowed: .xlsx, .xls, .csv")
    try:
        if wb_type == WorkbookType.CSV:
            return {CSV_SHEET_NAME: pd.read_csv(io.BytesIO(content))}
        return pd.read_excel(io.BytesIO(content), sheet_name=None)
    except pd.errors.EmptyDataError as exc:
        raise WorkbookParseError("No data found in the file.") from exc
    except (ValueError, OSError, zipfile.BadZipFile) as exc:
        raise WorkbookParseError(f"Could not read {filename}: {exc}") from exc


def parse_workbook(filename: str, content: bytes) -> Dataset:
    """Decode every sheet, skip empty ones and profile the rest."""
    frames = _read_frames(filename, content)

    sheets: list[Sheet] = []
    for sheet_name, df in frames.items():
        if df is None:
            continue
        df = df.dropna(how="all")
        if df.empty:
            logger.info("Skipping empty sheet %s in %s", sheet_name, filename)
            continue
        sheets.append(profile_sheet(str(sheet_name), records_from_dataframe(df)))

    if not sheets:
        raise WorkbookParseError("No data found in the file.")

    total_rows = sum(s.row_count for s in sheets)
    logger.info("Parsed %d sheet(s), %d row(s) from %s", len(sheets), total_rows, filename)
    return Dataset(file_name=filename, sheets=sheets, total_rows=total_rows)


def load_workbook(path: str | Path) -> Dataset:
    p = Path(path)
    return parse_workbook(p.name, p.read_bytes())
