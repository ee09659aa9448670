"""Workbook decoding: pandas frames in, profiled sheets of plain-scalar rows out."""
from __future__ import annotations

import datetime as dt
import io

import numpy as np
import pandas as pd
import pytest

from insightflow.analytics import UnsupportedWorkbookError, WorkbookParseError
from insightflow.workbook import (
    WorkbookType,
    _normalize_cell_value,
    get_workbook_type_from_filename,
    load_workbook,
    parse_workbook,
    records_from_dataframe,
)


@pytest.fixture
def xlsx_bytes() -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame({
            "Order Date": [dt.datetime(2024, 1, 15), dt.datetime(2024, 2, 1), dt.datetime(2024, 3, 9)],
            "Region": ["East", "West", "East"],
            "Amount": [120.5, 80.0, 42.25],
        }).to_excel(writer, sheet_name="Orders", index=False)
        pd.DataFrame({"Region": ["East", "West"], "Manager": ["Ada", "Lin"]}).to_excel(
            writer, sheet_name="Regions", index=False
        )
        pd.DataFrame().to_excel(writer, sheet_name="Blank", index=False)
    return buf.getvalue()


class TestFileTypes:
    @pytest.mark.parametrize(
        "filename,expected",
        [("a.xlsx", WorkbookType.XLSX), ("B.XLS", WorkbookType.XLS), ("c.csv", WorkbookType.CSV), ("d.pdf", None), ("noext", None)],
    )
    def test_type_from_extension(self, filename, expected):
        assert get_workbook_type_from_filename(filename) == expected

    def test_unsupported_raises(self):
        with pytest.raises(UnsupportedWorkbookError):
            parse_workbook("report.pdf", b"%PDF-1.4")


class TestCellNormalization:
    def test_midnight_timestamp_becomes_date(self):
        assert _normalize_cell_value(pd.Timestamp("2024-03-01")) == "2024-03-01"

    def test_timestamp_keeps_time(self):
        assert _normalize_cell_value(pd.Timestamp("2024-03-01 12:30")) == "2024-03-01 12:30:00"

    def test_date(self):
        assert _normalize_cell_value(dt.date(2024, 3, 1)) == "2024-03-01"

    def test_numpy_scalars_unwrap(self):
        value = _normalize_cell_value(np.int64(7))
        assert value == 7
        assert type(value) is int
        assert type(_normalize_cell_value(np.bool_(True))) is bool

    def test_nan_is_absent(self):
        assert _normalize_cell_value(float("nan")) is None
        assert _normalize_cell_value(np.float64("nan")) is None
        assert _normalize_cell_value(None) is None

    def test_strings_untouched(self):
        assert _normalize_cell_value("  East ") == "  East "


class TestRecords:
    def test_nan_becomes_none(self):
        df = pd.DataFrame({"a": [1.0, None], "b": [None, "x"]})
        assert records_from_dataframe(df) == [{"a": 1.0, "b": None}, {"a": None, "b": "x"}]

    def test_headers_are_strings(self):
        df = pd.DataFrame({2024: [1], "name": ["x"]})
        assert list(records_from_dataframe(df)[0].keys()) == ["2024", "name"]

    def test_columns_are_normalized_to_plain_values(self):
        df = pd.DataFrame({
            "when": [pd.Timestamp("2024-01-15"), pd.Timestamp("2024-01-16 08:30")],
            "qty": [3, 4],
            "price": [1.5, None],
            "ok": [True, False],
        })
        records = records_from_dataframe(df)
        assert records == [
            {"when": "2024-01-15", "qty": 3, "price": 1.5, "ok": True},
            {"when": "2024-01-16 08:30:00", "qty": 4, "price": None, "ok": False},
        ]
        assert type(records[0]["qty"]) is int
        assert type(records[0]["ok"]) is bool


class TestParseCsv:
    def test_single_sheet(self):
        dataset = parse_workbook("sales.csv", b"region,amt\nEast,10\nWest,5\nEast,7\n")
        assert dataset.file_name == "sales.csv"
        assert dataset.total_rows == 3
        (sheet,) = dataset.sheets
        assert sheet.sheet_name == "Sheet1"
        assert sheet.rows[0] == {"region": "East", "amt": 10}
        amt = sheet.column("amt")
        assert amt.type == "number"
        assert (amt.min_value, amt.max_value) == (5, 10)

    def test_blank_rows_dropped(self):
        dataset = parse_workbook("s.csv", b"a,b\n1,x\n,\n2,y\n")
        assert dataset.total_rows == 2

    def test_header_only_has_no_data(self):
        with pytest.raises(WorkbookParseError, match="No data found"):
            parse_workbook("s.csv", b"a,b\n")

    def test_empty_file_has_no_data(self):
        with pytest.raises(WorkbookParseError):
            parse_workbook("s.csv", b"")


class TestParseExcel:
    def test_sheets_are_profiled_and_blank_skipped(self, xlsx_bytes):
        dataset = parse_workbook("book.xlsx", xlsx_bytes)
        assert [s.sheet_name for s in dataset.sheets] == ["Orders", "Regions"]
        assert dataset.total_rows == 5

    def test_dates_become_date_strings(self, xlsx_bytes):
        orders = parse_workbook("book.xlsx", xlsx_bytes).sheet("Orders")
        assert orders.rows[0]["Order Date"] == "2024-01-15"
        assert orders.column("Order Date").type == "date"
        assert orders.column("Amount").type == "number"
        assert orders.column("Region").distinct_count == 2

    def test_garbage_bytes(self):
        with pytest.raises(WorkbookParseError):
            parse_workbook("book.xlsx", b"not a workbook")

    def test_load_from_path(self, tmp_path, xlsx_bytes):
        path = tmp_path / "book.xlsx"
        path.write_bytes(xlsx_bytes)
        dataset = load_workbook(path)
        assert dataset.file_name == "book.xlsx"
        assert len(dataset.sheets) == 2
