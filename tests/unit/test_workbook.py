from __future__ import annotations

from datetime import datetime
from io import BytesIO

import pytest

from devicesheet.excel.workbook import Workbook, cell_text
from devicesheet.models.errors import ErrorKind, WorkbookError


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, ""),
        (True, "TRUE"),
        (False, "FALSE"),
        (3, "3"),
        (3.0, "3"),
        (0.5, "0.5"),
        ("text", "text"),
        (datetime(2024, 1, 2, 3, 4, 5), "2024-01-02T03:04:05"),
    ],
)
def test_cell_text(value, expected):
    assert cell_text(value) == expected


def test_rows_and_cols_trim_trailing_blanks(make_workbook):
    wb = make_workbook({"S": [["a", "b", None], ["1", None, None], [None, None, None]]})
    assert wb.get_rows("S") == [["a", "b"], ["1"]]
    assert wb.get_cols("S") == [["a", "1"], ["b"]]


def test_sheet_names_and_has_sheet(make_workbook):
    wb = make_workbook({"Devices": [["Name"]], "MappingTable": [["Object"]]})
    assert wb.sheet_names == ["Devices", "MappingTable"]
    assert wb.has_sheet("Devices")
    assert not wb.has_sheet("AutoEvents")


def test_missing_sheet_raises_workbook_error(make_workbook):
    wb = make_workbook({"S": [["a"]]})
    with pytest.raises(WorkbookError) as exc:
        wb.get_rows("Nope")
    assert exc.value.kind is ErrorKind.SERVER_ERROR


def test_insert_col_shifts_cells(make_workbook):
    wb = make_workbook({"S": [["a", "b"]]})
    wb.insert_col("S", 2)
    wb.set_cell("S", 1, 2, "new")
    assert wb.get_rows("S") == [["a", "new", "b"]]
    with pytest.raises(WorkbookError):
        wb.insert_col("S", 0)


def test_set_row_and_col():
    wb = Workbook.new(["S"])
    wb.set_row("S", 1, ["Name", "Value"])
    wb.set_col("S", 1, ["r1", "r2"], start_row=2)
    assert wb.get_rows("S") == [["Name", "Value"], ["r1"], ["r2"]]


def test_write_and_reopen_stream():
    wb = Workbook.new(["Devices"])
    wb.set_row("Devices", 1, ["Name", "Count"])
    wb.set_row("Devices", 2, ["d1", 7])
    buffer = BytesIO()
    wb.write(buffer)
    buffer.seek(0)

    reopened = Workbook.open(buffer)
    assert reopened.get_rows("Devices") == [["Name", "Count"], ["d1", "7"]]


def test_save_and_open_path(tmp_path):
    wb = Workbook.new(["S"])
    wb.set_cell("S", 1, 1, "x")
    path = tmp_path / "out.xlsx"
    wb.save(path)
    assert Workbook.open(path).name == "out.xlsx"


def test_open_invalid_file(tmp_path):
    bad = tmp_path / "bad.xlsx"
    bad.write_text("not a workbook", encoding="utf-8")
    with pytest.raises(WorkbookError):
        Workbook.open(bad)
    with pytest.raises(WorkbookError):
        Workbook.open(tmp_path / "missing.xlsx")
