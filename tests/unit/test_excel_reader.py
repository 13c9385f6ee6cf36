from __future__ import annotations

import pandas as pd
import pytest

from devicesheet.excel.reader import SheetHeaderError, preview_sheet, read_sheet_frames


def test_read_sheet_frames_reads_text(write_xlsx):
    path = write_xlsx(
        "devices.xlsx",
        {
            "Devices": [["Name", "UnitID", "Missing"], ["d1", 1, None], ["d2", 2, "NA"]],
            "MappingTable": [["Object", "Path", "Default Value"]],
        },
    )
    frames = read_sheet_frames(path)
    assert set(frames) == {"Devices", "MappingTable"}
    df = frames["Devices"]
    assert df.iloc[1].tolist() == ["d1", "1", ""]
    # NA-like strings stay text
    assert df.iloc[2, 2] == "NA"


def test_read_sheet_frames_filters_targets(write_xlsx):
    path = write_xlsx("p.xlsx", {"A": [["x"]], "B": [["y"]]})
    assert list(read_sheet_frames(path, ["B"])) == ["B"]


def test_preview_sheet_limits_rows():
    df = pd.DataFrame([["Name", "Address"], ["d1", " a "], ["d2", "b"], ["d3", "c"], ["d4", "d"]], dtype=str)
    preview = preview_sheet(df, "Devices", limit=2)
    assert preview.columns == ["Name", "Address"]
    assert preview.rows == [{"Name": "d1", "Address": "a"}, {"Name": "d2", "Address": "b"}]
    assert preview.total_rows == 4


def test_preview_empty_sheet():
    with pytest.raises(SheetHeaderError):
        preview_sheet(pd.DataFrame(), "Empty")
