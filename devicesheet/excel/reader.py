from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import IO

import pandas as pd

"""Read-only sheet inspection with pandas.

Used by ``devicesheet inspect`` to show what a workbook contains before it is
converted. Cells are read as text (no NaN conversion) so the preview shows the
same strings the conversion engine will see.
"""


class SheetHeaderError(Exception):
    """Raised when a sheet has no header row."""


@dataclass
class SheetPreview:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, str]]  # column name -> cell text
    total_rows: int  # data rows, header excluded


def read_sheet_frames(
    source: str | Path | IO[bytes], target_sheets: Iterable[str] | None = None
) -> dict[str, pd.DataFrame]:
    """Read every sheet (or ``target_sheets``) as a header-less DataFrame of strings."""
    frames: dict[str, pd.DataFrame] = {}
    targets = set(target_sheets) if target_sheets is not None else None
    with pd.ExcelFile(source, engine="openpyxl") as xls:
        for name in xls.sheet_names:
            if targets is not None and str(name) not in targets:
                continue
            df = xls.parse(name, header=None, dtype=str, keep_default_na=False)
            frames[str(name)] = df
    return frames


def preview_sheet(df: pd.DataFrame, sheet_name: str, limit: int = 3) -> SheetPreview:
    """Use the first row as header and return up to ``limit`` data rows."""
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    columns = [str(c).strip() for c in df.iloc[0].tolist()]
    data_part = df.iloc[1:]
    rows: list[dict[str, str]] = []
    for _, raw in data_part.head(limit).iterrows():
        rows.append({col: str(val).strip() for col, val in zip(columns, raw.tolist(), strict=False)})
    return SheetPreview(sheet_name=sheet_name, columns=columns, rows=rows, total_rows=len(data_part))
