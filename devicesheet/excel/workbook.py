from __future__ import annotations

import zipfile
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time
from pathlib import Path
from typing import IO, Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from ..models.errors import WorkbookError

"""Workbook abstraction over openpyxl.

The conversion engine only needs a handful of operations: list sheets, read a
sheet as rows or columns of text, insert a column, set cells, and save. Rows
and columns come back the way a spreadsheet user sees them: every cell as
text, trailing blank cells of a row dropped, trailing blank rows dropped.

Row and column numbers passed to the write methods are 1-based, matching
spreadsheet addressing (A1 == row 1, column 1).

A Workbook instance is not safe for concurrent use; callers converting the
same workbook from several threads must serialize access.
"""

__all__ = [
    "Workbook",
    "cell_text",
]


def cell_text(value: Any) -> str:
    """Render a cell value as the text a spreadsheet would display."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _trim_trailing(values: list[str]) -> list[str]:
    end = len(values)
    while end > 0 and values[end - 1] == "":
        end -= 1
    return values[:end]


class Workbook:
    """Stateful handle over an openpyxl workbook."""

    def __init__(self, book: openpyxl.Workbook, name: str = "") -> None:
        self._book = book
        self.name = name

    @classmethod
    def open(cls, source: str | Path | IO[bytes]) -> Workbook:
        """Open an ``.xlsx`` file from a path or binary stream."""
        name = str(source) if isinstance(source, (str, Path)) else getattr(source, "name", "")
        try:
            book = openpyxl.load_workbook(source)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise WorkbookError(f"failed to open xlsx file {name or '<stream>'}") from e
        return cls(book, name=Path(name).name if name else "")

    @classmethod
    def new(cls, sheet_names: Iterable[str] = ()) -> Workbook:
        """Create an empty workbook containing ``sheet_names`` (in order)."""
        book = openpyxl.Workbook()
        default = book.active
        names = list(sheet_names)
        for sheet_name in names:
            book.create_sheet(sheet_name)
        if names and default is not None:
            book.remove(default)
        return cls(book)

    # ------------------------------------------------------------------ read
    @property
    def sheet_names(self) -> list[str]:
        return list(self._book.sheetnames)

    def has_sheet(self, sheet_name: str) -> bool:
        return sheet_name in self._book.sheetnames

    def _sheet(self, sheet_name: str):
        try:
            return self._book[sheet_name]
        except KeyError as e:
            raise WorkbookError(f"sheet {sheet_name} does not exist") from e

    def get_rows(self, sheet_name: str) -> list[list[str]]:
        ws = self._sheet(sheet_name)
        rows = [
            _trim_trailing([cell_text(v) for v in raw])
            for raw in ws.iter_rows(values_only=True)
        ]
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def get_cols(self, sheet_name: str) -> list[list[str]]:
        ws = self._sheet(sheet_name)
        cols = [
            _trim_trailing([cell_text(v) for v in raw])
            for raw in ws.iter_cols(values_only=True)
        ]
        while cols and not cols[-1]:
            cols.pop()
        return cols

    # ----------------------------------------------------------------- write
    def insert_col(self, sheet_name: str, col: int) -> None:
        """Insert one empty column before ``col`` (shifting cells right)."""
        ws = self._sheet(sheet_name)
        if col < 1:
            raise WorkbookError(f"invalid column number {col} for {sheet_name}")
        ws.insert_cols(col, 1)

    def set_cell(self, sheet_name: str, row: int, col: int, value: Any) -> None:
        ws = self._sheet(sheet_name)
        try:
            ws.cell(row=row, column=col, value=value)
        except ValueError as e:
            raise WorkbookError(
                f"failed to set cell (row={row}, col={col}) in the '{sheet_name}' sheet"
            ) from e

    def set_col(self, sheet_name: str, col: int, values: Sequence[Any], start_row: int = 1) -> None:
        for offset, value in enumerate(values):
            self.set_cell(sheet_name, start_row + offset, col, value)

    def set_row(self, sheet_name: str, row: int, values: Sequence[Any], start_col: int = 1) -> None:
        for offset, value in enumerate(values):
            self.set_cell(sheet_name, row, start_col + offset, value)

    def write(self, stream: IO[bytes]) -> None:
        try:
            self._book.save(stream)
        except (OSError, ValueError) as e:
            raise WorkbookError("failed to write xlsx file") from e

    def save(self, path: str | Path) -> None:
        try:
            self._book.save(Path(path))
        except (OSError, ValueError) as e:
            raise WorkbookError(f"failed to write xlsx file {path}") from e

    def close(self) -> None:
        self._book.close()
