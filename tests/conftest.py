# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable, Iterator
from io import BytesIO
from pathlib import Path
from typing import Any

import openpyxl
import pytest

from devicesheet.config.loader import ConverterConfig, load_config
from devicesheet.excel.workbook import Workbook
from devicesheet.logging.init import reset_logging

SheetData = dict[str, list[list[Any]]]

MAPPING_HEADER = ["Object", "Path", "Default Value"]


def _build_book(sheets: SheetData) -> openpyxl.Workbook:
    book = openpyxl.Workbook()
    default = book.active
    for name, rows in sheets.items():
        ws = book.create_sheet(name)
        for row in rows:
            ws.append(list(row))
    if sheets and default is not None:
        book.remove(default)
    return book


@pytest.fixture()
def temp_workdir(monkeypatch) -> Iterator[Path]:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def config() -> ConverterConfig:
    return load_config()


@pytest.fixture()
def make_workbook() -> Callable[[SheetData], Workbook]:
    """Build an in-memory Workbook from ``{sheet: rows}``."""
    def _make(sheets: SheetData) -> Workbook:
        return Workbook(_build_book(sheets), name="test.xlsx")
    return _make


@pytest.fixture()
def xlsx_bytes() -> Callable[[SheetData], BytesIO]:
    """Serialize ``{sheet: rows}`` into an .xlsx byte stream."""
    def _make(sheets: SheetData) -> BytesIO:
        buffer = BytesIO()
        _build_book(sheets).save(buffer)
        buffer.seek(0)
        return buffer
    return _make


@pytest.fixture()
def write_xlsx(temp_workdir: Path) -> Callable[[str, SheetData], Path]:
    """Write ``{sheet: rows}`` to ``data/<name>`` under the temp workdir."""
    def _write(name: str, sheets: SheetData) -> Path:
        path = temp_workdir / "data" / name
        _build_book(sheets).save(path)
        return path
    return _write


@pytest.fixture()
def device_mapping_rows() -> list[list[str]]:
    return [
        MAPPING_HEADER,
        ["ProtocolName", "protocolName", "modbus-rtu"],
        ["AdminState", "adminState", "UNLOCKED"],
        ["OperatingState", "operatingState", "UP"],
        ["Floor", "tags.location.floor", ""],
        ["Address", "protocols.modbus-rtu.Address", ""],
        ["Interval", "autoEvents[].interval", ""],
        ["OnChange", "autoEvents[].onChange", "false"],
    ]


@pytest.fixture()
def profile_mapping_rows() -> list[list[str]]:
    return [
        MAPPING_HEADER,
        ["ValueType", "deviceResources[].properties.valueType", "String"],
        ["ReadWrite", "deviceResources[].properties.readWrite", "R"],
    ]


@pytest.fixture(autouse=True)
def _fresh_logging() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()
