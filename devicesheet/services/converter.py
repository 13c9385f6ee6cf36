from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any, Generic, TypeVar

from ..config.loader import ConverterConfig
from ..excel.workbook import Workbook
from ..models.errors import ConversionError, ErrorKind, WorkbookError
from ..models.mapping import MappingTable

"""Shared plumbing of the import converters and export writers."""

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_blank(record: list[str]) -> bool:
    return all(cell.strip() == "" for cell in record)


def blank_rows(rows: list[list[str]]) -> set[int]:
    """1-based numbers of the blank data rows (header excluded)."""
    return {number for number, row in enumerate(rows[1:], start=2) if is_blank(row)}


class XlsxConverter(ABC, Generic[T]):
    """Workbook -> entity converter.

    ``convert_to_dto()`` runs the whole import once; afterwards ``get_dtos()``
    and ``get_validate_errors()`` expose the accepted entities and the
    name-keyed errors of the rejected ones. Structural problems raise
    ConversionError from ``convert_to_dto()``.
    """

    def __init__(self, workbook: Workbook, mapping_table: MappingTable, config: ConverterConfig) -> None:
        self.workbook = workbook
        self.mapping_table = mapping_table
        self.config = config
        self.validate_errors: dict[str, Exception] = {}
        # sheet each error key came from, for the error log
        self.error_sheets: dict[str, str] = {}

    @abstractmethod
    def convert_to_dto(self) -> None: ...

    @abstractmethod
    def get_dtos(self) -> Any: ...

    def get_validate_errors(self) -> dict[str, Exception]:
        return self.validate_errors

    def _check_required_sheets(self, required: list[str]) -> None:
        for sheet_name in required:
            if not self.workbook.has_sheet(sheet_name):
                raise ConversionError(f"{sheet_name} worksheet not found in the file", ErrorKind.CONTRACT_INVALID)

    def _rows(self, sheet_name: str) -> list[list[str]]:
        try:
            return self.workbook.get_rows(sheet_name)
        except WorkbookError as e:
            raise ConversionError(f"failed to retrieve all rows from {sheet_name} worksheet") from e

    def _cols(self, sheet_name: str) -> list[list[str]]:
        try:
            return self.workbook.get_cols(sheet_name)
        except WorkbookError as e:
            raise ConversionError(f"failed to retrieve all columns from {sheet_name} worksheet") from e

    def _merge_errors(self, errors: dict[str, Exception], sheet_name: str) -> None:
        for name, error in errors.items():
            if name not in self.validate_errors:
                self.validate_errors[name] = error
                self.error_sheets[name] = sheet_name


class XlsxWriter(ABC):
    """Entity -> template workbook writer.

    The template must already carry the header row (or header column) of
    every sheet that is filled. ``convert_to_xlsx()`` fills the cells;
    ``write()`` / ``save()`` serialize the result.
    """

    def __init__(
        self,
        template: Workbook,
        config: ConverterConfig,
        mapping_table: MappingTable | None = None,
    ) -> None:
        self.workbook = template
        self.config = config
        self.mapping_table = mapping_table if mapping_table is not None else MappingTable()

    @abstractmethod
    def convert_to_xlsx(self) -> None: ...

    def _header_row(self, sheet_name: str) -> list[str]:
        if not self.workbook.has_sheet(sheet_name):
            raise ConversionError(f"{sheet_name} worksheet not found in the template", ErrorKind.CONTRACT_INVALID)
        try:
            rows = self.workbook.get_rows(sheet_name)
        except WorkbookError as e:
            raise ConversionError(f"failed to retrieve all rows from {sheet_name} worksheet") from e
        if not rows:
            raise ConversionError(f"no header row defined in {sheet_name} worksheet", ErrorKind.CONTRACT_INVALID)
        return rows[0]

    def _header_col(self, sheet_name: str) -> list[str]:
        if not self.workbook.has_sheet(sheet_name):
            raise ConversionError(f"{sheet_name} worksheet not found in the template", ErrorKind.CONTRACT_INVALID)
        try:
            cols = self.workbook.get_cols(sheet_name)
        except WorkbookError as e:
            raise ConversionError(f"failed to retrieve all columns from {sheet_name} worksheet") from e
        if not cols:
            raise ConversionError(f"no header column defined in {sheet_name} worksheet", ErrorKind.CONTRACT_INVALID)
        return cols[0]

    def write(self, stream: IO[bytes]) -> None:
        self.workbook.write(stream)

    def save(self, path: str | Path) -> None:
        self.workbook.save(path)

    def close(self) -> None:
        self.workbook.close()
