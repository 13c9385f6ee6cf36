from __future__ import annotations

import logging

from ..excel.workbook import Workbook
from ..models.errors import MappingTableError, WorkbookError
from ..models.mapping import MappingTable

"""MappingTable sheet loader.

The MappingTable sheet is a plain row-oriented table::

    Object        | Path                         | Default Value
    ProtocolName  | protocolName                 | modbus-rtu
    Interval      | autoEvents[].interval        | 1s

Header names are matched case-insensitively and may appear in any order.
"""

logger = logging.getLogger(__name__)

OBJECT_COL = "object"
PATH_COL = "path"
DEFAULT_VALUE_COL = "default value"


def _locate_header(header: list[str], sheet_name: str) -> tuple[int, int, int]:
    positions: dict[str, int] = {}
    for index, cell in enumerate(header):
        key = cell.strip().lower()
        if key in (OBJECT_COL, PATH_COL, DEFAULT_VALUE_COL) and key not in positions:
            positions[key] = index
    missing = [c for c in (OBJECT_COL, PATH_COL, DEFAULT_VALUE_COL) if c not in positions]
    if missing:
        raise MappingTableError(
            f"column Object, Path, or Default Value not defined in the header of {sheet_name} worksheet"
        )
    return positions[OBJECT_COL], positions[PATH_COL], positions[DEFAULT_VALUE_COL]


def load_mapping_table(workbook: Workbook, sheet_name: str = "MappingTable") -> MappingTable:
    """Parse the MappingTable sheet of ``workbook``.

    Args:
        workbook: Opened workbook
        sheet_name: Name of the mapping sheet

    Returns:
        MappingTable keyed by the Object column (last row wins on duplicates)

    Raises:
        MappingTableError: sheet missing, fewer than 2 rows, or header lacks
            one of Object / Path / Default Value
    """
    if not workbook.has_sheet(sheet_name):
        raise MappingTableError(f"{sheet_name} worksheet not found in the file")

    try:
        rows = workbook.get_rows(sheet_name)
    except WorkbookError as e:
        raise MappingTableError(f"failed to retrieve all rows from {sheet_name}") from e

    if len(rows) < 2:
        raise MappingTableError(
            f"at least 2 rows needs to be defined in the {sheet_name} sheet (1 header and 1 data row)"
        )

    header = rows[0]
    obj_idx, path_idx, default_idx = _locate_header(header, sheet_name)
    width = max(len(header), obj_idx + 1, path_idx + 1, default_idx + 1)

    entries: list[tuple[str, str, str]] = []
    for row in rows[1:]:
        # get_rows drops trailing blank cells
        padded = row + [""] * (width - len(row))
        obj = padded[obj_idx].strip()
        if not obj:
            continue
        entries.append((obj, padded[path_idx].strip(), padded[default_idx].strip()))

    table = MappingTable.from_rows(entries)
    logger.debug("Loaded %d mapping entries from %s", len(table), sheet_name)
    return table
