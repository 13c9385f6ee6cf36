from __future__ import annotations

import logging
from collections.abc import Callable

from ..excel.workbook import Workbook
from ..models.errors import ConversionError, ErrorKind, WorkbookError
from ..models.mapping import MappingEntry, MappingTable

"""Schema reconciliation.

Before the rows of a sheet are decoded, every MappingTable entry that carries
a default value and belongs to that sheet must have a physical column. Missing
columns are appended after the last header cell with the object name in row 1
and the default value in every data row. Callers must re-read the sheet
afterwards.

Routing between sheets is by path prefix (case-insensitive):

- Devices owns every path that does not start with autoEvents,
  deviceResources or deviceCommands
- AutoEvents owns ``autoEvents*``
- DeviceResource owns ``deviceResources*``
"""

logger = logging.getLogger(__name__)

AUTO_EVENTS_PREFIX = "autoEvents"
DEVICE_RESOURCES_PREFIX = "deviceResources"
DEVICE_COMMANDS_PREFIX = "deviceCommands"
_CHILD_PREFIXES = (AUTO_EVENTS_PREFIX, DEVICE_RESOURCES_PREFIX, DEVICE_COMMANDS_PREFIX)

PathOwner = Callable[[MappingEntry], bool]


def owned_by_devices(entry: MappingEntry) -> bool:
    return not any(entry.starts_with(prefix) for prefix in _CHILD_PREFIXES)


def owned_by_auto_events(entry: MappingEntry) -> bool:
    return entry.starts_with(AUTO_EVENTS_PREFIX)


def owned_by_device_resources(entry: MappingEntry) -> bool:
    return entry.starts_with(DEVICE_RESOURCES_PREFIX)


def reconcile(
    workbook: Workbook,
    sheet_name: str,
    header: list[str],
    mapping_table: MappingTable,
    row_count: int,
    owns_path: PathOwner,
) -> list[str]:
    """Insert missing default-valued columns into ``sheet_name``.

    Args:
        workbook: Workbook holding the sheet (mutated)
        sheet_name: Target sheet
        header: Current header row (mutated; inserted names are appended)
        mapping_table: Loaded MappingTable
        row_count: Number of rows of the sheet, header included
        owns_path: Routing predicate selecting the entries of this sheet

    Returns:
        Names of the inserted columns, in insertion order

    Raises:
        ConversionError: (ServerError) a column could not be inserted or written
    """
    inserted: list[str] = []
    for object_field, entry in mapping_table.items():
        if not entry.has_default or not owns_path(entry):
            continue
        if object_field in header:
            continue

        col = len(header) + 1
        try:
            workbook.insert_col(sheet_name, col)
            workbook.set_cell(sheet_name, 1, col, object_field)
            for row in range(2, row_count + 1):
                workbook.set_cell(sheet_name, row, col, entry.default_value)
        except WorkbookError as e:
            raise ConversionError(
                f"failed to insert the '{object_field}' column into {sheet_name}", ErrorKind.SERVER_ERROR
            ) from e

        header.append(object_field)
        inserted.append(object_field)

    if inserted:
        logger.debug("Inserted default columns into %s: %s", sheet_name, ", ".join(inserted))
    return inserted
