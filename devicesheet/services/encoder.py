from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from ..config.loader import ConverterConfig
from ..excel.workbook import Workbook
from ..models.entities import (
    AutoEvent,
    Device,
    DeviceCommand,
    DeviceProfile,
    DeviceResource,
    ResourceProperties,
    Value,
)
from ..models.errors import EncodeError, ErrorKind
from ..models.fields import FieldKind, find_field
from ..models.mapping import MappingTable, split_path
from .values import format_cell, get_nested

"""Entity -> cell encoder (export path).

Each header cell of a template sheet is resolved against the entity the same
way the decoder reads it, in reverse: the entity's own fields first
(case-insensitive), then the MappingTable path, then the per-entity fallback
for unmapped headers. Resolved values that are None or empty are not written,
so template formatting of blank cells is left alone.

Row-oriented sheets get one entity per row starting at row 2. Column-oriented
sheets (DeviceInfo, DeviceCommand) get one entity per column starting at
column B.
"""

logger = logging.getLogger(__name__)

T = TypeVar("T")
CellResolver = Callable[[T, str], Any]

PROTOCOLS_CONTAINER = "protocols"
TAGS_CONTAINER = "tags"
ATTRIBUTES_CONTAINER = "attributes"
PROPERTIES_CONTAINER = "properties"
API_VERSION_HEADER = "apiversion"
RESOURCE_NAME_HEADERS = ("resourcename", "resourceoperation")
DEVICE_INFO_LABEL_SEPARATOR = ", "


def _field_value(entity: Any, header: str) -> tuple[bool, Any]:
    spec = find_field(type(entity).FIELDS, header, case_sensitive=False)
    if spec is None:
        return False, None
    value = getattr(entity, spec.attr)
    if spec.kind is FieldKind.ANY and value is not None and not isinstance(value, str):
        value = str(value)
    return True, value


def _current_protocol(device: Device, config: ConverterConfig) -> dict[str, Value]:
    spec = config.resolve_protocol(device.protocol_name)
    if spec is not None and spec.key in device.protocols:
        return device.protocols[spec.key]
    for properties in device.protocols.values():
        return properties
    return {}


def _nested(source: dict[str, Any], keys: list[str], header: str, container: str) -> Any:
    try:
        return get_nested(source, keys)
    except EncodeError as e:
        raise EncodeError(
            f"failed to get '{header}' field from {container} map", ErrorKind.SERVER_ERROR
        ) from e


def resolve_device_cell(
    device: Device, header: str, mapping_table: MappingTable, config: ConverterConfig
) -> Any:
    """Value of ``header`` for ``device`` (None when nothing resolves)."""
    found, value = _field_value(device, header)
    if found:
        return value

    entry = mapping_table.get(header)
    if entry is None:
        # unmapped Devices columns are protocol properties
        return _current_protocol(device, config).get(header)

    segments = split_path(entry.path)
    if len(segments) == 1:
        return _field_value(device, segments[0])[1]
    if not segments:
        return None

    container = segments[0].lower()
    if container == PROTOCOLS_CONTAINER:
        if len(segments) < 3:
            logger.debug("Skipping %s: protocols path needs <protocol>.<property>", header)
            return None
        properties = device.protocols.get(segments[1])
        if properties is not None:
            return _nested(properties, segments[2:], header, "Protocols")
        return _current_protocol(device, config).get(segments[-1])
    if container == PROPERTIES_CONTAINER:
        return _nested(device.properties, segments[1:], header, "Properties")
    if container == TAGS_CONTAINER:
        return _nested(device.tags, segments[1:], header, "Tags")
    return None


def resolve_auto_event_cell(
    owner: Device, auto_event: AutoEvent, header: str, mapping_table: MappingTable, reference_column: str
) -> Any:
    found, value = _field_value(auto_event, header)
    if found:
        return value
    if header.lower() == reference_column.lower():
        return owner.name
    entry = mapping_table.get(header)
    if entry is not None:
        segments = split_path(entry.path)
        if len(segments) == 1:
            return _field_value(auto_event, segments[0])[1]
    return None


def _resource_property(resource: DeviceResource, name: str) -> tuple[bool, Any]:
    spec = find_field(ResourceProperties.FIELDS, name, case_sensitive=False)
    if spec is None:
        return False, None
    return True, getattr(resource.properties, spec.attr)


def resolve_resource_cell(resource: DeviceResource, header: str, mapping_table: MappingTable) -> Any:
    """Value of ``header`` for ``resource``.

    Unmapped headers are tried as a ResourceProperties field, then as a
    (dotted) attribute name, then as a tag.
    """
    found, value = _field_value(resource, header)
    if found:
        return value

    entry = mapping_table.get(header)
    if entry is not None and entry.path:
        segments = split_path(entry.path)
        if len(segments) == 1:
            return _field_value(resource, segments[0])[1]
        container = segments[0].lower()
        if container == PROPERTIES_CONTAINER:
            return _resource_property(resource, segments[1])[1] if len(segments) == 2 else None
        if container == ATTRIBUTES_CONTAINER:
            return _nested(resource.attributes, segments[1:], header, "Attributes")
        if container == TAGS_CONTAINER:
            return _nested(resource.tags, segments[1:], header, "Tags")
        return None

    found, value = _resource_property(resource, header)
    if found:
        return value
    keys = split_path(header)
    if keys and keys[0] in resource.attributes:
        return _nested(resource.attributes, keys, header, "Attributes")
    return resource.tags.get(header)


def resolve_device_info_cell(
    profile: DeviceProfile, header: str, mapping_table: MappingTable, api_version: str
) -> Any:
    if header.lower() == API_VERSION_HEADER:
        return api_version
    found, value = _field_value(profile, header)
    if found:
        if isinstance(value, list):
            return DEVICE_INFO_LABEL_SEPARATOR.join(value)
        return value
    entry = mapping_table.get(header)
    if entry is not None:
        segments = split_path(entry.path)
        if len(segments) == 1:
            return _field_value(profile, segments[0])[1]
    return None


def resolve_command_cell(command: DeviceCommand, header: str) -> Any:
    return _field_value(command, header)[1]


def _write(workbook: Workbook, sheet_name: str, row: int, col: int, value: Any) -> None:
    cell = format_cell(value)
    if cell is None or cell == "":
        return
    workbook.set_cell(sheet_name, row, col, cell)


def encode_rows(
    workbook: Workbook,
    sheet_name: str,
    header: Sequence[str],
    records: Sequence[T],
    resolve: CellResolver[T],
    first_row: int = 2,
) -> int:
    """Write ``records`` one per row below the header; returns the next free row."""
    row = first_row
    for record in records:
        for col_index, header_cell in enumerate(header):
            if not header_cell:
                continue
            _write(workbook, sheet_name, row, col_index + 1, resolve(record, header_cell))
        row += 1
    return row


def encode_columns(
    workbook: Workbook,
    sheet_name: str,
    header: Sequence[str],
    records: Sequence[T],
    resolve: CellResolver[T],
) -> None:
    """Write ``records`` one per column, starting at column B."""
    for index, record in enumerate(records):
        col = index + 2
        for row_index, header_cell in enumerate(header):
            if not header_cell:
                continue
            _write(workbook, sheet_name, row_index + 1, col, resolve(record, header_cell))


def encode_commands(workbook: Workbook, sheet_name: str, header: Sequence[str], commands: Sequence[DeviceCommand]) -> None:
    """Write device commands one per column, starting at column B.

    The resource operations of a command are written downward from the row of
    the ResourceName header, one resource name per row; headers below it are
    not visited.
    """
    for cmd_index, command in enumerate(commands):
        col = cmd_index + 2
        for row_index, header_cell in enumerate(header):
            if not header_cell:
                continue
            if header_cell.lower() in RESOURCE_NAME_HEADERS:
                for offset, operation in enumerate(command.resource_operations):
                    _write(workbook, sheet_name, row_index + 1 + offset, col, operation.device_resource)
                break
            _write(workbook, sheet_name, row_index + 1, col, resolve_command_cell(command, header_cell))
