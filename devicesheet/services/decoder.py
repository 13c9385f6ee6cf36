from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ..config.loader import ConverterConfig
from ..models.entities import (
    AutoEvent,
    Device,
    DeviceCommand,
    DeviceProfile,
    DeviceResource,
    ResourceOperation,
    ResourceProperties,
    Value,
)
from ..models.errors import DecodeError, ErrorKind
from ..models.fields import FieldSpec, find_field
from ..models.mapping import MappingTable, split_path
from .protocol_props import to_typed_protocol_properties
from .values import coerce, set_nested, sniff_and_coerce

"""Row decoder (import path).

A spreadsheet record (a row, or a column for DeviceInfo / DeviceCommand) is
first normalized into an explicit ``(column_name, cell)`` pair sequence, then
each pair is resolved in this order:

1. exact (case-sensitive) match against the entity's FIELDS registry,
   coerced per the declared FieldKind
2. the MappingTable path of the column: ``protocols``, ``tags``,
   ``attributes``, ``properties`` containers, or a single segment naming a
   scalar field (case-insensitive); unknown prefixes are ignored
3. a per-entity fallback for columns that have neither a field nor a
   mapping entry

Cells that are still empty after default substitution leave the attribute at
its dataclass default.
"""

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROTOCOL_NAME = "ProtocolName"
NAME_COLUMN = "Name"
SOURCE_NAME_COLUMN = "SourceName"
PROTOCOLS_CONTAINER = "protocols"
TAGS_CONTAINER = "tags"
ATTRIBUTES_CONTAINER = "attributes"
PROPERTIES_CONTAINER = "properties"

Pairs = list[tuple[str, str]]


@dataclass
class DecodedRow(Generic[T]):
    """A decoded entity plus the parent names it references (AutoEvent only)."""
    entity: T
    references: list[str] = field(default_factory=list)


def pair_cells(header: list[str], row: list[str], mapping_table: MappingTable | None = None) -> Pairs:
    """Build the ``(column_name, cell)`` sequence of one record.

    Short records are padded with ``""``. Cells beyond the header are paired
    with the last header name. Cells are trimmed and an empty cell takes the
    MappingTable default of its column when there is one. Blank header cells
    are dropped.
    """
    if not header:
        return []
    last = len(header) - 1
    pairs: Pairs = []
    for index in range(max(len(header), len(row))):
        name = header[min(index, last)].strip()
        if not name:
            continue
        cell = row[index].strip() if index < len(row) else ""
        if cell == "" and mapping_table is not None:
            cell = mapping_table.default_for(name)
        pairs.append((name, cell))
    return pairs


def best_effort_name(pairs: Pairs, column: str = NAME_COLUMN) -> str:
    """Value of the first ``column`` cell, used to key errors of rows that failed to decode."""
    for name, cell in pairs:
        if name == column:
            return cell
    return ""


def _set_field(entity: Any, spec: FieldSpec, column: str, cell: str) -> None:
    if cell == "":
        return
    try:
        value = coerce(spec.kind, cell)
    except DecodeError as e:
        raise DecodeError(f"column '{column}': {e.message}", e.kind) from e
    setattr(entity, spec.attr, value)


def _require_mapping(mapping_table: MappingTable | None, entity_name: str) -> MappingTable:
    if mapping_table is None:
        raise DecodeError(
            f"field mapping table is required to decode {entity_name}", ErrorKind.SERVER_ERROR
        )
    return mapping_table


def _resolve_scalar(entity: Any, segments: list[str], column: str, cell: str) -> bool:
    if len(segments) != 1:
        return False
    spec = find_field(type(entity).FIELDS, segments[0], case_sensitive=False)
    if spec is None:
        return False
    _set_field(entity, spec, column, cell)
    return True


class _RowState:
    """Per-record scratch state shared by the resolution steps."""

    def __init__(self) -> None:
        self.protocol_properties: dict[str, Value] = {}
        self.references: list[str] = []


def _resolve_path(entity: Any, path: str, column: str, cell: str, state: _RowState) -> None:
    segments = split_path(path)
    if not segments or cell == "":
        return
    container = segments[0].lower()

    if container == PROTOCOLS_CONTAINER and isinstance(entity, Device):
        state.protocol_properties[segments[-1]] = cell
    elif container == TAGS_CONTAINER and isinstance(entity, (Device, DeviceResource)) and len(segments) > 1:
        set_nested(entity.tags, segments[1:], sniff_and_coerce(cell))
    elif container == ATTRIBUTES_CONTAINER and isinstance(entity, DeviceResource) and len(segments) > 1:
        set_nested(entity.attributes, segments[1:], sniff_and_coerce(cell))
    elif container == PROPERTIES_CONTAINER and len(segments) > 1:
        if isinstance(entity, DeviceResource):
            spec = find_field(ResourceProperties.FIELDS, segments[1], case_sensitive=False)
            if spec is not None and len(segments) == 2:
                _set_field(entity.properties, spec, column, cell)
        elif isinstance(entity, Device):
            set_nested(entity.properties, segments[1:], sniff_and_coerce(cell))
    elif not _resolve_scalar(entity, segments, column, cell):
        logger.debug("Ignoring column %s with unrecognized mapping path %s", column, path)


def _mapped_path(column: str, mapping_table: MappingTable | None) -> str:
    return mapping_table.path_for(column) if mapping_table is not None else ""


def _decode_pairs(entity: Any, pairs: Pairs, mapping_table: MappingTable | None, state: _RowState) -> list[tuple[str, str]]:
    """Apply steps 1 and 2; return the pairs left for the entity fallback."""
    fields = type(entity).FIELDS
    leftover: list[tuple[str, str]] = []
    for column, cell in pairs:
        spec = fields.get(column)
        if spec is not None:
            _set_field(entity, spec, column, cell)
            continue
        path = _mapped_path(column, mapping_table)
        if path:
            _resolve_path(entity, path, column, cell, state)
            continue
        leftover.append((column, cell))
    return leftover


def _protocol_key(device: Device, mapping_table: MappingTable, config: ConverterConfig) -> str:
    name = device.protocol_name or mapping_table.default_for(PROTOCOL_NAME)
    spec = config.resolve_protocol(name)
    if spec is None:
        raise DecodeError(
            f"unknown ProtocolProperties outer key for '{name}' protocol", ErrorKind.SERVER_ERROR
        )
    return spec.key


def decode_device(
    header: list[str], row: list[str], mapping_table: MappingTable | None, config: ConverterConfig
) -> DecodedRow[Device]:
    """Decode one Devices row.

    Protocol-path columns and unmapped columns are collected into one flat
    property map, wrapped under the protocol key resolved from the row's
    ProtocolName (or the MappingTable default) and typed per the protocol
    table.

    Raises:
        DecodeError: bad bool/int cell (ContractInvalid), unresolved protocol
            or missing mapping table (ServerError)
    """
    mapping_table = _require_mapping(mapping_table, "Device")
    device = Device()
    state = _RowState()
    pairs = pair_cells(header, row, mapping_table)

    for column, cell in _decode_pairs(device, pairs, mapping_table, state):
        if cell != "":
            state.protocol_properties[column] = cell

    if state.protocol_properties:
        key = _protocol_key(device, mapping_table, config)
        spec = config.protocols[key]
        to_typed_protocol_properties(spec, state.protocol_properties)
        device.protocols = {key: state.protocol_properties}
    return DecodedRow(device)


def reference_names(header: list[str], row: list[str], mapping_table: MappingTable | None) -> list[str]:
    """Device names referenced by an AutoEvents row.

    These are the non-empty cells of the columns that are not AutoEvent
    fields and carry no MappingTable path (conventionally ``Reference Device
    Name``). Same rule as the fallback step of ``decode_auto_event``; it also
    works on rows that fail to decode.
    """
    return [
        cell
        for column, cell in pair_cells(header, row, mapping_table)
        if cell and column not in AutoEvent.FIELDS and not _mapped_path(column, mapping_table)
    ]


def decode_auto_event(header: list[str], row: list[str], mapping_table: MappingTable | None) -> DecodedRow[AutoEvent]:
    mapping_table = _require_mapping(mapping_table, "AutoEvent")
    auto_event = AutoEvent()
    state = _RowState()
    pairs = pair_cells(header, row, mapping_table)
    for _column, cell in _decode_pairs(auto_event, pairs, mapping_table, state):
        if cell:
            state.references.append(cell)
    return DecodedRow(auto_event, state.references)


def decode_device_resource(
    header: list[str], row: list[str], mapping_table: MappingTable | None
) -> DecodedRow[DeviceResource]:
    """Decode one DeviceResource row.

    Unmapped columns name a ResourceProperties field (exact match) or else an
    attribute; dotted headers build nested attribute maps.
    """
    mapping_table = _require_mapping(mapping_table, "DeviceResource")
    resource = DeviceResource()
    state = _RowState()
    pairs = pair_cells(header, row, mapping_table)
    for column, cell in _decode_pairs(resource, pairs, mapping_table, state):
        if cell == "":
            continue
        spec = ResourceProperties.FIELDS.get(column)
        if spec is not None:
            _set_field(resource.properties, spec, column, cell)
        else:
            set_nested(resource.attributes, split_path(column), sniff_and_coerce(cell))
    return DecodedRow(resource)


def decode_device_command(header: list[str], column: list[str]) -> DecodedRow[DeviceCommand]:
    """Decode one DeviceCommand record.

    Every cell outside Name / IsHidden / ReadWrite is a resource name; they
    become ResourceOperations in sheet order.
    """
    command = DeviceCommand()
    for name, cell in pair_cells(header, column):
        spec = DeviceCommand.FIELDS.get(name)
        if spec is not None:
            _set_field(command, spec, name, cell)
        elif cell:
            command.resource_operations.append(ResourceOperation(device_resource=cell))
    return DecodedRow(command)


def decode_device_info(header: list[str], column: list[str], mapping_table: MappingTable | None) -> DecodedRow[DeviceProfile]:
    profile = DeviceProfile()
    state = _RowState()
    pairs = pair_cells(header, column, mapping_table)
    for name, _cell in _decode_pairs(profile, pairs, mapping_table, state):
        logger.debug("Ignoring unknown DeviceInfo header %s", name)
    return DecodedRow(profile)


def decode_row(
    entity_type: type,
    header: list[str],
    row: list[str],
    mapping_table: MappingTable | None,
    config: ConverterConfig | None = None,
) -> DecodedRow[Any]:
    """Dispatch to the decoder of ``entity_type``."""
    if entity_type is Device:
        if config is None:
            raise DecodeError("converter configuration is required to decode Device", ErrorKind.SERVER_ERROR)
        return decode_device(header, row, mapping_table, config)
    if entity_type is AutoEvent:
        return decode_auto_event(header, row, mapping_table)
    if entity_type is DeviceResource:
        return decode_device_resource(header, row, mapping_table)
    if entity_type is DeviceCommand:
        return decode_device_command(header, row)
    if entity_type is DeviceProfile:
        return decode_device_info(header, row, mapping_table)
    raise DecodeError(f"unsupported entity type {entity_type.__name__}", ErrorKind.CONTRACT_INVALID)
