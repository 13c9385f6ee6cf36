"""Domain models for the device metadata workbook converter.

This package contains the entities exchanged with the spreadsheet, the
MappingTable model, the field registry and the error taxonomy.
"""

from .conversion_result import ConversionResult
from .entities import (
    AutoEvent,
    Device,
    DeviceCommand,
    DeviceProfile,
    DeviceResource,
    ResourceOperation,
    ResourceProperties,
    Value,
)
from .error_record import ErrorRecord
from .errors import (
    ConversionError,
    DecodeError,
    EncodeError,
    EntityValidationError,
    ErrorKind,
    MappingTableError,
    WorkbookError,
)
from .fields import FieldKind, FieldSpec
from .mapping import MappingEntry, MappingTable

__all__ = [
    # Entities
    "AutoEvent",
    "Device",
    "DeviceCommand",
    "DeviceProfile",
    "DeviceResource",
    "ResourceOperation",
    "ResourceProperties",
    "Value",
    # Mapping
    "FieldKind",
    "FieldSpec",
    "MappingEntry",
    "MappingTable",
    # Errors
    "ConversionError",
    "DecodeError",
    "EncodeError",
    "EntityValidationError",
    "ErrorKind",
    "MappingTableError",
    "WorkbookError",
    # Results
    "ConversionResult",
    "ErrorRecord",
]
