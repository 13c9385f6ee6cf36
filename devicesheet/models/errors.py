from __future__ import annotations

from enum import Enum

"""Error taxonomy for workbook <-> entity conversion.

Structural failures (missing sheet, malformed header, workbook I/O, too few
rows) are raised and abort a conversion. Entity validation failures are not
raised by the converters; they are recorded in the validation error map.
"""

__all__ = [
    "ErrorKind",
    "ConversionError",
    "MappingTableError",
    "WorkbookError",
    "DecodeError",
    "EncodeError",
    "EntityValidationError",
]


class ErrorKind(Enum):
    """Error classification carried by every ConversionError."""
    SERVER_ERROR = "ServerError"
    CONTRACT_INVALID = "ContractInvalid"
    SCHEMA_INVALID = "SchemaInvalid"


class ConversionError(Exception):
    """Base class for all conversion failures."""

    default_kind = ErrorKind.SERVER_ERROR

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind

    def __str__(self) -> str:
        cause = self.__cause__
        if cause is not None:
            return f"{self.message}: {cause}"
        return self.message


class MappingTableError(ConversionError):
    """MappingTable sheet is missing or malformed."""
    default_kind = ErrorKind.SCHEMA_INVALID


class WorkbookError(ConversionError):
    """Workbook could not be opened, read or written."""
    default_kind = ErrorKind.SERVER_ERROR


class DecodeError(ConversionError):
    """A row could not be decoded into an entity."""
    default_kind = ErrorKind.CONTRACT_INVALID


class EncodeError(ConversionError):
    """An entity could not be encoded into template cells."""
    default_kind = ErrorKind.SERVER_ERROR


class EntityValidationError(ConversionError):
    """Entity failed field-level validation."""
    default_kind = ErrorKind.CONTRACT_INVALID
