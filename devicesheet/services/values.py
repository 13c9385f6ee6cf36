from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from ..models.entities import Value
from ..models.errors import DecodeError, EncodeError, ErrorKind
from ..models.fields import FieldKind

"""Cell text <-> typed value conversion.

Two coercion styles are used:

- declared: the destination field has a FieldKind and the text must parse as
  that kind (bad bool/int/float text raises DecodeError)
- sniffed: open-ended maps (tags, attributes, device properties) try int, then
  float, then bool and keep the string otherwise. "1" therefore becomes the
  integer 1 even where a boolean was meant; the ordering is kept as is so the
  same inputs keep being accepted.
"""

__all__ = [
    "parse_bool",
    "parse_int",
    "parse_float",
    "split_list",
    "coerce",
    "sniff_and_coerce",
    "set_nested",
    "get_nested",
    "format_cell",
]

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$|^[+-]?(inf|infinity|nan)$", re.IGNORECASE)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
LIST_SEPARATOR = ","


def parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise DecodeError(f"failed to parse cell '{text}' to bool type")


def parse_int(text: str) -> int:
    if not _INT_RE.match(text):
        raise DecodeError(f"failed to parse cell '{text}' to int64 type")
    value = int(text)
    if value < _INT64_MIN or value > _INT64_MAX:
        raise DecodeError(f"cell '{text}' is out of int64 range")
    return value


def parse_float(text: str) -> float:
    if not _FLOAT_RE.match(text):
        raise DecodeError(f"failed to parse cell '{text}' to float64 type")
    return float(text)


def split_list(text: str) -> list[str]:
    return [item.strip() for item in text.split(LIST_SEPARATOR) if item.strip()]


def coerce(kind: FieldKind, text: str) -> Any:
    """Convert non-empty cell text into a value of the declared kind."""
    if kind is FieldKind.BOOL:
        return parse_bool(text)
    if kind is FieldKind.INT:
        return parse_int(text)
    if kind is FieldKind.FLOAT:
        return parse_float(text)
    if kind is FieldKind.LIST:
        return split_list(text)
    return text


def sniff_and_coerce(text: str) -> Value:
    """int, then float, then bool, else the string unchanged."""
    try:
        return parse_int(text)
    except DecodeError:
        pass
    try:
        return parse_float(text)
    except DecodeError:
        pass
    try:
        return parse_bool(text)
    except DecodeError:
        return text


def set_nested(target: dict[str, Value], keys: Sequence[str], value: Value) -> None:
    """Set ``value`` under ``keys``, creating intermediate maps.

    ``set_nested(m, ["dataTypeId", "identifier"], 1)`` yields
    ``{"dataTypeId": {"identifier": 1}}``.
    """
    if not keys:
        return
    current = target
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def get_nested(source: dict[str, Any], keys: Sequence[str]) -> Any:
    """Walk ``keys`` through nested maps; missing leaves yield None.

    Raises EncodeError when an intermediate level exists but is not a map.
    """
    current: Any = source
    for i, key in enumerate(keys):
        if not isinstance(current, dict):
            raise EncodeError(
                f"failed to get the inner value from map based on the MappingTable path {'.'.join(keys)}",
                ErrorKind.SERVER_ERROR,
            )
        if key not in current:
            # lenient: an absent branch reads as an empty cell
            return None
        current = current[key]
        if i < len(keys) - 1 and current is not None and not isinstance(current, dict):
            raise EncodeError(
                f"failed to get the inner value from map based on the MappingTable path {'.'.join(keys)}",
                ErrorKind.SERVER_ERROR,
            )
    return current


def format_cell(value: Any) -> Any:
    """Prepare a typed value for writing into a cell.

    Booleans are written as ``true``/``false`` text, lists comma-joined, maps
    skipped (None). Numbers are written as numbers.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(v) for v in value)
    if isinstance(value, dict):
        return None
    return value
