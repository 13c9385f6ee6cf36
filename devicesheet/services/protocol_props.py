from __future__ import annotations

from ..config.loader import ProtocolSpec
from ..models.entities import Value
from ..models.errors import DecodeError, ErrorKind
from .values import parse_bool, parse_float, parse_int

"""Typed protocol properties.

Cells always arrive as text. Some device services expect numeric or boolean
protocol properties (e.g. modbus-rtu ``BaudRate``); the protocol table in the
configuration lists them per protocol.
"""


def to_typed_protocol_properties(spec: ProtocolSpec, properties: dict[str, Value]) -> None:
    """Convert the listed properties of ``properties`` in place.

    Raises:
        DecodeError: (ContractInvalid) a listed property does not parse
    """
    conversions = (
        (spec.int_properties, parse_int, "int"),
        (spec.float_properties, parse_float, "float"),
        (spec.bool_properties, parse_bool, "bool"),
    )
    for names, parse, type_name in conversions:
        for name in names:
            if name not in properties:
                continue
            raw = properties[name]
            if isinstance(raw, str):
                text = raw.strip()
            elif isinstance(raw, bool):
                text = "true" if raw else "false"
            else:
                text = str(raw)
            try:
                properties[name] = parse(text)
            except DecodeError as e:
                raise DecodeError(
                    f"fail to convert {name} to {type_name} for the {spec.key} protocol",
                    ErrorKind.CONTRACT_INVALID,
                ) from e
