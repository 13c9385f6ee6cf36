from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Per-entity field registry.

Each entity class declares which spreadsheet column names map straight onto
one of its scalar attributes and how the cell text is coerced. Column
resolution looks a header up here first and only falls through to the
MappingTable path when no field matches.
"""

__all__ = [
    "FieldKind",
    "FieldSpec",
    "field_registry",
    "find_field",
]


class FieldKind(Enum):
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    LIST = "list"  # comma separated
    ANY = "any"  # stored as the raw string


@dataclass(frozen=True)
class FieldSpec:
    name: str  # column header form, e.g. "AdminState"
    attr: str  # dataclass attribute, e.g. "admin_state"
    kind: FieldKind = FieldKind.STRING


def field_registry(*specs: FieldSpec) -> dict[str, FieldSpec]:
    return {spec.name: spec for spec in specs}


def find_field(
    fields: dict[str, FieldSpec], name: str, case_sensitive: bool = True
) -> FieldSpec | None:
    """Return the FieldSpec registered under ``name``.

    Import matches headers exactly; export and single-segment mapping paths
    match case-insensitively.
    """
    spec = fields.get(name)
    if spec is not None or case_sensitive:
        return spec
    lowered = name.lower()
    for candidate in fields.values():
        if candidate.name.lower() == lowered:
            return candidate
    return None

