from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

"""MappingTable domain model.

A MappingTable binds spreadsheet column names (the ``Object`` column of the
MappingTable sheet) to a dot-separated object path and an optional default
value. It is built once per workbook and is read-only afterwards.
"""

__all__ = [
    "PATH_SEPARATOR",
    "MappingEntry",
    "MappingTable",
    "split_path",
]

PATH_SEPARATOR = "."
COLLECTION_MARKER = "[]"


@dataclass(frozen=True)
class MappingEntry:
    """One MappingTable row.

    ``path`` examples: ``protocols.modbus-rtu.Address``, ``tags.floor``,
    ``autoEvents[].interval``, ``deviceResources[].properties.valueType``.
    """
    object_field: str
    path: str
    default_value: str = ""

    @property
    def has_default(self) -> bool:
        return self.default_value != ""

    @property
    def segments(self) -> list[str]:
        """Path segments relative to the entity (collection marker removed)."""
        return split_path(self.path)

    def starts_with(self, prefix: str) -> bool:
        return self.path.lower().startswith(prefix.lower())


def split_path(path: str) -> list[str]:
    """Split a mapping path and drop a leading ``xxx[]`` collection marker."""
    if not path:
        return []
    segments = path.split(PATH_SEPARATOR)
    if segments[0].endswith(COLLECTION_MARKER):
        segments = segments[1:]
    return segments


class MappingTable(Mapping[str, MappingEntry]):
    """Read-only ``object_field -> MappingEntry`` mapping."""

    def __init__(self, entries: Mapping[str, MappingEntry] | None = None) -> None:
        self._entries: dict[str, MappingEntry] = dict(entries or {})

    @classmethod
    def from_rows(cls, rows: list[tuple[str, str, str]]) -> MappingTable:
        """Build from ``(object, path, default)`` tuples; last one wins."""
        entries: dict[str, MappingEntry] = {}
        for obj, path, default in rows:
            entries[obj] = MappingEntry(object_field=obj, path=path, default_value=default)
        return cls(entries)

    def __getitem__(self, key: str) -> MappingEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        return f"MappingTable({list(self._entries.values())!r})"

    def default_for(self, object_field: str) -> str:
        entry = self._entries.get(object_field)
        return entry.default_value if entry else ""

    def path_for(self, object_field: str) -> str:
        entry = self._entries.get(object_field)
        return entry.path if entry else ""
