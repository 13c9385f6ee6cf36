from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from .fields import FieldKind, FieldSpec, field_registry

"""Domain entities exchanged with the spreadsheet.

These mirror the device-management platform's metadata DTOs. Scalar attributes
are listed in each class's ``FIELDS`` registry under their spreadsheet column
name; open-ended containers (protocols, tags, attributes, properties) are plain
dicts holding ``Value`` items.

``to_dict`` / ``from_dict`` use the platform's camelCase JSON shape. They feed
schema validation and the CLI, not a wire codec.
"""

__all__ = [
    "Value",
    "AutoEvent",
    "Device",
    "ResourceProperties",
    "DeviceResource",
    "ResourceOperation",
    "DeviceCommand",
    "DeviceProfile",
]

# str | int | float | bool | nested map
Value = Union[str, int, float, bool, dict[str, "Value"]]


def _prune(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None, empty string or empty container."""
    return {k: v for k, v in data.items() if v is not None and v != "" and v != [] and v != {}}


@dataclass
class AutoEvent:
    interval: str = ""
    on_change: bool = False
    source_name: str = ""

    FIELDS: ClassVar[dict[str, FieldSpec]] = field_registry(
        FieldSpec("Interval", "interval"),
        FieldSpec("OnChange", "on_change", FieldKind.BOOL),
        FieldSpec("SourceName", "source_name"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval": self.interval,
            "onChange": self.on_change,
            "sourceName": self.source_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutoEvent:
        return cls(
            interval=data.get("interval", ""),
            on_change=bool(data.get("onChange", False)),
            source_name=data.get("sourceName", ""),
        )


@dataclass
class Device:
    id: str = ""
    name: str = ""
    description: str = ""
    admin_state: str = ""
    operating_state: str = ""
    last_connected: int = 0
    last_reported: int = 0
    labels: list[str] = field(default_factory=list)
    location: Any = None
    tags: dict[str, Value] = field(default_factory=dict)
    service_name: str = ""
    profile_name: str = ""
    auto_events: list[AutoEvent] = field(default_factory=list)
    protocol_name: str = ""
    protocols: dict[str, dict[str, Value]] = field(default_factory=dict)
    properties: dict[str, Value] = field(default_factory=dict)

    FIELDS: ClassVar[dict[str, FieldSpec]] = field_registry(
        FieldSpec("Id", "id"),
        FieldSpec("Name", "name"),
        FieldSpec("Description", "description"),
        FieldSpec("AdminState", "admin_state"),
        FieldSpec("OperatingState", "operating_state"),
        FieldSpec("LastConnected", "last_connected", FieldKind.INT),
        FieldSpec("LastReported", "last_reported", FieldKind.INT),
        FieldSpec("Labels", "labels", FieldKind.LIST),
        FieldSpec("Location", "location", FieldKind.ANY),
        FieldSpec("ServiceName", "service_name"),
        FieldSpec("ProfileName", "profile_name"),
        FieldSpec("ProtocolName", "protocol_name"),
    )

    def to_dict(self) -> dict[str, Any]:
        return _prune({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "adminState": self.admin_state,
            "operatingState": self.operating_state,
            "lastConnected": self.last_connected or None,
            "lastReported": self.last_reported or None,
            "labels": list(self.labels),
            "location": self.location,
            "tags": self.tags,
            "serviceName": self.service_name,
            "profileName": self.profile_name,
            "autoEvents": [ae.to_dict() for ae in self.auto_events],
            "protocolName": self.protocol_name,
            "protocols": self.protocols,
            "properties": self.properties,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Device:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            admin_state=data.get("adminState", ""),
            operating_state=data.get("operatingState", ""),
            last_connected=int(data.get("lastConnected", 0)),
            last_reported=int(data.get("lastReported", 0)),
            labels=list(data.get("labels") or []),
            location=data.get("location"),
            tags=dict(data.get("tags") or {}),
            service_name=data.get("serviceName", ""),
            profile_name=data.get("profileName", ""),
            auto_events=[AutoEvent.from_dict(ae) for ae in data.get("autoEvents") or []],
            protocol_name=data.get("protocolName", ""),
            protocols={k: dict(v) for k, v in (data.get("protocols") or {}).items()},
            properties=dict(data.get("properties") or {}),
        )


@dataclass
class ResourceProperties:
    value_type: str = ""
    read_write: str = ""
    units: str = ""
    minimum: float | None = None
    maximum: float | None = None
    default_value: str = ""
    mask: int | None = None
    shift: int | None = None
    scale: float | None = None
    offset: float | None = None
    base: float | None = None
    assertion: str = ""
    media_type: str = ""

    FIELDS: ClassVar[dict[str, FieldSpec]] = field_registry(
        FieldSpec("ValueType", "value_type"),
        FieldSpec("ReadWrite", "read_write"),
        FieldSpec("Units", "units"),
        FieldSpec("Minimum", "minimum", FieldKind.FLOAT),
        FieldSpec("Maximum", "maximum", FieldKind.FLOAT),
        FieldSpec("DefaultValue", "default_value"),
        FieldSpec("Mask", "mask", FieldKind.INT),
        FieldSpec("Shift", "shift", FieldKind.INT),
        FieldSpec("Scale", "scale", FieldKind.FLOAT),
        FieldSpec("Offset", "offset", FieldKind.FLOAT),
        FieldSpec("Base", "base", FieldKind.FLOAT),
        FieldSpec("Assertion", "assertion"),
        FieldSpec("MediaType", "media_type"),
    )

    def to_dict(self) -> dict[str, Any]:
        return _prune({
            "valueType": self.value_type,
            "readWrite": self.read_write,
            "units": self.units,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "defaultValue": self.default_value,
            "mask": self.mask,
            "shift": self.shift,
            "scale": self.scale,
            "offset": self.offset,
            "base": self.base,
            "assertion": self.assertion,
            "mediaType": self.media_type,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceProperties:
        return cls(
            value_type=data.get("valueType", ""),
            read_write=data.get("readWrite", ""),
            units=data.get("units", ""),
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
            default_value=data.get("defaultValue", ""),
            mask=data.get("mask"),
            shift=data.get("shift"),
            scale=data.get("scale"),
            offset=data.get("offset"),
            base=data.get("base"),
            assertion=data.get("assertion", ""),
            media_type=data.get("mediaType", ""),
        )


@dataclass
class DeviceResource:
    description: str = ""
    name: str = ""
    is_hidden: bool = False
    tag: str = ""
    tags: dict[str, Value] = field(default_factory=dict)
    properties: ResourceProperties = field(default_factory=ResourceProperties)
    attributes: dict[str, Value] = field(default_factory=dict)

    FIELDS: ClassVar[dict[str, FieldSpec]] = field_registry(
        FieldSpec("Description", "description"),
        FieldSpec("Name", "name"),
        FieldSpec("IsHidden", "is_hidden", FieldKind.BOOL),
        FieldSpec("Tag", "tag"),
    )

    def to_dict(self) -> dict[str, Any]:
        data = _prune({
            "description": self.description,
            "name": self.name,
            "tag": self.tag,
            "tags": self.tags,
            "attributes": self.attributes,
        })
        data["isHidden"] = self.is_hidden
        data["properties"] = self.properties.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceResource:
        return cls(
            description=data.get("description", ""),
            name=data.get("name", ""),
            is_hidden=bool(data.get("isHidden", False)),
            tag=data.get("tag", ""),
            tags=dict(data.get("tags") or {}),
            properties=ResourceProperties.from_dict(data.get("properties") or {}),
            attributes=dict(data.get("attributes") or {}),
        )


@dataclass
class ResourceOperation:
    device_resource: str = ""
    default_value: str = ""
    mappings: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"deviceResource": self.device_resource}
        data.update(_prune({"defaultValue": self.default_value, "mappings": self.mappings}))
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceOperation:
        return cls(
            device_resource=data.get("deviceResource", ""),
            default_value=data.get("defaultValue", ""),
            mappings=dict(data.get("mappings") or {}),
        )


@dataclass
class DeviceCommand:
    name: str = ""
    is_hidden: bool = False
    read_write: str = ""
    resource_operations: list[ResourceOperation] = field(default_factory=list)

    FIELDS: ClassVar[dict[str, FieldSpec]] = field_registry(
        FieldSpec("Name", "name"),
        FieldSpec("IsHidden", "is_hidden", FieldKind.BOOL),
        FieldSpec("ReadWrite", "read_write"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "isHidden": self.is_hidden,
            "readWrite": self.read_write,
            "resourceOperations": [op.to_dict() for op in self.resource_operations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceCommand:
        return cls(
            name=data.get("name", ""),
            is_hidden=bool(data.get("isHidden", False)),
            read_write=data.get("readWrite", ""),
            resource_operations=[
                ResourceOperation.from_dict(op) for op in data.get("resourceOperations") or []
            ],
        )


@dataclass
class DeviceProfile:
    api_version: str = ""
    id: str = ""
    name: str = ""
    manufacturer: str = ""
    description: str = ""
    model: str = ""
    labels: list[str] = field(default_factory=list)
    device_resources: list[DeviceResource] = field(default_factory=list)
    device_commands: list[DeviceCommand] = field(default_factory=list)

    FIELDS: ClassVar[dict[str, FieldSpec]] = field_registry(
        FieldSpec("ApiVersion", "api_version"),
        FieldSpec("Id", "id"),
        FieldSpec("Name", "name"),
        FieldSpec("Manufacturer", "manufacturer"),
        FieldSpec("Description", "description"),
        FieldSpec("Model", "model"),
        FieldSpec("Labels", "labels", FieldKind.LIST),
    )

    def to_dict(self) -> dict[str, Any]:
        data = _prune({
            "apiVersion": self.api_version,
            "id": self.id,
            "name": self.name,
            "manufacturer": self.manufacturer,
            "description": self.description,
            "model": self.model,
            "labels": list(self.labels),
        })
        data["deviceResources"] = [r.to_dict() for r in self.device_resources]
        data["deviceCommands"] = [c.to_dict() for c in self.device_commands]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceProfile:
        return cls(
            api_version=data.get("apiVersion", ""),
            id=data.get("id", ""),
            name=data.get("name", ""),
            manufacturer=data.get("manufacturer", ""),
            description=data.get("description", ""),
            model=data.get("model", ""),
            labels=list(data.get("labels") or []),
            device_resources=[DeviceResource.from_dict(r) for r in data.get("deviceResources") or []],
            device_commands=[DeviceCommand.from_dict(c) for c in data.get("deviceCommands") or []],
        )
