from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Converter configuration loader.

Responsibilities:
- Load the packaged defaults (config/default.yml)
- Overlay an optional user YAML file (top-level keys replace defaults,
  ``sheets`` is merged key by key)
- Validate the merged document against schemas/converter_config.json
- Build the frozen ConverterConfig used by every converter
"""

_package_root = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = _package_root / "config" / "default.yml"
SCHEMA_PATH = _package_root / "schemas" / "converter_config.json"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class SheetNames:
    mapping_table: str
    devices: str
    auto_events: str
    device_info: str
    device_resource: str
    device_command: str


@dataclass(frozen=True)
class ProtocolSpec:
    """Protocol properties key plus the properties converted to typed values."""
    key: str
    aliases: tuple[str, ...] = ()
    int_properties: tuple[str, ...] = ()
    float_properties: tuple[str, ...] = ()
    bool_properties: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConverterConfig:
    sheets: SheetNames
    reference_device_column: str
    api_version: str
    strict_decode: bool
    protocols: dict[str, ProtocolSpec] = field(default_factory=dict)

    def resolve_protocol(self, protocol_name: str) -> ProtocolSpec | None:
        """Find the protocol whose key or alias matches ``protocol_name`` (case-insensitive)."""
        wanted = protocol_name.strip().lower()
        if not wanted:
            return None
        for spec in self.protocols.values():
            if spec.key.lower() == wanted or wanted in (a.lower() for a in spec.aliases):
                return spec
        return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or unreadable, or the data
            violates it (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(defaults)
    for key, value in overrides.items():
        if key == "sheets" and isinstance(value, dict) and isinstance(merged.get("sheets"), dict):
            merged["sheets"] = {**merged["sheets"], **value}
        else:
            merged[key] = value
    return merged


def _build(data: dict[str, Any]) -> ConverterConfig:
    protocols: dict[str, ProtocolSpec] = {}
    for key, raw in data["protocols"].items():
        raw = raw or {}
        protocols[key] = ProtocolSpec(
            key=key,
            aliases=tuple(raw.get("aliases", ())),
            int_properties=tuple(raw.get("int_properties", ())),
            float_properties=tuple(raw.get("float_properties", ())),
            bool_properties=tuple(raw.get("bool_properties", ())),
        )
    return ConverterConfig(
        sheets=SheetNames(**data["sheets"]),
        reference_device_column=data["reference_device_column"],
        api_version=data["api_version"],
        strict_decode=data["strict_decode"],
        protocols=protocols,
    )


def load_config(path: Path | None = None) -> ConverterConfig:
    """Load the defaults, overlay ``path`` when given, validate and build."""
    data = _read_yaml(DEFAULT_CONFIG_PATH)
    if path is not None:
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        data = _merge(data, _read_yaml(path))
    _validate_config_schema(data)
    return _build(data)
