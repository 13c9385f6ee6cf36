from __future__ import annotations
import pytest
from pathlib import Path
from devicesheet.config.loader import ConfigError, load_config


def _write(temp_workdir: Path, text: str) -> Path:
    p = temp_workdir / "config" / "config.yml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_defaults():
    cfg = load_config()
    assert cfg.sheets.devices == "Devices"
    assert cfg.sheets.mapping_table == "MappingTable"
    assert cfg.reference_device_column == "Reference Device Name"
    assert cfg.api_version == "v3"
    assert cfg.strict_decode is True
    assert "modbus-rtu" in cfg.protocols
    assert "UnitID" in cfg.protocols["modbus-rtu"].int_properties


def test_user_file_overrides_and_merges_sheets(temp_workdir: Path):
    path = _write(temp_workdir, "strict_decode: false\nsheets:\n  devices: Equipment\n")
    cfg = load_config(path)
    assert cfg.strict_decode is False
    assert cfg.sheets.devices == "Equipment"
    assert cfg.sheets.auto_events == "AutoEvents"


def test_user_protocols_replace_defaults(temp_workdir: Path):
    path = _write(temp_workdir, "protocols:\n  custom:\n    aliases: [my-proto]\n    bool_properties: [Secure]\n")
    cfg = load_config(path)
    assert list(cfg.protocols) == ["custom"]
    assert cfg.resolve_protocol("MY-PROTO").bool_properties == ("Secure",)


def test_resolve_protocol_case_insensitive_and_aliases():
    cfg = load_config()
    assert cfg.resolve_protocol("Modbus-RTU").key == "modbus-rtu"
    assert cfg.resolve_protocol("usb-camera").key == "usb"
    assert cfg.resolve_protocol("websocket").key == "ws"
    assert cfg.resolve_protocol("zigbee") is None
    assert cfg.resolve_protocol("  ") is None


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_extra_field(temp_workdir: Path):
    path = _write(temp_workdir, "extra_field: not_allowed\n")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "config validation failed" in str(e.value)


def test_load_config_wrong_type(temp_workdir: Path):
    path = _write(temp_workdir, "strict_decode: sometimes\n")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "config validation failed" in str(e.value)


def test_load_config_unknown_sheet_key(temp_workdir: Path):
    path = _write(temp_workdir, "sheets:\n  gadgets: Gadgets\n")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = _write(temp_workdir, "sheets: [unclosed\n")
    with pytest.raises(ConfigError) as e:
        load_config(path)
    assert "invalid yaml" in str(e.value)


def test_load_config_non_mapping_root(temp_workdir: Path):
    path = _write(temp_workdir, "- a\n- b\n")
    with pytest.raises(ConfigError):
        load_config(path)
