from __future__ import annotations

import pytest

from devicesheet.models.entities import (
    AutoEvent,
    Device,
    DeviceCommand,
    DeviceProfile,
    DeviceResource,
    ResourceOperation,
    ResourceProperties,
)
from devicesheet.models.errors import EncodeError, ErrorKind
from devicesheet.models.mapping import MappingTable
from devicesheet.services.encoder import (
    encode_columns,
    encode_commands,
    encode_rows,
    resolve_auto_event_cell,
    resolve_device_cell,
    resolve_device_info_cell,
    resolve_resource_cell,
)

MAPPING = MappingTable.from_rows([
    ("Port", "protocols.modbus-rtu.Address", ""),
    ("Host", "protocols.modbus-tcp.Address", ""),
    ("Floor", "tags.location.floor", ""),
    ("Vendor", "properties.vendor", ""),
    ("State", "adminState", ""),
    ("Short", "protocols.Address", ""),
    ("Interval", "autoEvents[].interval", ""),
])


@pytest.fixture()
def device() -> Device:
    return Device(
        name="Sensor1",
        service_name="svc",
        admin_state="UNLOCKED",
        labels=["a", "b"],
        protocol_name="modbus-rtu",
        protocols={"modbus-rtu": {"Address": "/dev/ttyUSB0", "UnitID": 1}},
        tags={"location": {"floor": 3}},
        properties={"vendor": "acme"},
    )


def test_device_fields_case_insensitive(device, config):
    assert resolve_device_cell(device, "name", MAPPING, config) == "Sensor1"
    assert resolve_device_cell(device, "ServiceName", MAPPING, config) == "svc"
    assert resolve_device_cell(device, "Labels", MAPPING, config) == ["a", "b"]


def test_device_mapping_paths(device, config):
    assert resolve_device_cell(device, "Port", MAPPING, config) == "/dev/ttyUSB0"
    assert resolve_device_cell(device, "Floor", MAPPING, config) == 3
    assert resolve_device_cell(device, "Vendor", MAPPING, config) == "acme"
    assert resolve_device_cell(device, "State", MAPPING, config) == "UNLOCKED"
    assert resolve_device_cell(device, "Short", MAPPING, config) is None


def test_device_protocol_path_falls_back_to_current_protocol(device, config):
    # the device has no modbus-tcp map; the last path segment is looked up in modbus-rtu
    assert resolve_device_cell(device, "Host", MAPPING, config) == "/dev/ttyUSB0"


def test_device_unmapped_header_is_protocol_property(device, config):
    assert resolve_device_cell(device, "UnitID", MAPPING, config) == 1
    assert resolve_device_cell(device, "Missing", MAPPING, config) is None


def test_device_non_map_intermediate(device, config):
    device.tags = {"location": "roof"}
    with pytest.raises(EncodeError) as exc:
        resolve_device_cell(device, "Floor", MAPPING, config)
    assert exc.value.kind is ErrorKind.SERVER_ERROR


def test_auto_event_cells(device):
    auto_event = AutoEvent(interval="1s", on_change=True, source_name="Temperature")
    column = "Reference Device Name"
    assert resolve_auto_event_cell(device, auto_event, "Interval", MAPPING, column) == "1s"
    assert resolve_auto_event_cell(device, auto_event, "onchange", MAPPING, column) is True
    assert resolve_auto_event_cell(device, auto_event, column, MAPPING, column) == "Sensor1"
    assert resolve_auto_event_cell(device, auto_event, "Other", MAPPING, column) is None


def test_resource_cells():
    resource = DeviceResource(
        name="r1",
        properties=ResourceProperties(value_type="Int16", read_write="R", units="s", scale=0.1),
        attributes={"primaryTable": "INPUT_REGISTERS", "dataTypeId": {"identifier": 8}},
        tags={"group": "hvac"},
    )
    table = MappingTable.from_rows([
        ("ValueType", "deviceResources[].properties.valueType", "String"),
        ("NodeTable", "deviceResources[].attributes.primaryTable", ""),
    ])
    assert resolve_resource_cell(resource, "Name", table) == "r1"
    assert resolve_resource_cell(resource, "ValueType", table) == "Int16"
    assert resolve_resource_cell(resource, "NodeTable", table) == "INPUT_REGISTERS"
    assert resolve_resource_cell(resource, "Units", table) == "s"
    assert resolve_resource_cell(resource, "Scale", table) == 0.1
    assert resolve_resource_cell(resource, "dataTypeId.identifier", table) == 8
    assert resolve_resource_cell(resource, "group", table) == "hvac"
    assert resolve_resource_cell(resource, "nothing", table) is None


def test_device_info_cells():
    profile = DeviceProfile(name="P", manufacturer="IOTech", labels=["a", "b"], api_version="v2")
    assert resolve_device_info_cell(profile, "ApiVersion", MappingTable(), "v3") == "v3"
    assert resolve_device_info_cell(profile, "Labels", MappingTable(), "v3") == "a, b"
    assert resolve_device_info_cell(profile, "manufacturer", MappingTable(), "v3") == "IOTech"
    assert resolve_device_info_cell(profile, "Unknown", MappingTable(), "v3") is None


def test_encode_rows_writes_and_skips_empty(make_workbook, device, config):
    wb = make_workbook({"Devices": [["Name", "Description", "Labels", "", "UnitID"]]})
    next_row = encode_rows(
        wb,
        "Devices",
        ["Name", "Description", "Labels", "", "UnitID"],
        [device, Device(name="d2")],
        lambda d, h: resolve_device_cell(d, h, MAPPING, config),
    )
    assert next_row == 4
    rows = wb.get_rows("Devices")
    assert rows[1] == ["Sensor1", "", "a,b", "", "1"]
    assert rows[2] == ["d2"]


def test_encode_rows_bools(make_workbook):
    wb = make_workbook({"AutoEvents": [["OnChange"]]})
    encode_rows(wb, "AutoEvents", ["OnChange"], [AutoEvent(on_change=False)], lambda ae, h: ae.on_change)
    assert wb.get_rows("AutoEvents")[1] == ["false"]


def test_encode_columns_device_info(make_workbook):
    header = ["ApiVersion", "Name", "Labels"]
    wb = make_workbook({"DeviceInfo": [[h] for h in header]})
    profile = DeviceProfile(name="P", labels=["x", "y"])
    encode_columns(wb, "DeviceInfo", header, [profile], lambda p, h: resolve_device_info_cell(p, h, MappingTable(), "v3"))
    assert wb.get_cols("DeviceInfo")[1] == ["v3", "P", "x, y"]


def test_encode_commands_writes_operations_downward(make_workbook):
    header = ["Name", "IsHidden", "ReadWrite", "ResourceName"]
    wb = make_workbook({"DeviceCommand": [[h] for h in header]})
    commands = [
        DeviceCommand(
            name="c1",
            read_write="RW",
            resource_operations=[ResourceOperation("r1"), ResourceOperation("r2")],
        ),
        DeviceCommand(name="c2", is_hidden=True, read_write="R", resource_operations=[ResourceOperation("r3")]),
    ]
    encode_commands(wb, "DeviceCommand", header, commands)
    cols = wb.get_cols("DeviceCommand")
    assert cols[1] == ["c1", "false", "RW", "r1", "r2"]
    assert cols[2] == ["c2", "true", "R", "r3"]
