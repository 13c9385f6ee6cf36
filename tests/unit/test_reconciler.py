from __future__ import annotations

import pytest

from devicesheet.models.errors import ConversionError, ErrorKind
from devicesheet.models.mapping import MappingEntry, MappingTable
from devicesheet.services.mapping_loader import load_mapping_table
from devicesheet.services.reconciler import (
    owned_by_auto_events,
    owned_by_device_resources,
    owned_by_devices,
    reconcile,
)


def _devices_workbook(make_workbook, device_mapping_rows):
    return make_workbook({
        "MappingTable": device_mapping_rows,
        "Devices": [
            ["Name", "ServiceName", "ProtocolName", "Address"],
            ["d1", "svc", "modbus-rtu", "/dev/ttyUSB0"],
            ["d2", "svc", "modbus-rtu", "/dev/ttyUSB1"],
        ],
    })


def test_inserts_missing_default_columns(make_workbook, device_mapping_rows):
    wb = _devices_workbook(make_workbook, device_mapping_rows)
    table = load_mapping_table(wb)
    rows = wb.get_rows("Devices")
    header = list(rows[0])

    inserted = reconcile(wb, "Devices", header, table, len(rows), owned_by_devices)

    # ProtocolName already present; autoEvents entries belong to AutoEvents
    assert inserted == ["AdminState", "OperatingState"]
    assert header == ["Name", "ServiceName", "ProtocolName", "Address", "AdminState", "OperatingState"]
    rows = wb.get_rows("Devices")
    assert rows[0] == header
    assert rows[1][4:] == ["UNLOCKED", "UP"]
    assert rows[2][4:] == ["UNLOCKED", "UP"]


def test_reconcile_is_idempotent(make_workbook, device_mapping_rows):
    wb = _devices_workbook(make_workbook, device_mapping_rows)
    table = load_mapping_table(wb)
    rows = wb.get_rows("Devices")
    header = list(rows[0])
    reconcile(wb, "Devices", header, table, len(rows), owned_by_devices)
    first = wb.get_rows("Devices")

    header_again = list(first[0])
    inserted = reconcile(wb, "Devices", header_again, table, len(first), owned_by_devices)

    assert inserted == []
    assert wb.get_rows("Devices") == first


def test_entries_without_default_are_not_inserted(make_workbook):
    wb = make_workbook({"Devices": [["Name"], ["d1"]]})
    table = MappingTable.from_rows([("Floor", "tags.floor", "")])
    header = ["Name"]
    assert reconcile(wb, "Devices", header, table, 2, owned_by_devices) == []
    assert header == ["Name"]


def test_auto_events_routing(make_workbook, device_mapping_rows):
    wb = make_workbook({
        "MappingTable": device_mapping_rows,
        "AutoEvents": [["Interval", "SourceName", "Reference Device Name"], ["1s", "temp", "d1"]],
    })
    table = load_mapping_table(wb)
    header = ["Interval", "SourceName", "Reference Device Name"]
    inserted = reconcile(wb, "AutoEvents", header, table, 2, owned_by_auto_events)
    assert inserted == ["OnChange"]
    assert wb.get_rows("AutoEvents")[1] == ["1s", "temp", "d1", "false"]


@pytest.mark.parametrize(
    "path, devices, auto_events, resources",
    [
        ("protocolName", True, False, False),
        ("tags.floor", True, False, False),
        ("autoEvents[].interval", False, True, False),
        ("AUTOEVENTS[].onChange", False, True, False),
        ("deviceResources[].properties.valueType", False, False, True),
        ("deviceCommands[].readWrite", False, False, False),
    ],
)
def test_path_prefix_routing(path, devices, auto_events, resources):
    entry = MappingEntry("X", path, "v")
    assert owned_by_devices(entry) is devices
    assert owned_by_auto_events(entry) is auto_events
    assert owned_by_device_resources(entry) is resources


def test_workbook_failure_is_server_error(make_workbook):
    wb = make_workbook({"Devices": [["Name"], ["d1"]]})
    table = MappingTable.from_rows([("AdminState", "adminState", "UNLOCKED")])
    with pytest.raises(ConversionError) as exc:
        reconcile(wb, "Missing", ["Name"], table, 2, owned_by_devices)
    assert exc.value.kind is ErrorKind.SERVER_ERROR
