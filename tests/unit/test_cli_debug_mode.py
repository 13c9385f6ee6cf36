from __future__ import annotations

from pathlib import Path

from devicesheet.cli.__main__ import main as cli_main


def test_cli_debug_mode(temp_workdir: Path, write_xlsx, device_mapping_rows, capsys):
    """--debug switches the package logger to DEBUG and module details show up."""
    path = write_xlsx("devices.xlsx", {
        "MappingTable": device_mapping_rows,
        "Devices": [["Name", "ServiceName", "ProtocolName"], ["d1", "svc", "modbus-rtu"]],
    })

    code = cli_main(["--debug", "import", "--kind", "device", str(path)])

    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG Inserted default columns into Devices: AdminState, OperatingState" in out


def test_cli_without_debug_hides_debug_lines(temp_workdir: Path, write_xlsx, device_mapping_rows, capsys):
    path = write_xlsx("devices.xlsx", {
        "MappingTable": device_mapping_rows,
        "Devices": [["Name", "ServiceName", "ProtocolName"], ["d1", "svc", "modbus-rtu"]],
    })
    assert cli_main(["import", "--kind", "device", str(path)]) == 0
    assert "DEBUG" not in capsys.readouterr().out
