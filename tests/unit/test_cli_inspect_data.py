from __future__ import annotations

from pathlib import Path

from devicesheet.cli.__main__ import EXIT_FATAL, main as cli_main


def test_cli_inspect(temp_workdir: Path, write_xlsx, device_mapping_rows, capsys):
    """inspect prints each sheet's header, row count and a sample without converting."""
    path = write_xlsx("devices.xlsx", {
        "MappingTable": device_mapping_rows,
        "Devices": [["Name", "Address"], ["d1", "/dev/a"], ["d2", "/dev/b"]],
        "Empty": [],
    })

    code = cli_main(["inspect", str(path), "--rows", "1"])

    out = capsys.readouterr().out
    assert code == 0
    assert "FILE: devices.xlsx" in out
    assert "SHEET: Devices cols=['Name', 'Address'] rows=2" in out
    assert "sample_rows= [{'Name': 'd1', 'Address': '/dev/a'}]" in out
    assert "SHEET: Empty error=" in out


def test_cli_inspect_missing_file(temp_workdir: Path, capsys):
    code = cli_main(["inspect", str(temp_workdir / "nope.xlsx")])
    assert code == EXIT_FATAL
    assert "file not found" in capsys.readouterr().out


def test_cli_inspect_unreadable_file(temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "bad.xlsx"
    bad.write_bytes(b"not a zip")
    code = cli_main(["inspect", str(bad)])
    assert code == EXIT_FATAL
    assert "read_error" in capsys.readouterr().out
