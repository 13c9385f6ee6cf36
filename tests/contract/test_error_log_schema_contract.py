from __future__ import annotations

import json
import pathlib

import jsonschema
import pytest

from devicesheet.logging.error_log import ErrorLogBuffer
from devicesheet.models.error_record import ErrorRecord
from devicesheet.models.errors import DecodeError, EntityValidationError, MappingTableError

"""Error log JSON schema contract test."""

SCHEMA_PATH = pathlib.Path(__file__).resolve().parents[2] / "devicesheet" / "schemas" / "error_log_record.json"


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_error_log_schema_valid_example(schema):
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "devices.xlsx",
        "sheet": "Devices",
        "entity": "Sensor1",
        "error_kind": "ContractInvalid",
        "message": "Device validation error: serviceName is a required property",
    }
    jsonschema.validate(record, schema)


def test_error_log_schema_rejects_extra_key(schema):
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "devices.xlsx",
        "sheet": "Devices",
        "entity": "Sensor1",
        "error_kind": "ContractInvalid",
        "message": "bad",
        "row": 2,
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, schema)


def test_error_log_schema_rejects_unknown_kind(schema):
    record = json.loads(ErrorRecord.create("f.xlsx", "", "", "Boom", "m").to_json_line())
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, schema)


def test_flushed_records_match_schema(schema, tmp_path):
    buffer = ErrorLogBuffer(logs_dir=tmp_path)
    buffer.extend_from_errors(
        "profile.xlsx",
        {
            "deviceResource_r1": EntityValidationError("DeviceResource validation error: properties.valueType"),
            "deviceCommand_c1": DecodeError("column 'IsHidden': failed to parse cell 'maybe' to bool type"),
            "": MappingTableError("MappingTable worksheet not found in the file"),
            "other": RuntimeError("unexpected"),
        },
        {"deviceResource_r1": "DeviceResource", "deviceCommand_c1": "DeviceCommand"},
    )
    path = buffer.flush()
    for line in path.read_text(encoding="utf-8").splitlines():
        jsonschema.validate(json.loads(line), schema)
