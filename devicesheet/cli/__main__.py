from __future__ import annotations

import argparse
import json
import os
import sys
import zipfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from devicesheet.config.loader import ConfigError, ConverterConfig, load_config
from devicesheet.excel.reader import SheetHeaderError, preview_sheet, read_sheet_frames
from devicesheet.logging.error_log import ErrorLogBuffer
from devicesheet.logging.init import log_summary, set_debug, setup_logging
from devicesheet.models.conversion_result import ConversionResult
from devicesheet.models.entities import Device, DeviceProfile
from devicesheet.models.error_record import ErrorRecord
from devicesheet.models.errors import ConversionError
from devicesheet.services.summary import render_summary_line
from devicesheet.services.transform import (
    KIND_DEVICE,
    KINDS,
    convert_devices_to_xlsx,
    convert_profile_to_xlsx,
    convert_xlsx,
)

"""CLI entrypoint.

Subcommands:
- import: workbook -> JSON entities (stdout or --output)
- export: JSON entities + template workbook -> filled workbook
- inspect: print each sheet's header and first rows

Exit codes: 0 every entity converted, 2 some entities rejected by
validation, 1 fatal (config, unreadable workbook, structural errors).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV = "DEVICESHEET_CONFIG"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="devicesheet", description="Device metadata <-> xlsx converter")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, help=f"Converter config YAML (default: ${CONFIG_ENV} or packaged defaults)")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Convert a workbook into JSON entities")
    imp.add_argument("--kind", choices=KINDS, required=True)
    imp.add_argument("file", type=Path, help="Source .xlsx workbook")
    imp.add_argument("--output", type=Path, help="Write JSON here instead of stdout")

    exp = sub.add_parser("export", help="Fill a template workbook from JSON entities")
    exp.add_argument("--kind", choices=KINDS, required=True)
    exp.add_argument("--template", type=Path, required=True, help="Template .xlsx with header rows")
    exp.add_argument("--input", type=Path, required=True, help="JSON list of devices, or one profile")
    exp.add_argument("--output", type=Path, required=True, help="Destination .xlsx")

    ins = sub.add_parser("inspect", help="Print sheet headers and first rows")
    ins.add_argument("file", type=Path)
    ins.add_argument("--rows", type=int, default=3, help="Data rows to show per sheet")
    return p.parse_args(argv)


def _resolve_config_path(args: argparse.Namespace) -> Path | None:
    if args.config is not None:
        return args.config
    env_value = os.getenv(CONFIG_ENV)
    return Path(env_value) if env_value else None


def _summary(file_name: str, direction: str, kind: str, converted: int, invalid: int, start: datetime) -> None:
    end = datetime.now(UTC)
    result = ConversionResult(
        file_name=file_name,
        direction=direction,
        kind=kind,
        converted=converted,
        invalid=invalid,
        start_time=start,
        end_time=end,
        elapsed_seconds=(end - start).total_seconds(),
    )
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))


def _run_import(args: argparse.Namespace, cfg: ConverterConfig, logger) -> int:
    start = datetime.now(UTC)
    source: Path = args.file
    error_log = ErrorLogBuffer()

    try:
        converter = convert_xlsx(source, args.kind, cfg)
    except ConversionError as e:
        logger.error(f"{source.name}: {e}")
        error_log.append(ErrorRecord.create(source.name, "", "", e.kind.value, str(e)))
        error_log.flush()
        _summary(source.name, "import", args.kind, 0, 0, start)
        return EXIT_FATAL

    dtos = converter.get_dtos()
    errors = converter.get_validate_errors()
    for name, err in errors.items():
        logger.error(f"{source.name}: {name}: {err}")
    error_log.extend_from_errors(source.name, errors, converter.error_sheets)
    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error records written to {log_path}")

    payload: Any
    if args.kind == KIND_DEVICE:
        payload = [device.to_dict() for device in dtos]
        converted = len(dtos)
    else:
        payload = dtos.to_dict() if dtos is not None else None
        converted = 1 if dtos is not None else 0

    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if args.output is not None:
        try:
            args.output.write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            logger.error(f"cannot write {args.output}: {e}")
            return EXIT_FATAL
        logger.info(f"wrote {converted} {args.kind} entit{'y' if converted == 1 else 'ies'} to {args.output}")
    else:
        print(text)

    _summary(source.name, "import", args.kind, converted, len(errors), start)
    return EXIT_PARTIAL_FAILURE if errors else EXIT_SUCCESS_ALL


def _load_entities(path: Path, kind: str) -> list[Device] | DeviceProfile:
    data = json.loads(path.read_text(encoding="utf-8"))
    if kind == KIND_DEVICE:
        if not isinstance(data, list):
            raise ValueError("device export input must be a JSON list")
        return [Device.from_dict(item) for item in data]
    if not isinstance(data, dict):
        raise ValueError("device_profile export input must be a JSON object")
    return DeviceProfile.from_dict(data)


def _run_export(args: argparse.Namespace, cfg: ConverterConfig, logger) -> int:
    start = datetime.now(UTC)
    try:
        entities = _load_entities(args.input, args.kind)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.error(f"{args.input}: {e}")
        return EXIT_FATAL

    try:
        if isinstance(entities, list):
            writer = convert_devices_to_xlsx(entities, args.template, cfg)
            converted = len(entities)
        else:
            writer = convert_profile_to_xlsx(entities, args.template, cfg)
            converted = 1
        try:
            writer.save(args.output)
        finally:
            writer.close()
    except ConversionError as e:
        logger.error(f"{args.template.name}: {e}")
        return EXIT_FATAL

    logger.info(f"wrote {args.output}")
    _summary(args.output.name, "export", args.kind, converted, 0, start)
    return EXIT_SUCCESS_ALL


def _inspect(path: Path, limit: int) -> int:
    if not path.exists():
        print(f"inspect: file not found: {path}")
        return EXIT_FATAL
    print(f"FILE: {path.name}")
    try:
        frames = read_sheet_frames(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        print(f"  read_error: {e}")
        return EXIT_FATAL
    for sname, df in frames.items():
        try:
            preview = preview_sheet(df, sname, limit=limit)
        except SheetHeaderError as e:
            print(f"  SHEET: {sname} error={e}")
            continue
        print(f"  SHEET: {sname} cols={preview.columns} rows={preview.total_rows}")
        print("    sample_rows=", preview.rows)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # only read sys.argv when no list is given (tests call main([...]))
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(dotenv_path=env_file, override=False)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "inspect":
        return _inspect(args.file, args.rows)

    try:
        cfg = load_config(_resolve_config_path(args))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        return _run_import(args, cfg, logger)
    return _run_export(args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
