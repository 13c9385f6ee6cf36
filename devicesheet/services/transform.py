from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

from ..config.loader import ConverterConfig, load_config
from ..excel.workbook import Workbook
from ..models.entities import Device, DeviceProfile
from ..models.errors import ConversionError, ErrorKind
from ..models.mapping import MappingTable
from .converter import XlsxConverter, XlsxWriter
from .device_converter import DeviceXlsxConverter
from .device_writer import DevicesXlsxWriter
from .mapping_loader import load_mapping_table
from .profile_converter import DeviceProfileXlsxConverter
from .profile_writer import DeviceProfileXlsxWriter

"""Import / export entry points.

- ``convert_xlsx`` opens a workbook, loads its MappingTable and runs the
  converter of the requested kind
- ``convert_devices_to_xlsx`` / ``convert_profile_to_xlsx`` fill a template
  workbook; the template's MappingTable is used when it has one
"""

logger = logging.getLogger(__name__)

KIND_DEVICE = "device"
KIND_DEVICE_PROFILE = "device_profile"
KINDS = (KIND_DEVICE, KIND_DEVICE_PROFILE)

Source = str | Path | IO[bytes] | Workbook


def _open(source: Source) -> Workbook:
    if isinstance(source, Workbook):
        return source
    return Workbook.open(source)


def _check_kind(kind: str) -> None:
    if kind not in KINDS:
        raise ConversionError(
            f"unable to parse the xlsx file to invalid DTO type '{kind}'", ErrorKind.CONTRACT_INVALID
        )


def convert_xlsx(source: Source, kind: str, config: ConverterConfig | None = None) -> XlsxConverter:
    """Convert a workbook into entities of ``kind``.

    Args:
        source: Workbook path, binary stream or opened Workbook
        kind: ``device`` or ``device_profile``
        config: Converter configuration (packaged defaults when None)

    Returns:
        The converter after ``convert_to_dto()``; query ``get_dtos()`` and
        ``get_validate_errors()``

    Raises:
        ConversionError: unknown kind, unreadable workbook, MappingTable or
            required sheet problems, fatal decode errors
    """
    _check_kind(kind)
    config = config or load_config()
    workbook = _open(source)
    mapping_table = load_mapping_table(workbook, config.sheets.mapping_table)

    converter: XlsxConverter
    if kind == KIND_DEVICE:
        converter = DeviceXlsxConverter(workbook, mapping_table, config)
    else:
        converter = DeviceProfileXlsxConverter(workbook, mapping_table, config)

    logger.debug("Converting %s as %s", workbook.name or "<stream>", kind)
    converter.convert_to_dto()
    return converter


def _template_mapping(workbook: Workbook, config: ConverterConfig) -> MappingTable:
    if workbook.has_sheet(config.sheets.mapping_table):
        return load_mapping_table(workbook, config.sheets.mapping_table)
    return MappingTable()


def convert_devices_to_xlsx(
    devices: list[Device], template: Source, config: ConverterConfig | None = None
) -> XlsxWriter:
    """Fill the Devices / AutoEvents sheets of ``template``; call ``write()`` or ``save()`` next."""
    config = config or load_config()
    workbook = _open(template)
    writer = DevicesXlsxWriter(devices, workbook, config, _template_mapping(workbook, config))
    writer.convert_to_xlsx()
    return writer


def convert_profile_to_xlsx(
    profile: DeviceProfile, template: Source, config: ConverterConfig | None = None
) -> XlsxWriter:
    """Fill the DeviceInfo / DeviceResource / DeviceCommand sheets of ``template``."""
    config = config or load_config()
    workbook = _open(template)
    writer = DeviceProfileXlsxWriter(profile, workbook, config, _template_mapping(workbook, config))
    writer.convert_to_xlsx()
    return writer
