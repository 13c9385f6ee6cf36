from __future__ import annotations

import logging

from ..models.entities import AutoEvent, Device
from .converter import XlsxWriter
from .encoder import encode_rows, resolve_auto_event_cell, resolve_device_cell

logger = logging.getLogger(__name__)


class DevicesXlsxWriter(XlsxWriter):
    """list[Device] -> Devices (+ AutoEvents) sheets of a template."""

    def __init__(self, devices: list[Device], *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.devices = devices

    def convert_to_xlsx(self) -> None:
        self._convert_devices()
        if self.workbook.has_sheet(self.config.sheets.auto_events):
            self._convert_auto_events()

    def _convert_devices(self) -> None:
        sheet = self.config.sheets.devices
        header = self._header_row(sheet)
        encode_rows(
            self.workbook,
            sheet,
            header,
            self.devices,
            lambda device, cell: resolve_device_cell(device, cell, self.mapping_table, self.config),
        )
        logger.debug("Wrote %d device(s) to %s", len(self.devices), sheet)

    def _convert_auto_events(self) -> None:
        sheet = self.config.sheets.auto_events
        header = self._header_row(sheet)
        reference_column = self.config.reference_device_column
        # one row per (device, auto-event) pair, in device order
        records: list[tuple[Device, AutoEvent]] = [
            (device, auto_event) for device in self.devices for auto_event in device.auto_events
        ]
        encode_rows(
            self.workbook,
            sheet,
            header,
            records,
            lambda record, cell: resolve_auto_event_cell(
                record[0], record[1], cell, self.mapping_table, reference_column
            ),
        )
