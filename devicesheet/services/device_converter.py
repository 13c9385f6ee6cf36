from __future__ import annotations

import logging

from ..models.entities import Device
from ..models.errors import ConversionError, DecodeError, EntityValidationError, ErrorKind
from .converter import XlsxConverter, blank_rows
from .correlator import correlate
from .decoder import (
    SOURCE_NAME_COLUMN,
    best_effort_name,
    decode_auto_event,
    decode_device,
    pair_cells,
    reference_names,
)
from .reconciler import owned_by_auto_events, owned_by_devices, reconcile
from .validation import AUTO_EVENT_ERROR_PREFIX, ValidationAggregator, validate_entity

logger = logging.getLogger(__name__)


class DeviceXlsxConverter(XlsxConverter[list[Device]]):
    """Devices (+ optional AutoEvents) sheets -> list[Device]."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._devices: ValidationAggregator[Device] = ValidationAggregator()

    def convert_to_dto(self) -> None:
        sheets = self.config.sheets
        self._check_required_sheets([sheets.devices])
        self._convert_devices()
        if self.workbook.has_sheet(sheets.auto_events):
            self._convert_auto_events()
        self._merge_errors(self._devices.errors, sheets.devices)
        logger.debug(
            "Converted %d device(s), %d rejected", len(self._devices.accepted), len(self._devices.errors)
        )

    def _convert_devices(self) -> None:
        sheet = self.config.sheets.devices
        rows = self._rows(sheet)
        if len(rows) < 2:
            raise ConversionError(f"at least 2 rows need to be defined in {sheet} worksheet", ErrorKind.CONTRACT_INVALID)

        header = list(rows[0])
        # default columns are written into every row; remember the blank ones first
        skipped = blank_rows(rows)
        reconcile(self.workbook, sheet, header, self.mapping_table, len(rows), owned_by_devices)
        # re-read: reconciliation may have inserted columns
        rows = self._rows(sheet)

        for row_number, row in enumerate(rows[1:], start=2):
            if row_number in skipped:
                logger.debug("Skipping blank row %d of %s", row_number, sheet)
                continue
            try:
                device = decode_device(header, row, self.mapping_table, self.config).entity
            except DecodeError as e:
                if self.config.strict_decode:
                    raise DecodeError(
                        f"failed to unmarshal row {row_number} of {sheet} into Device", e.kind
                    ) from e
                name = best_effort_name(pair_cells(header, row, self.mapping_table)) or f"{sheet}!{row_number}"
                self._devices.record(name, e)
                continue
            self._devices.accept(device.name, device)

    def _convert_auto_events(self) -> None:
        sheet = self.config.sheets.auto_events
        rows = self._rows(sheet)
        if len(rows) < 2 or len(rows[0]) < 2:
            logger.info("%s worksheet has no data, skipped", sheet)
            return

        header = list(rows[0])
        skipped = blank_rows(rows)
        reconcile(self.workbook, sheet, header, self.mapping_table, len(rows), owned_by_auto_events)
        rows = self._rows(sheet)

        errors: dict[str, Exception] = {}
        for row_number, row in enumerate(rows[1:], start=2):
            if row_number in skipped:
                continue
            try:
                decoded = decode_auto_event(header, row, self.mapping_table)
            except DecodeError as e:
                if self.config.strict_decode:
                    raise DecodeError(
                        f"failed to unmarshal row {row_number} of {sheet} into AutoEvent", e.kind
                    ) from e
                device_names = reference_names(header, row, self.mapping_table)
                if not correlate(None, device_names, self._devices, error=e):
                    source = best_effort_name(pair_cells(header, row, self.mapping_table), SOURCE_NAME_COLUMN)
                    errors.setdefault(self._auto_event_key(source, row_number), e)
                continue

            auto_event = decoded.entity
            try:
                validate_entity(auto_event)
            except EntityValidationError as e:
                if not correlate(auto_event, decoded.references, self._devices, error=e):
                    errors.setdefault(self._auto_event_key(auto_event.source_name, row_number), e)
                continue
            correlate(auto_event, decoded.references, self._devices)

        self._merge_errors(errors, sheet)

    def _auto_event_key(self, source_name: str, row_number: int) -> str:
        if source_name:
            return AUTO_EVENT_ERROR_PREFIX + source_name
        return f"{self.config.sheets.auto_events}!{row_number}"

    def get_dtos(self) -> list[Device]:
        return self._devices.accepted
