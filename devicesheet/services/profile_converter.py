from __future__ import annotations

import logging

from ..models.entities import DeviceCommand, DeviceProfile, DeviceResource
from ..models.errors import ConversionError, DecodeError, EntityValidationError, ErrorKind
from .converter import XlsxConverter, blank_rows, is_blank
from .decoder import best_effort_name, decode_device_command, decode_device_info, decode_device_resource, pair_cells
from .reconciler import owned_by_device_resources, reconcile
from .validation import (
    COMMAND_ERROR_PREFIX,
    PROFILE_ERROR_PREFIX,
    RESOURCE_ERROR_PREFIX,
    ValidationAggregator,
    validate_profile,
)

"""DeviceInfo / DeviceResource / DeviceCommand sheets -> DeviceProfile.

DeviceInfo and DeviceCommand are column-oriented: column A holds the header
and each further column is one record. DeviceResource is row-oriented.

Resources and commands are validated one by one and only the valid ones are
attached to the profile. The profile itself is published only when it passes
validation; otherwise it is recorded under ``deviceProfile_<name>``.
"""

logger = logging.getLogger(__name__)


class DeviceProfileXlsxConverter(XlsxConverter[DeviceProfile | None]):

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._profile: DeviceProfile | None = None

    def convert_to_dto(self) -> None:
        sheets = self.config.sheets
        self._check_required_sheets([sheets.device_info, sheets.device_resource])

        profile = self._convert_device_info()
        profile.device_resources = self._convert_device_resources()
        if self.workbook.has_sheet(sheets.device_command):
            profile.device_commands = self._convert_device_commands()

        try:
            validate_profile(profile)
        except EntityValidationError as e:
            key = PROFILE_ERROR_PREFIX + profile.name
            self.validate_errors.setdefault(key, e)
            self.error_sheets.setdefault(key, sheets.device_info)
            return
        self._profile = profile

    def _convert_device_info(self) -> DeviceProfile:
        sheet = self.config.sheets.device_info
        cols = self._cols(sheet)
        if len(cols) < 2:
            raise ConversionError(
                f"at least 2 columns need to be defined in {sheet} worksheet", ErrorKind.CONTRACT_INVALID
            )
        try:
            return decode_device_info(cols[0], cols[1], self.mapping_table).entity
        except DecodeError as e:
            raise DecodeError(f"failed to unmarshal an xlsx column of {sheet} into DeviceProfile", e.kind) from e

    def _convert_device_resources(self) -> list[DeviceResource]:
        sheet = self.config.sheets.device_resource
        rows = self._rows(sheet)
        if len(rows) < 2:
            raise ConversionError(f"at least 2 rows need to be defined in {sheet} worksheet", ErrorKind.CONTRACT_INVALID)

        header = list(rows[0])
        skipped = blank_rows(rows)
        reconcile(self.workbook, sheet, header, self.mapping_table, len(rows), owned_by_device_resources)
        rows = self._rows(sheet)

        resources: ValidationAggregator[DeviceResource] = ValidationAggregator(
            lambda resource: RESOURCE_ERROR_PREFIX + resource.name
        )
        for row_number, row in enumerate(rows[1:], start=2):
            if row_number in skipped:
                continue
            try:
                resource = decode_device_resource(header, row, self.mapping_table).entity
            except DecodeError as e:
                if self.config.strict_decode:
                    raise DecodeError(
                        f"failed to unmarshal row {row_number} of {sheet} into DeviceResource", e.kind
                    ) from e
                name = best_effort_name(pair_cells(header, row, self.mapping_table)) or f"{sheet}!{row_number}"
                resources.record(RESOURCE_ERROR_PREFIX + name, e)
                continue
            resources.accept(RESOURCE_ERROR_PREFIX + resource.name, resource)

        self._merge_errors(resources.errors, sheet)
        return resources.accepted

    def _convert_device_commands(self) -> list[DeviceCommand]:
        sheet = self.config.sheets.device_command
        cols = self._cols(sheet)
        if len(cols) < 2:
            raise ConversionError(
                f"at least 2 columns need to be defined in {sheet} worksheet", ErrorKind.CONTRACT_INVALID
            )

        header = cols[0]
        commands: ValidationAggregator[DeviceCommand] = ValidationAggregator(
            lambda command: COMMAND_ERROR_PREFIX + command.name
        )
        for col_number, col in enumerate(cols[1:], start=2):
            if is_blank(col):
                continue
            try:
                command = decode_device_command(header, col).entity
            except DecodeError as e:
                if self.config.strict_decode:
                    raise DecodeError(
                        f"failed to unmarshal column {col_number} of {sheet} into DeviceCommand", e.kind
                    ) from e
                name = best_effort_name(pair_cells(header, col)) or f"{sheet}!{col_number}"
                commands.record(COMMAND_ERROR_PREFIX + name, e)
                continue
            commands.accept(COMMAND_ERROR_PREFIX + command.name, command)

        self._merge_errors(commands.errors, sheet)
        return commands.accepted

    def get_dtos(self) -> DeviceProfile | None:
        return self._profile
