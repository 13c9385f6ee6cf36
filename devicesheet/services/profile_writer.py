from __future__ import annotations

from ..models.entities import DeviceProfile
from .converter import XlsxWriter
from .encoder import (
    encode_columns,
    encode_commands,
    encode_rows,
    resolve_device_info_cell,
    resolve_resource_cell,
)


class DeviceProfileXlsxWriter(XlsxWriter):
    """DeviceProfile -> DeviceInfo / DeviceResource / DeviceCommand sheets of a template.

    DeviceInfo values go to column B. Resources are written one per row and
    commands one per column; either sheet is left untouched when the profile
    has none.
    """

    def __init__(self, profile: DeviceProfile, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.profile = profile

    def convert_to_xlsx(self) -> None:
        sheets = self.config.sheets
        header = self._header_col(sheets.device_info)
        encode_columns(
            self.workbook,
            sheets.device_info,
            header,
            [self.profile],
            lambda profile, cell: resolve_device_info_cell(
                profile, cell, self.mapping_table, self.config.api_version
            ),
        )

        if self.profile.device_resources:
            header = self._header_row(sheets.device_resource)
            encode_rows(
                self.workbook,
                sheets.device_resource,
                header,
                self.profile.device_resources,
                lambda resource, cell: resolve_resource_cell(resource, cell, self.mapping_table),
            )

        if self.profile.device_commands:
            header = self._header_col(sheets.device_command)
            encode_commands(self.workbook, sheets.device_command, header, self.profile.device_commands)
