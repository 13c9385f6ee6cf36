"""Conversion engine: mapping table, reconciliation, decoding, encoding, validation."""

from .transform import (
    KIND_DEVICE,
    KIND_DEVICE_PROFILE,
    convert_devices_to_xlsx,
    convert_profile_to_xlsx,
    convert_xlsx,
)

__all__ = [
    "KIND_DEVICE",
    "KIND_DEVICE_PROFILE",
    "convert_devices_to_xlsx",
    "convert_profile_to_xlsx",
    "convert_xlsx",
]
