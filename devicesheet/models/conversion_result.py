from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Conversion result model used for the SUMMARY line of the CLI."""

__all__ = [
    "ConversionResult",
]


@dataclass(frozen=True)
class ConversionResult:
    """Aggregated outcome of one import or export run."""
    file_name: str  # workbook that was read (import) or written (export)
    direction: str  # "import" | "export"
    kind: str  # "device" | "device_profile"
    converted: int  # entities in the success collection
    invalid: int  # keys in the validation error map
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def partial(self) -> bool:
        return self.invalid > 0
