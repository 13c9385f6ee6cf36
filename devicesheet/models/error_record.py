from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for validation error logging.

One record per entity excluded from a conversion. ``entity`` is the key used
in the validation error map (device name, or a prefixed profile/resource/
command name). File-level failures use an empty ``entity``.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Workbook filename being converted
        sheet: Sheet the failing entity was read from ("" when unknown)
        entity: Validation error map key ("" for file-level errors)
        error_kind: ErrorKind value, e.g. ContractInvalid
        message: Error description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    entity: str
    error_kind: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, entity: str, error_kind: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            entity=entity,
            error_kind=error_kind,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
