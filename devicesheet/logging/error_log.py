from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.errors import ConversionError, ErrorKind

"""Validation error log buffering.

- JSON Lines, fixed schema (see ErrorRecord)
- One ``logs/errors-YYYYMMDD-HHMMSS.log`` file (UTC) per run, created lazily
- Records are buffered and written in one go by ``flush()``
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def _kind_of(error: BaseException) -> str:
    if isinstance(error, ConversionError):
        return error.kind.value
    return ErrorKind.SERVER_ERROR.value


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines.

    No thread safety: one buffer per CLI run.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend_from_errors(
        self, file: str, errors: Mapping[str, BaseException], sheets: Mapping[str, str] | None = None
    ) -> None:
        """Append one record per validation error map entry."""
        for entity, error in errors.items():
            sheet = (sheets or {}).get(entity, "")
            self.append(ErrorRecord.create(file, sheet, entity, _kind_of(error), str(error)))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
