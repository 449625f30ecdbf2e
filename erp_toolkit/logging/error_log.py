from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import FILE_ERROR, ROW_VALIDATION, ErrorRecord
from ..models.parsed_row import ParseResult

"""Import error log (JSON Lines).

- fixed record schema (no extra keys), see contracts/error_log_schema.json
- one ``logs/import-errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created lazily
- records are buffered and appended on flush()
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "records_from_result",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def records_from_result(file: str, result: ParseResult) -> list[ErrorRecord]:
    """One record per file-level failure or per row error message."""
    if result.parse_error is not None:
        return [ErrorRecord.create(file, -1, FILE_ERROR, result.parse_error)]
    return [
        ErrorRecord.create(file, row.row_number, ROW_VALIDATION, message)
        for row in result.rows
        for message in row.errors
    ]


class ErrorLogBuffer:
    """In-memory buffer for error records. flush() appends JSON Lines.

    The file path is fixed on first access; no locking (single-threaded CLI).
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
            self._file_path = self._logs_dir / f"import-errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path:
        if not self._records:
            return self.file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
