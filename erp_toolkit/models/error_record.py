from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the import error log.

Each record is one problem found while importing a rate guide file. Row-level
validation messages carry the spreadsheet row number; file-level failures
(unreadable file, missing columns) use row=-1 since no single row is at fault.

The JSON Lines shape is fixed by erp_toolkit/contracts/error_log_schema.json.
"""

__all__ = [
    "ErrorRecord",
    "ROW_VALIDATION",
    "FILE_ERROR",
]

ROW_VALIDATION = "ROW_VALIDATION"
FILE_ERROR = "FILE_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: uploaded file name
        row: spreadsheet row number (header = 1). -1 for file-level errors
        error_type: classification in UPPER_SNAKE_CASE
        message: human-readable description
    """
    timestamp: str
    file: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
