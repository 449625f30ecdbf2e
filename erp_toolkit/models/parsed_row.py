from __future__ import annotations

from dataclasses import dataclass, field

from .rate_guide import RateGuidePayload

"""ParsedRow / ParseResult models for the rate guide importer.

ParsedRow is one data row of an uploaded file after coercion and validation.
The row_number refers to the spreadsheet row as a person sees it
(header = row 1, so the first data row is 2).
"""

__all__ = [
    "ParsedRow",
    "ParseResult",
]


@dataclass(frozen=True)
class ParsedRow:
    """One uploaded rate guide row and its validation outcome."""
    row_number: int  # spreadsheet row number (header = 1)
    data: RateGuidePayload
    errors: tuple[str, ...] = ()  # ordered, empty = importable

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one file.

    ``parse_error`` is set only for file-level failures, in which case
    ``rows`` is empty. Row-level problems never set it.
    """
    rows: list[ParsedRow] = field(default_factory=list)
    parse_error: str | None = None

    @classmethod
    def failed(cls, message: str) -> ParseResult:
        return cls(rows=[], parse_error=message)

    @property
    def ok(self) -> bool:
        return self.parse_error is None

    @property
    def valid_rows(self) -> list[ParsedRow]:
        return [r for r in self.rows if r.is_valid]

    @property
    def error_rows(self) -> list[ParsedRow]:
        return [r for r in self.rows if not r.is_valid]

    @property
    def has_row_errors(self) -> bool:
        return any(not r.is_valid for r in self.rows)

    def entries(self) -> list[RateGuidePayload]:
        """Payloads of every row, in file order (bulk-replace body)."""
        return [r.data for r in self.rows]
