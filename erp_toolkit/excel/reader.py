from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import IO, Any, Union

import pandas as pd
import xlrd
from openpyxl import load_workbook

from ..models.rate_guide import RateGuideField

"""Spreadsheet reader for rate guide uploads.

Row 1 is the header row, rows 2+ are data rows. Only the first worksheet is
read. Every cell comes back either as the spreadsheet's own number or as a
string; blank cells are "". Excel numbers shown with a percent format come
back as their displayed text, so "12%" typed into Excel reads as 12, not 0.12.

File-level problems are raised as RateGuideFileError subclasses; the parser
turns them into ParseResult.parse_error.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "Source",
    "RateGuideFileError",
    "UnreadableFileError",
    "EmptySheetError",
    "NoDataRowsError",
    "MissingColumnsError",
    "UnknownColumnsError",
    "DuplicateColumnsError",
    "SheetData",
    "detect_format",
    "percent_display_text",
    "read_first_sheet",
    "normalize_sheet",
]

Source = Union[str, Path, bytes, IO[bytes]]

_XLSX_MAGIC = b"PK\x03\x04"
_XLS_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
_PERCENT_DECIMALS = re.compile(r"0\.([0#]+)")


class RateGuideFileError(Exception):
    """Base class for fatal, file-level import problems."""


class UnreadableFileError(RateGuideFileError):
    def __init__(self, detail: str = "") -> None:
        super().__init__("Failed to read the file. Make sure it is a valid CSV or XLSX file.")
        self.detail = detail


class EmptySheetError(RateGuideFileError):
    def __init__(self) -> None:
        super().__init__("The file appears to be empty or unreadable.")


class NoDataRowsError(RateGuideFileError):
    def __init__(self) -> None:
        super().__init__("No data rows found in the file.")


def _quoted(headers: list[str]) -> str:
    return ", ".join(f'"{h}"' for h in headers)


class MissingColumnsError(RateGuideFileError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing columns: {_quoted(missing)}. Check that your file uses the correct headers."
        )
        self.missing = missing


class UnknownColumnsError(RateGuideFileError):
    def __init__(self, unknown: list[str]) -> None:
        super().__init__(
            f"Unknown columns: {_quoted(unknown)}. Remove them or rename them to one of the template headers."
        )
        self.unknown = unknown


class DuplicateColumnsError(RateGuideFileError):
    def __init__(self, duplicated: list[str]) -> None:
        super().__init__(f"Duplicate columns: {_quoted(duplicated)}. Each header may appear only once.")
        self.duplicated = duplicated


@dataclass
class SheetData:
    columns: list[RateGuideField | None]  # None = ignored (blank or tolerated unknown header)
    rows: list[dict[RateGuideField, Any]]  # canonical field -> raw cell


def _read_bytes(source: Source) -> tuple[bytes, str | None]:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), None
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.read_bytes(), path.name
        except OSError as e:
            raise UnreadableFileError(str(e)) from e
    data = source.read()
    return data, getattr(source, "name", None)


def detect_format(data: bytes, filename: str | None = None) -> str:
    """Return "xlsx", "xls" or "csv".

    The extension wins when it is one we know; otherwise the leading bytes
    decide and anything that is not a zip/OLE2 container is treated as CSV.
    """
    if filename:
        suffix = Path(str(filename)).suffix.lower()
        if suffix in (".xlsx", ".xlsm"):
            return "xlsx"
        if suffix == ".xls":
            return "xls"
        if suffix == ".csv":
            return "csv"
    if data.startswith(_XLSX_MAGIC):
        return "xlsx"
    if data.startswith(_XLS_MAGIC):
        return "xls"
    return "csv"


def percent_display_text(value: float, number_format: str) -> str:
    """Text Excel shows for a number under a percent format (0.125, "0.0%" -> "12.5%").

    Decimals follow the first format section; rounding is half up like Excel.
    """
    section = number_format.split(";")[0]
    m = _PERCENT_DECIMALS.search(section)
    decimals = len(m.group(1)) if m else 0
    scaled = Decimal(repr(float(value))) * 100
    quantum = Decimal(1).scaleb(-decimals)
    return f"{scaled.quantize(quantum, rounding=ROUND_HALF_UP)}%"


def _display_value(value: Any, number_format: str | None) -> Any:
    # percent-formatted numbers are stored as fractions; the sheet shows them x100
    if (
        number_format
        and "%" in number_format
        and isinstance(value, (int, float))
        and not isinstance(value, bool)
    ):
        return percent_display_text(value, number_format)
    return "" if value is None else value


def _is_blank_grid(rows: list[list[Any]]) -> bool:
    return all(v == "" for row in rows for v in row)


def _read_csv(data: bytes) -> pd.DataFrame:
    text = data.decode("utf-8-sig")
    # rows may carry more cells than the header (trailing notes); size the frame to the widest one
    width = max((len(r) for r in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        raise EmptySheetError()
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )


def _read_xlsx(data: bytes) -> pd.DataFrame:
    wb = load_workbook(io.BytesIO(data), data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = [[_display_value(c.value, c.number_format) for c in row] for row in ws.iter_rows()]
    finally:
        wb.close()
    if _is_blank_grid(rows):
        raise EmptySheetError()
    return pd.DataFrame(rows, dtype=object)


def _read_xls(data: bytes) -> pd.DataFrame:
    book = xlrd.open_workbook(file_contents=data, formatting_info=True)
    sheet = book.sheet_by_index(0)
    rows: list[list[Any]] = []
    for r in range(sheet.nrows):
        row: list[Any] = []
        for c in range(sheet.ncols):
            cell = sheet.cell(r, c)
            if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
                row.append("")
            elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                row.append(bool(cell.value))
            elif cell.ctype in (xlrd.XL_CELL_NUMBER, xlrd.XL_CELL_DATE):
                fmt = book.format_map[book.xf_list[cell.xf_index].format_key].format_str
                row.append(_display_value(cell.value, fmt))
            else:
                row.append(cell.value)
        rows.append(row)
    if _is_blank_grid(rows):
        raise EmptySheetError()
    return pd.DataFrame(rows, dtype=object)


_READERS = {
    "csv": _read_csv,
    "xlsx": _read_xlsx,
    "xls": _read_xls,
}


def read_first_sheet(source: Source, filename: str | None = None) -> pd.DataFrame:
    """Read the first worksheet without a header row applied.

    Blank lines are kept in every format, so data row N is spreadsheet row N
    whatever the file type. Percent-formatted Excel numbers come back as the
    text the sheet displays ("12.00%"), not as the stored fraction.

    Parameters
    ----------
    source: path, raw bytes or binary file object
    filename: original file name (uploads arrive as bytes), used for format detection
    """
    data, name = _read_bytes(source)
    fmt = detect_format(data, filename or name)
    logger.debug(f"reading {filename or name or '<bytes>'} as {fmt} ({len(data)} bytes)")

    if not data.strip():
        raise EmptySheetError()

    try:
        df = _READERS[fmt](data)
    except RateGuideFileError:
        raise
    except pd.errors.EmptyDataError as e:
        raise EmptySheetError() from e
    except Exception as e:
        raise UnreadableFileError(str(e)) from e

    if df.empty:
        raise EmptySheetError()
    # short CSV lines and blank Excel cells arrive as NaN/None
    return df.astype(object).where(df.notna(), "")


def normalize_sheet(df: pd.DataFrame, allow_unknown_columns: bool = False) -> SheetData:
    """Apply row 1 as header and map it onto the canonical fields.

    Steps:
    1. At least one row below the header must exist
    2. Header cells are trimmed and lowercased, blank cells are ignored
    3. Unknown headers are rejected (unless allowed), duplicates always are
    4. All nine canonical columns must be present
    """
    header_cells = ["" if v is None else str(v) for v in df.iloc[0].tolist()]
    if df.shape[0] < 2:
        raise NoDataRowsError()

    columns: list[RateGuideField | None] = []
    unknown: list[str] = []
    seen: set[RateGuideField] = set()
    duplicated: list[str] = []
    for cell in header_cells:
        if cell.strip() == "":
            columns.append(None)
            continue
        mapped = RateGuideField.from_header(cell)
        if mapped is None:
            unknown.append(cell.strip())
            columns.append(None)
            continue
        if mapped in seen:
            duplicated.append(mapped.header)
            columns.append(None)
            continue
        seen.add(mapped)
        columns.append(mapped)

    missing = [f.header for f in RateGuideField if f not in seen]
    if missing:
        raise MissingColumnsError(missing)
    if duplicated:
        raise DuplicateColumnsError(duplicated)
    if unknown:
        if not allow_unknown_columns:
            raise UnknownColumnsError(unknown)
        logger.warning(f"ignoring unknown columns: {unknown}")

    rows: list[dict[RateGuideField, Any]] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        row: dict[RateGuideField, Any] = {}
        for col, val in zip(columns, raw, strict=False):
            if col is not None:
                row[col] = val
        rows.append(row)
    return SheetData(columns=columns, rows=rows)
