from __future__ import annotations

import logging
import math
from pathlib import Path

import pandas as pd

from ..models.parsed_row import ParsedRow, ParseResult
from ..models.rate_guide import CoercionKind, RateGuideField, RateGuidePayload
from ..services.ratios import ratio_pair_is_balanced, ratio_sum
from .coercion import coerce
from .reader import RateGuideFileError, Source, normalize_sheet, read_first_sheet

"""Rate guide bulk-import parser.

parse_rate_guide_file() turns an uploaded CSV/XLS/XLSX file into ParsedRows
without persisting anything. The caller previews the rows and, if none carries
errors, sends their payloads to the bulk-replace endpoint.

Validation runs per row and accumulates every failing check. Rows in which no
field produced a finite number are spreadsheet artifacts (trailing blank
lines, formatted-but-empty rows) and are dropped after validation.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "FIRST_DATA_ROW",
    "TEMPLATE_FILENAME",
    "TEMPLATE_SHEET_NAME",
    "TEMPLATE_EXAMPLE_ROW",
    "validate_payload",
    "build_payload",
    "parse_rate_guide_file",
    "write_rate_guide_template",
]

FIRST_DATA_ROW = 2  # header occupies row 1

TEMPLATE_FILENAME = "rate-guide-template.xlsx"
TEMPLATE_SHEET_NAME = "Rate Guide"
TEMPLATE_EXAMPLE_ROW: list[object] = [
    90, "12.00%", "6.00%", "33.33%", "66.67%", "75.00%", "25.00%", "50000000", "99999999.99",
]


def _js_number(value: float) -> str:
    # 100.0 -> "100", 99.99 -> "99.99"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _is_whole(value: int | float) -> bool:
    return isinstance(value, int) or float(value).is_integer()


def validate_payload(data: RateGuidePayload) -> list[str]:
    """Return every validation failure for one entry, in a stable order."""
    errors: list[str] = []

    tenor = data.tenor
    if not math.isfinite(tenor) or tenor <= 0 or not _is_whole(tenor):
        errors.append("Tenor must be a positive whole number")

    for f in RateGuideField:
        if f.kind is not CoercionKind.PERCENT:
            continue
        v = data.get(f)
        if not math.isfinite(v) or v < 0:
            errors.append(f"{f.label} must be a non-negative number")

    min_amt, max_amt = data.minimum_amount, data.maximum_amount
    if not math.isfinite(min_amt) or min_amt < 0:
        errors.append("Minimum Amount must be a non-negative number")
    if not math.isfinite(max_amt) or max_amt < 0:
        errors.append("Maximum Amount must be a non-negative number")
    if math.isfinite(min_amt) and math.isfinite(max_amt) and max_amt <= min_amt:
        errors.append("Maximum Amount must be greater than Minimum Amount")

    e, c = data.ethica_ratio, data.customer_ratio
    if math.isfinite(e) and math.isfinite(c) and not ratio_pair_is_balanced(e, c):
        errors.append(f"Ethica + Customer Ratio must equal 100% (got {_js_number(ratio_sum(e, c))}%)")

    ae, ac = data.above_target_ethica_ratio, data.above_target_customer_ratio
    if math.isfinite(ae) and math.isfinite(ac) and not ratio_pair_is_balanced(ae, ac):
        errors.append(
            f"AT Ethica + AT Customer Ratio must equal 100% (got {_js_number(ratio_sum(ae, ac))}%)"
        )

    return errors


def build_payload(raw_row: dict[RateGuideField, object]) -> RateGuidePayload:
    """Coerce one normalized row; absent cells count as blank."""
    values = {f.attr: coerce(f.kind, raw_row.get(f, "")) for f in RateGuideField}
    return RateGuidePayload(**values)


def parse_rate_guide_file(
    source: Source,
    filename: str | None = None,
    *,
    allow_unknown_columns: bool = False,
) -> ParseResult:
    """Parse and validate an uploaded rate guide file.

    Args:
        source: path, raw bytes or binary file object
        filename: original upload name, used to tell CSV from Excel
        allow_unknown_columns: tolerate (and ignore) headers outside the nine

    Returns:
        ParseResult. parse_error is set only for file-level failures, and
        then rows is empty.
    """
    label = filename or (str(source) if isinstance(source, (str, Path)) else "<upload>")
    try:
        df = read_first_sheet(source, filename=filename)
        sheet = normalize_sheet(df, allow_unknown_columns=allow_unknown_columns)
    except RateGuideFileError as e:
        logger.debug(f"{label}: {e}")
        return ParseResult.failed(str(e))

    parsed: list[ParsedRow] = []
    for offset, raw_row in enumerate(sheet.rows):
        row_number = FIRST_DATA_ROW + offset
        data = build_payload(raw_row)
        parsed.append(ParsedRow(row_number=row_number, data=data, errors=tuple(validate_payload(data))))

    rows = [r for r in parsed if r.data.has_any_value()]
    dropped = len(parsed) - len(rows)
    if dropped:
        logger.debug(f"{label}: dropped {dropped} blank row(s)")

    invalid = sum(1 for r in rows if not r.is_valid)
    logger.info(f"{label}: parsed rows={len(rows)} valid={len(rows) - invalid} errors={invalid}")
    return ParseResult(rows=rows, parse_error=None)


def write_rate_guide_template(path: Path | str = TEMPLATE_FILENAME) -> Path:
    """Write the reference spreadsheet (headers + one example row)."""
    path = Path(path)
    headers = [f.label for f in RateGuideField]
    df = pd.DataFrame([TEMPLATE_EXAMPLE_ROW], columns=headers)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=TEMPLATE_SHEET_NAME, index=False)
    logger.info(f"template written: {path}")
    return path
