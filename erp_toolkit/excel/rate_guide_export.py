from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from pathlib import Path

import pandas as pd
from openpyxl.utils import get_column_letter

from ..models.rate_guide import CoercionKind, RateGuide, RateGuideField

"""Rate guide export (XLSX / CSV).

Output uses the same display headers and text formats as the import template,
so an exported file can be edited and uploaded again unchanged.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "COLUMN_WIDTHS",
    "format_percent",
    "format_amount",
    "rate_guides_to_frame",
    "export_rate_guides_to_xlsx",
    "export_rate_guides_to_csv",
]

SHEET_NAME = "Rate Guide"

# characters, one per column in RateGuideField order
COLUMN_WIDTHS = (8, 16, 16, 14, 16, 16, 18, 22, 22)


def _to_number(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return math.nan


def format_percent(value: object) -> str:
    n = _to_number(value)
    return "0.00%" if math.isnan(n) else f"{n:.2f}%"


def format_amount(value: object) -> str:
    n = _to_number(value)
    return "0.00" if math.isnan(n) else f"{n:,.2f}"


def _cell(field: RateGuideField, value: object) -> object:
    if field.kind is CoercionKind.INTEGER:
        n = _to_number(value)
        return int(n) if math.isfinite(n) and n.is_integer() else n
    if field.kind is CoercionKind.PERCENT:
        return format_percent(value)
    return format_amount(value)


def rate_guides_to_frame(guides: Iterable[RateGuide]) -> pd.DataFrame:
    records = [[_cell(f, g.payload.get(f)) for f in RateGuideField] for g in guides]
    return pd.DataFrame(records, columns=[f.label for f in RateGuideField])


def export_rate_guides_to_xlsx(guides: Iterable[RateGuide], path: Path | str = "rate-guide.xlsx") -> Path:
    path = Path(path)
    df = rate_guides_to_frame(guides)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        ws = writer.sheets[SHEET_NAME]
        for idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width
    logger.info(f"exported {len(df)} rate guide(s) to {path}")
    return path


def export_rate_guides_to_csv(guides: Iterable[RateGuide], path: Path | str = "rate-guide.csv") -> Path:
    path = Path(path)
    df = rate_guides_to_frame(guides)
    # amounts contain thousands separators, so they end up quoted
    df.to_csv(path, index=False, lineterminator="\n", encoding="utf-8")
    logger.info(f"exported {len(df)} rate guide(s) to {path}")
    return path
