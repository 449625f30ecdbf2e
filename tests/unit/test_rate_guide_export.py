from __future__ import annotations

import math
from pathlib import Path

from openpyxl import load_workbook

from erp_toolkit.excel.rate_guide_export import (
    COLUMN_WIDTHS,
    export_rate_guides_to_csv,
    export_rate_guides_to_xlsx,
    format_amount,
    format_percent,
    rate_guides_to_frame,
)
from erp_toolkit.models.rate_guide import RateGuide

API_ITEM = {
    "id": "7f0c",
    "tenor": 90,
    "indicativeRate": "12.0000",
    "minimumSpread": "6.0000",
    "ethicaRatio": "33.3300",
    "customerRatio": "66.6700",
    "aboveTargetEthicaRatio": "75.0000",
    "aboveTargetCustomerRatio": "25.0000",
    "minimumAmount": "50000000.00",
    "maximumAmount": "99999999.99",
    "createdAt": "2026-01-05T10:00:00.000Z",
}


def test_format_percent_and_amount():
    assert format_percent(12) == "12.00%"
    assert format_percent("6.5") == "6.50%"
    assert format_percent(math.nan) == "0.00%"
    assert format_amount(50_000_000) == "50,000,000.00"
    assert format_amount("99999999.99") == "99,999,999.99"
    assert format_amount(None) == "0.00"


def test_frame_uses_display_headers_and_text_formats():
    df = rate_guides_to_frame([RateGuide.from_api(API_ITEM)])
    assert list(df.columns)[0] == "Tenor"
    assert list(df.columns)[-1] == "Maximum Amount"
    row = df.iloc[0].tolist()
    assert row == [90, "12.00%", "6.00%", "33.33%", "66.67%", "75.00%", "25.00%", "50,000,000.00", "99,999,999.99"]


def test_export_xlsx_sets_sheet_and_widths(tmp_path: Path):
    path = export_rate_guides_to_xlsx([RateGuide.from_api(API_ITEM)], tmp_path / "out.xlsx")
    wb = load_workbook(path)
    ws = wb["Rate Guide"]
    assert ws["A1"].value == "Tenor"
    assert ws["A2"].value == 90
    assert ws["H2"].value == "50,000,000.00"
    assert ws.column_dimensions["A"].width == COLUMN_WIDTHS[0]
    assert ws.column_dimensions["I"].width == COLUMN_WIDTHS[8]


def test_export_csv_quotes_amounts(tmp_path: Path):
    path = export_rate_guides_to_csv([RateGuide.from_api(API_ITEM)], tmp_path / "out.csv")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Tenor,Indicative Rate,")
    assert lines[1] == '90,12.00%,6.00%,33.33%,66.67%,75.00%,25.00%,"50,000,000.00","99,999,999.99"'


def test_export_empty_list_writes_header_only(tmp_path: Path):
    path = export_rate_guides_to_csv([], tmp_path / "empty.csv")
    assert len(path.read_text(encoding="utf-8").splitlines()) == 1
