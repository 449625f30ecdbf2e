from __future__ import annotations

from pathlib import Path

from ..models.parsed_row import ParseResult
from ..models.pdf_export import PdfExportResult

"""SUMMARY line rendering.

Every CLI command except template ends with one SUMMARY line of space-separated
``key=value`` pairs so runs can be grepped and compared:

    SUMMARY file=rates.xlsx status=ok rows=12 valid=11 errors=1 elapsed_sec=0.042
    SUMMARY pdf=customer.pdf pages=3 truncated=false height_px=7020 elapsed_sec=1.5
    SUMMARY export=rate-guide.xlsx rows=24 elapsed_sec=0.3
"""

__all__ = [
    "format_number",
    "render_import_summary",
    "render_pdf_summary",
    "render_export_summary",
]


def format_number(value: float) -> str:
    """Integral values without decimals, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_import_summary(file_name: str, result: ParseResult, elapsed_seconds: float) -> str:
    """Render the SUMMARY line of an import/preview run.

    Examples:
        >>> render_import_summary("r.csv", ParseResult.failed("No data rows found in the file."), 0.5)
        'SUMMARY file=r.csv status=failed rows=0 valid=0 errors=0 elapsed_sec=0.5'
    """
    status = "ok" if result.ok else "failed"
    valid = len(result.valid_rows)
    return (
        f"SUMMARY file={file_name} "
        f"status={status} "
        f"rows={len(result.rows)} "
        f"valid={valid} "
        f"errors={len(result.rows) - valid} "
        f"elapsed_sec={format_number(elapsed_seconds)}"
    )


def render_pdf_summary(result: PdfExportResult, elapsed_seconds: float) -> str:
    return (
        f"SUMMARY pdf={result.path.name} "
        f"pages={result.pages_written} "
        f"truncated={'true' if result.truncated else 'false'} "
        f"height_px={result.total_height_px} "
        f"elapsed_sec={format_number(elapsed_seconds)}"
    )


def render_export_summary(path: Path, rows: int, elapsed_seconds: float) -> str:
    return f"SUMMARY export={path.name} rows={rows} elapsed_sec={format_number(elapsed_seconds)}"
