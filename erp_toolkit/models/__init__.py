"""Domain models for erp-toolkit.

Rate guide entries and import results, PDF export options/results, config
and the import error record.
"""

from .config_models import ApiConfig, AppConfig, ImportSettings, PdfConfig
from .error_record import ErrorRecord
from .parsed_row import ParsedRow, ParseResult
from .pdf_export import Capture, PdfExportOptions, PdfExportResult, SectionBox
from .rate_guide import RateGuide, RateGuideField, RateGuidePayload

__all__ = [
    # Configuration models
    "ApiConfig",
    "AppConfig",
    "ImportSettings",
    "PdfConfig",
    # Rate guide import
    "RateGuide",
    "RateGuideField",
    "RateGuidePayload",
    "ParsedRow",
    "ParseResult",
    "ErrorRecord",
    # PDF export
    "Capture",
    "SectionBox",
    "PdfExportOptions",
    "PdfExportResult",
]
