"""Section-aware PDF export."""

from .exporter import export_capture_to_pdf, export_to_pdf, plan_capture
from .rasterizer import SECTION_ATTRIBUTE, PlaywrightRasterizer, RasterizationError, Rasterizer

__all__ = [
    "SECTION_ATTRIBUTE",
    "PlaywrightRasterizer",
    "RasterizationError",
    "Rasterizer",
    "export_capture_to_pdf",
    "export_to_pdf",
    "plan_capture",
]
