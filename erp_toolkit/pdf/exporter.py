from __future__ import annotations

import logging
import math
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..models.pdf_export import Capture, PagePlan, PdfExportOptions, PdfExportResult
from ..services.progress import ProgressTracker
from .bitmap import crop, encode_jpeg
from .rasterizer import PlaywrightRasterizer, Rasterizer
from .split_points import (
    A4_WIDTH_MM,
    collect_split_points,
    image_height_mm,
    page_height_px,
    plan_pages,
    sections_to_canvas,
)
from .writer import PageWriter, ReportlabPageWriter

"""Section-aware PDF export.

export_to_pdf() captures an element, plans page breaks that never cut
through a ``data-pdf-section`` element (unless that element alone is taller
than a page) and writes one JPEG slice per A4 page.

Failure model: a rasterization error propagates before any writer exists, and
the writer only touches the disk in save(), so a failed export leaves no file.
Reaching max_pages is not an error; the result reports ``truncated=True``.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "WriterFactory",
    "plan_capture",
    "export_capture_to_pdf",
    "export_to_pdf",
]

WriterFactory = Callable[[Path], PageWriter]


def plan_capture(capture: Capture, max_pages: int) -> PagePlan:
    """Page plan for an already rasterized capture."""
    page_h = page_height_px(capture.width)
    sections = sections_to_canvas(capture.sections, capture.scale)
    points = collect_split_points(capture.height, page_h, sections)
    return plan_pages(capture.height, page_h, points, max_pages)


def export_capture_to_pdf(
    capture: Capture,
    options: PdfExportOptions,
    writer_factory: WriterFactory = ReportlabPageWriter,
) -> PdfExportResult:
    if capture.width <= 0 or capture.height <= 0:
        raise ValueError(f"empty capture ({capture.width}x{capture.height})")

    path = Path(options.filename)
    plan = plan_capture(capture, options.max_pages)
    logger.debug(
        f"pdf plan: height={plan.total_height_px}px page={plan.page_height_px:.1f}px "
        f"sections={len(capture.sections)} pages={len(plan.slices)}"
    )

    writer = writer_factory(path)
    with ProgressTracker(len(plan.slices), description=f"PDF {path.name}") as progress:
        for index, page in enumerate(plan.slices):
            with crop(capture.image, page.start_y, page.end_y) as chunk:
                data = encode_jpeg(chunk, quality=options.jpeg_quality, background=options.background)
            if index > 0:
                writer.add_page()
            writer.add_jpeg(data, 0, 0, A4_WIDTH_MM, image_height_mm(page.height, capture.width))
            progress.advance(rows=f"{page.start_y}-{page.end_y}")
    saved = writer.save()

    if plan.truncated:
        remaining = plan.total_height_px - plan.slices[-1].end_y
        logger.warning(
            f"{saved.name}: max_pages={options.max_pages} reached, "
            f"{remaining}px of content (~{math.ceil(remaining / plan.page_height_px)} page(s)) not exported"
        )
    logger.info(f"pdf written: {saved} pages={len(plan.slices)}")
    return PdfExportResult(
        path=saved,
        pages_written=len(plan.slices),
        truncated=plan.truncated,
        total_height_px=plan.total_height_px,
    )


def export_to_pdf(
    target: Any,
    options: PdfExportOptions,
    rasterizer: Rasterizer | None = None,
    writer_factory: WriterFactory = ReportlabPageWriter,
) -> PdfExportResult:
    """Capture target with rasterizer and write it as a paginated A4 PDF.

    Args:
        target: whatever the rasterizer captures (HTML text or path for the
            default PlaywrightRasterizer); a ready Capture is used as-is
        options: filename, scale (default 2), max_pages (default 10)
        rasterizer: capture backend, PlaywrightRasterizer() when omitted
        writer_factory: builds the PageWriter for the output path

    Returns:
        PdfExportResult with the page count and truncation flag

    Raises:
        RasterizationError: capture failed (no file written)
    """
    if isinstance(target, Capture):
        capture = target
    else:
        rasterizer = rasterizer or PlaywrightRasterizer()
        capture = rasterizer.capture(target, scale=options.scale, background=options.background)
    return export_capture_to_pdf(capture, options, writer_factory=writer_factory)
