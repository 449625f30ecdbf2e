from __future__ import annotations

import math
from collections.abc import Iterable

from ..models.pdf_export import PagePlan, PageSlice, PdfSection, SectionBox

"""Page planning for the section-aware PDF exporter.

The capture is scaled to fill the A4 page width, so one PDF page covers
``canvas_width * 297 / 210`` bitmap rows. Pages are cut only at split points:

- 0 and the total height
- the top and bottom edge of every marked section
- every multiple of the page height, unless that multiple falls strictly
  inside a section (it would otherwise win over the section's top edge)

For each page the greatest split point within one page height is taken. When
there is none (a section taller than a page starts at start_y) the page is cut
at start_y + page height regardless.

Everything here is pure arithmetic on integers/floats; no image is touched.
"""

__all__ = [
    "A4_WIDTH_MM",
    "A4_HEIGHT_MM",
    "round_half_up",
    "page_height_px",
    "image_height_mm",
    "sections_to_canvas",
    "collect_split_points",
    "plan_pages",
]

A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297


def round_half_up(value: float) -> int:
    """Round like Math.round (0.5 goes up, also for negatives: -0.5 -> 0)."""
    return math.floor(value + 0.5)


def page_height_px(canvas_width: int) -> float:
    """Bitmap rows that fit on one page when the image fills the page width."""
    if canvas_width <= 0:
        raise ValueError(f"canvas width must be positive, got {canvas_width}")
    return canvas_width * A4_HEIGHT_MM / A4_WIDTH_MM


def image_height_mm(chunk_height_px: int, canvas_width: int) -> float:
    return chunk_height_px * A4_WIDTH_MM / canvas_width


def sections_to_canvas(boxes: Iterable[SectionBox], scale: float) -> list[PdfSection]:
    """Convert CSS-pixel boxes to canvas-pixel intervals."""
    sections: list[PdfSection] = []
    for box in boxes:
        top = box.top * scale
        bottom = top + box.height * scale
        sections.append(PdfSection(top=round_half_up(top), bottom=round_half_up(bottom)))
    return sections


def collect_split_points(total_height: int, page_height: float, sections: Iterable[PdfSection]) -> list[int]:
    """Sorted, de-duplicated split points within ``[0, total_height]``."""
    if page_height <= 0:
        raise ValueError(f"page height must be positive, got {page_height}")
    sections = list(sections)
    points: set[int] = {0, total_height}

    for s in sections:
        points.add(s.top)
        points.add(s.bottom)

    y = 0.0
    while y <= total_height:
        p = round_half_up(y)
        if not any(s.contains_strictly(p) for s in sections):
            points.add(p)
        y += page_height

    return sorted(p for p in points if 0 <= p <= total_height)


def plan_pages(
    total_height: int,
    page_height: float,
    split_points: list[int],
    max_pages: int,
) -> PagePlan:
    """Walk the split points greedily and return the page slices.

    Stops at the end of the capture or after max_pages slices; in the latter
    case the plan is marked truncated and the remaining rows are not exported.
    """
    if max_pages < 1:
        raise ValueError(f"max_pages must be >= 1, got {max_pages}")

    slices: list[PageSlice] = []
    start_y = 0
    while start_y < total_height and len(slices) < max_pages:
        page_end = start_y + page_height

        end_y = start_y
        for p in split_points:
            if p > page_end:
                break
            if p > start_y:
                end_y = p

        if end_y <= start_y:
            # nothing to break on: the section in the way is taller than a page
            end_y = min(round_half_up(page_end), total_height)

        slices.append(PageSlice(start_y=start_y, end_y=end_y))
        start_y = end_y

    return PagePlan(
        slices=slices,
        truncated=start_y < total_height,
        page_height_px=page_height,
        total_height_px=total_height,
    )
