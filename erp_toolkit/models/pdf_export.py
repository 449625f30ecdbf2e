from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image

"""Models for the section-aware PDF exporter.

Coordinates come in two spaces:
- CSS pixels (``SectionBox``): what the rasterizer measures on the page,
  relative to the captured element's top-left corner.
- canvas pixels (``PdfSection``, ``PageSlice``): CSS pixels times the capture
  scale, i.e. rows of the bitmap.
"""

__all__ = [
    "DEFAULT_BACKGROUND",
    "SectionBox",
    "Capture",
    "PdfSection",
    "PageSlice",
    "PagePlan",
    "PdfExportOptions",
    "PdfExportResult",
]

# page background of the dashboard; keeps exported pages visually consistent
DEFAULT_BACKGROUND = "#f9fafb"


@dataclass(frozen=True)
class SectionBox:
    """Bounding box of a ``data-pdf-section`` element, CSS pixels."""
    top: float
    height: float


@dataclass
class Capture:
    """Full-scroll bitmap of an element plus the section boxes inside it."""
    image: Image.Image
    sections: list[SectionBox] = field(default_factory=list)
    scale: float = 2

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class PdfSection:
    """Atomic region in canvas pixels, ``[top, bottom)``."""
    top: int
    bottom: int

    def contains_strictly(self, y: float) -> bool:
        return self.top < y < self.bottom


@dataclass(frozen=True)
class PageSlice:
    start_y: int
    end_y: int

    @property
    def height(self) -> int:
        return self.end_y - self.start_y


@dataclass(frozen=True)
class PagePlan:
    slices: list[PageSlice]
    truncated: bool  # max_pages reached before the end of the capture
    page_height_px: float
    total_height_px: int


@dataclass(frozen=True)
class PdfExportOptions:
    filename: str | Path
    scale: float = 2
    max_pages: int = 10
    background: str = DEFAULT_BACKGROUND
    jpeg_quality: int = 95


@dataclass(frozen=True)
class PdfExportResult:
    path: Path
    pages_written: int
    truncated: bool
    total_height_px: int
