from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .split_points import A4_HEIGHT_MM

"""PDF page writer.

The exporter talks to a small PageWriter protocol (add_page / add_jpeg /
save) so page assembly can be observed in tests. ReportlabPageWriter is the
production implementation: A4 portrait, coordinates in millimetres measured
from the top-left corner like the rest of the exporter.

Nothing reaches the disk before save().
"""

__all__ = [
    "PageWriter",
    "ReportlabPageWriter",
]


class PageWriter(Protocol):
    def add_page(self) -> None: ...

    def add_jpeg(self, data: bytes, x_mm: float, y_mm: float, width_mm: float, height_mm: float) -> None: ...

    def save(self) -> Path: ...


class ReportlabPageWriter:
    """A4 portrait document backed by reportlab's Canvas.

    The document starts with one open page; call add_page() before drawing on
    every following page.
    """

    def __init__(self, path: Path | str, title: str | None = None) -> None:
        self.path = Path(path)
        self._canvas = canvas.Canvas(str(self.path), pagesize=A4)
        if title:
            self._canvas.setTitle(title)
        self.page_count = 1

    def add_page(self) -> None:
        self._canvas.showPage()
        self.page_count += 1

    def add_jpeg(self, data: bytes, x_mm: float, y_mm: float, width_mm: float, height_mm: float) -> None:
        # reportlab's origin is bottom-left
        bottom_mm = A4_HEIGHT_MM - y_mm - height_mm
        self._canvas.drawImage(
            ImageReader(io.BytesIO(data)),
            x_mm * mm,
            bottom_mm * mm,
            width=width_mm * mm,
            height=height_mm * mm,
        )

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._canvas.save()
        return self.path
