from __future__ import annotations

import re
from pathlib import Path

from PIL import Image, ImageDraw

from erp_toolkit.models.pdf_export import Capture, PdfExportOptions, SectionBox
from erp_toolkit.pdf.exporter import export_to_pdf, plan_capture

"""Section-aware export written through reportlab to a real file.

The capture is drawn directly with Pillow so no browser is needed; the
sections mimic three stacked dashboard cards.
"""

PAGE_RE = re.compile(rb"/Type\s*/Page\b")


def _dashboard_capture() -> Capture:
    # scale 2, 300 CSS px wide -> 600px canvas, ~848.6px per page
    img = Image.new("RGB", (600, 2000), "#f9fafb")
    draw = ImageDraw.Draw(img)
    cards = [SectionBox(top=20, height=300), SectionBox(top=340, height=250), SectionBox(top=610, height=350)]
    for box in cards:
        draw.rectangle((20, int(box.top * 2), 580, int((box.top + box.height) * 2)), fill="#ffffff", outline="#333333")
    return Capture(image=img, sections=cards, scale=2)


def _page_count(path: Path) -> int:
    return len(PAGE_RE.findall(path.read_bytes()))


def test_cards_are_never_split(tmp_path: Path):
    capture = _dashboard_capture()
    plan = plan_capture(capture, max_pages=10)
    edges = [(int(b.top * 2), int((b.top + b.height) * 2)) for b in capture.sections]
    for page in plan.slices:
        for top, bottom in edges:
            assert not (page.start_y < top < page.end_y < bottom)
            assert not (top < page.start_y < bottom)

    result = export_to_pdf(capture, PdfExportOptions(filename=tmp_path / "out" / "dashboard.pdf"))
    assert result.path.exists()
    assert result.pages_written == len(plan.slices)
    assert _page_count(result.path) == result.pages_written
    assert not result.truncated


def test_page_cap_writes_exactly_max_pages(tmp_path: Path):
    capture = Capture(image=Image.new("RGB", (210, 297 * 5), "white"))
    result = export_to_pdf(capture, PdfExportOptions(filename=tmp_path / "capped.pdf", max_pages=2))
    assert result.pages_written == 2
    assert result.truncated
    assert _page_count(result.path) == 2
