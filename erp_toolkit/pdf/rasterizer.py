from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Protocol

from PIL import Image

from ..models.pdf_export import DEFAULT_BACKGROUND, Capture, SectionBox

"""Rasterizers: turn a rendered element into a Capture.

A Capture is the full-scroll bitmap of one element plus the boxes of every
descendant marked with the ``data-pdf-section`` attribute, measured relative to
the element's own top-left corner (not the viewport).

PlaywrightRasterizer renders an HTML document in headless Chromium. Playwright
is an optional dependency (``pip install erp-toolkit[browser]`` followed by
``playwright install chromium``) and is imported on first use.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "SECTION_ATTRIBUTE",
    "RasterizationError",
    "Rasterizer",
    "PlaywrightRasterizer",
]

SECTION_ATTRIBUTE = "data-pdf-section"

_MEASURE_JS = """
(el, sel) => {
    const box = el.getBoundingClientRect();
    const sections = Array.from(el.querySelectorAll(sel)).map((s) => {
        const r = s.getBoundingClientRect();
        return { top: r.top - box.top, height: r.height };
    });
    return { width: el.scrollWidth, height: el.scrollHeight, sections };
}
"""


class RasterizationError(Exception):
    """Capturing the element failed; nothing was exported."""


class Rasterizer(Protocol):
    def capture(self, target: Any, scale: float, background: str) -> Capture: ...


class PlaywrightRasterizer:
    """Capture an element of an HTML document with headless Chromium.

    Args:
        selector: CSS selector of the element to export
        viewport_width: layout width before the element is measured
    """

    def __init__(self, selector: str = "body", viewport_width: int = 1280) -> None:
        self.selector = selector
        self.viewport_width = viewport_width

    @staticmethod
    def _load_html(target: str | Path) -> str:
        if isinstance(target, Path):
            return target.read_text(encoding="utf-8")
        if not target.lstrip().startswith("<") and Path(target).is_file():
            return Path(target).read_text(encoding="utf-8")
        return target

    def capture(
        self,
        target: str | Path,
        scale: float = 2,
        background: str = DEFAULT_BACKGROUND,
    ) -> Capture:
        from playwright.sync_api import Error as PlaywrightError
        from playwright.sync_api import sync_playwright

        html = self._load_html(target)
        section_selector = f"[{SECTION_ATTRIBUTE}]"
        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch()
                try:
                    context = browser.new_context(
                        device_scale_factor=scale,
                        viewport={"width": self.viewport_width, "height": 800},
                    )
                    page = context.new_page()
                    page.set_content(html, wait_until="load")
                    page.add_style_tag(content=f"html, body {{ background: {background}; }}")
                    element = page.locator(self.selector).first
                    measured = element.evaluate(_MEASURE_JS, section_selector)
                    # lay out at full scroll size so nothing is clipped by the viewport
                    page.set_viewport_size({
                        "width": max(int(measured["width"]), self.viewport_width),
                        "height": max(int(measured["height"]), 1),
                    })
                    measured = element.evaluate(_MEASURE_JS, section_selector)
                    png = element.screenshot(type="png", scale="device", animations="disabled")
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise RasterizationError(f"failed to capture '{self.selector}': {e}") from e

        with Image.open(io.BytesIO(png)) as img:
            img.load()
            image = img.convert("RGB")
        sections = [SectionBox(top=float(s["top"]), height=float(s["height"])) for s in measured["sections"]]
        logger.debug(
            f"captured {self.selector} {image.width}x{image.height}px scale={scale} sections={len(sections)}"
        )
        return Capture(image=image, sections=sections, scale=scale)
