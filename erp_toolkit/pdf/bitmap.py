from __future__ import annotations

import io

from PIL import Image

"""Bitmap helpers for the PDF exporter (Pillow)."""

__all__ = [
    "crop",
    "flatten",
    "encode_jpeg",
]


def crop(image: Image.Image, y_start: int, y_end: int) -> Image.Image:
    """Full-width rows ``[y_start, y_end)`` as a new image; the source is not modified."""
    if not 0 <= y_start < y_end <= image.height:
        raise ValueError(f"invalid crop rows [{y_start}, {y_end}) for height {image.height}")
    return image.crop((0, y_start, image.width, y_end))


def flatten(image: Image.Image, background: str) -> Image.Image:
    """RGB copy of image with any transparency filled with background."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        base = Image.new("RGB", rgba.size, background)
        base.paste(rgba, mask=rgba.getchannel("A"))
        return base
    return image.convert("RGB")


def encode_jpeg(image: Image.Image, quality: int = 95, background: str = "#ffffff") -> bytes:
    buf = io.BytesIO()
    with flatten(image, background) as rgb:
        rgb.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()
