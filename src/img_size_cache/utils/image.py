"""Image dimension sniffing from raw bytes."""

from __future__ import annotations

import contextlib
import io
import re
import struct
import threading
from collections.abc import Iterator

from PIL import Image, UnidentifiedImageError

_SVG_TAG = re.compile(rb"<svg\b[^>]*>", re.IGNORECASE | re.DOTALL)
_SVG_LENGTH = r'\s{}\s*=\s*["\']\s*([0-9]*\.?[0-9]+)\s*(?:px)?\s*["\']'
_SVG_VIEWBOX = re.compile(
    r'\sviewBox\s*=\s*["\']\s*[-0-9.]+[\s,]+[-0-9.]+[\s,]+'
    r'([0-9]*\.?[0-9]+)[\s,]+([0-9]*\.?[0-9]+)\s*["\']'
)

# Image.MAX_IMAGE_PIXELS is process-global
_pixel_limit_lock = threading.Lock()


def sniff_dimensions(image_bytes: bytes) -> tuple[int, int] | None:
    """Return ``(width, height)`` as declared by an image payload.

    Only the header is parsed (Pillow opens lazily); pixel data is never
    decoded. Returns None when the format is unrecognized. A recognized
    image may still declare a zero side (an SVG with one size attribute and
    no viewBox); callers decide what to do with it.
    """
    if not image_bytes:
        return None
    dims = _pil_dimensions(image_bytes)
    if dims is None:
        dims = _svg_dimensions(image_bytes)
    return dims


@contextlib.contextmanager
def _no_pixel_limit() -> Iterator[None]:
    # Only the header is read, so the decompression-bomb guard does not apply
    with _pixel_limit_lock:
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            yield
        finally:
            Image.MAX_IMAGE_PIXELS = previous


def _pil_dimensions(image_bytes: bytes) -> tuple[int, int] | None:
    try:
        with _no_pixel_limit(), Image.open(io.BytesIO(image_bytes)) as img:
            return img.size
    except (
        UnidentifiedImageError,
        OSError,
        ValueError,
        struct.error,
    ):
        return None


def _svg_dimensions(image_bytes: bytes) -> tuple[int, int] | None:
    match = _SVG_TAG.search(image_bytes)
    if match is None:
        return None
    tag = match.group(0).decode("utf-8", errors="replace")

    width = _svg_length(tag, "width")
    height = _svg_length(tag, "height")
    if width and height:
        return width, height

    viewbox = _SVG_VIEWBOX.search(tag)
    vb_width = float(viewbox.group(1)) if viewbox else 0.0
    vb_height = float(viewbox.group(2)) if viewbox else 0.0
    if not vb_width or not vb_height:
        if width is None and height is None:
            return None
        return width or 0, height or 0
    # Scale the missing side from the viewBox aspect ratio
    if width:
        return width, round(width * vb_height / vb_width)
    if height:
        return round(height * vb_width / vb_height), height
    return round(vb_width), round(vb_height)


def _svg_length(tag: str, attr: str) -> int | None:
    match = re.search(_SVG_LENGTH.format(attr), tag)
    if match is None:
        return None
    return round(float(match.group(1)))
