"""
Turn a RasterBuffer into an image file with Pillow.

Formats are named the way they appear after ``image/`` in a MIME type.
Anything Pillow is not asked to handle here falls back to PNG.
"""

import io
import logging
import os
import time
from typing import Optional, Tuple, Union

from PIL import Image

from .compositor import RasterBuffer

log = logging.getLogger(__name__)

FORMATS = {
    "webp": ("WEBP", "webp"),
    "png": ("PNG", "png"),
    "jpeg": ("JPEG", "jpeg"),
    "jpg": ("JPEG", "jpg"),
}
FALLBACK_FORMAT = "png"


def resolve_format(fmt: Optional[str]) -> Tuple[str, str]:
    """Return (Pillow format name, file extension)."""
    key = (fmt or FALLBACK_FORMAT).lower()
    if key not in FORMATS:
        log.warning("unsupported format %r, writing %s instead", fmt, FALLBACK_FORMAT)
        key = FALLBACK_FORMAT
    return FORMATS[key]


def to_image(buffer: RasterBuffer) -> Image.Image:
    return Image.fromarray(buffer.pixels)


def _quality(quality: float) -> int:
    """Encoder quality as a fraction in (0, 1] -> Pillow's 1..100."""
    return min(100, max(1, int(round(quality * 100))))


def _write(buffer: RasterBuffer, fp, fmt: str, quality: float) -> None:
    pil_format, _ = resolve_format(fmt)
    im = to_image(buffer)
    if pil_format == "JPEG":
        im = im.convert("RGB")
        im.save(fp, format=pil_format, quality=_quality(quality))
    elif pil_format == "WEBP":
        im.save(fp, format=pil_format, quality=_quality(quality))
    else:
        im.save(fp, format=pil_format, optimize=True)


def encode(buffer: RasterBuffer, fmt: str = "webp", quality: float = 0.95) -> bytes:
    out = io.BytesIO()
    _write(buffer, out, fmt, quality)
    return out.getvalue()


def default_filename(fmt: str, now: Optional[float] = None) -> str:
    """``image-<epoch millis>.<ext>``"""
    _, ext = resolve_format(fmt)
    if now is None:
        now = time.time()
    return f"image-{int(now * 1000)}.{ext}"


def save(buffer: RasterBuffer, out_path: Union[str, os.PathLike], fmt: str = "webp",
         quality: float = 0.95) -> str:
    """Write ``buffer`` to ``out_path``; returns the path as a string."""
    with open(out_path, "wb") as fp:
        _write(buffer, fp, fmt, quality)
    log.debug("wrote %dx%d %s to %s", buffer.width, buffer.height, fmt, out_path)
    return os.fspath(out_path)
