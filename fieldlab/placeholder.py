"""Flat grey placeholder with a border and a centred "W × H" label."""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .compositor import RasterBuffer
from .config import check_dimensions
from .palette import hex_to_rgb


@dataclass(frozen=True)
class PlaceholderStyle:
    background: str = "#e0e0e0"
    border: str = "#b5b5b5"
    text: str = "#777777"
    font_scaler: float = 0.2       # label height as a fraction of the short side
    border_frac: float = 0.02


def _font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.load_default(size=size)
    except (TypeError, OSError):
        # Pillow builds without FreeType only ship the fixed bitmap font
        return ImageFont.load_default()


def draw_placeholder(width: int, height: int, style: Optional[PlaceholderStyle] = None) -> RasterBuffer:
    width, height = check_dimensions(width, height)
    style = style or PlaceholderStyle()
    short = min(width, height)

    im = Image.new("RGBA", (width, height), color=hex_to_rgb(style.background) + (255,))
    draw = ImageDraw.Draw(im)

    # a stroke centred on the canvas edge only shows its inner half
    line = max(1, math.floor(short * style.border_frac))
    draw.rectangle([0, 0, width - 1, height - 1],
                   outline=hex_to_rgb(style.border), width=max(1, math.ceil(line / 2)))

    label = f"{width} × {height}"
    font = _font(max(1, math.floor(short * style.font_scaler)))
    left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
    x = (width - (right - left)) / 2 - left
    y = (height - (bottom - top)) / 2 - top
    draw.text((x, y), label, fill=hex_to_rgb(style.text), font=font)

    return RasterBuffer(np.array(im, dtype=np.uint8))
