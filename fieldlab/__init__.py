"""
fieldlab
========

Procedural raster images from a handful of scalars: a size, a field name,
a palette and an intensity. No assets, no network, no stored state.

Quick start
-----------
>>> from fieldlab import Palette, draw_phase, render
>>> buf = render(1200, 630, "vortex",
...              Palette.from_hex(["#00ffff", "#0080ff", "#8000ff"]),
...              phase=draw_phase(), intensity=5)
>>> buf.pixels.shape
(630, 1200, 4)

Fields
------
plasma, marble, fractal, ripples, vortex. Unknown names render plasma.

License: MIT
"""

from .compositor import RasterBuffer, draw_phase, render, render_region
from .config import ConfigError, RenderRequest
from .fields import FIELDS, field_names, resolve_field
from .pipeline import generate, render_request
from .palette import Palette, hex_to_rgb

__all__ = [
    "ConfigError",
    "FIELDS",
    "Palette",
    "RasterBuffer",
    "RenderRequest",
    "draw_phase",
    "field_names",
    "generate",
    "hex_to_rgb",
    "render",
    "render_region",
    "render_request",
    "resolve_field",
]
