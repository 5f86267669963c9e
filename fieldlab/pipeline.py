"""
High-level API: one call from parameters to a saved image.

>>> from fieldlab import generate
>>> generate("plasma.webp", width=1200, height=630,
...          colors=["#00ffff", "#0080ff", "#8000ff"], effect="plasma", intensity=5)
'plasma.webp'
"""

import logging
from typing import Optional, Sequence, Union

from .compositor import RasterBuffer, draw_phase, render
from .config import (
    DEFAULT_COLORS,
    DEFAULT_EFFECT,
    DEFAULT_FORMAT,
    DEFAULT_INTENSITY,
    DEFAULT_QUALITY,
    ConfigError,
    RenderRequest,
    parse_colors,
)
from .encode import default_filename, save
from .palette import Color, hex_to_rgb
from .placeholder import PlaceholderStyle, draw_placeholder

log = logging.getLogger(__name__)


def render_request(request: RenderRequest, style: Optional[PlaceholderStyle] = None) -> RasterBuffer:
    """Render a request; the phase is drawn here, once, unless the request pins it."""
    if request.placeholder:
        return draw_placeholder(request.width, request.height, style)
    phase = request.phase if request.phase is not None else draw_phase(request.seed)
    log.debug("effect=%s intensity=%s phase=%.6f", request.effect, request.intensity, phase)
    return render(
        request.width, request.height, request.effect, request.palette(),
        phase, request.intensity, tile=request.tile, workers=request.workers,
    )


def _colors(colors: Sequence[Union[str, Color]]) -> list:
    try:
        return [hex_to_rgb(c) if isinstance(c, str) else tuple(c) for c in colors]
    except ValueError as e:
        raise ConfigError(str(e)) from None


def generate(
    out_path: Optional[str] = None,
    width: int = 1200,
    height: int = 630,
    colors: Optional[Sequence[Union[str, Color]]] = None,
    effect: str = DEFAULT_EFFECT,
    intensity: float = DEFAULT_INTENSITY,
    format: str = DEFAULT_FORMAT,
    quality: float = DEFAULT_QUALITY,
    placeholder: bool = False,
    phase: Optional[float] = None,
    seed: Optional[int] = None,
    tile: int = 256,
    workers: int = 1,
) -> str:
    """High-level convenience. Returns the out_path after saving."""
    request = RenderRequest(
        width=width, height=height, effect=effect, intensity=intensity,
        colors=_colors(colors) if colors is not None else parse_colors(DEFAULT_COLORS),
        format=format, quality=quality, placeholder=placeholder,
        phase=phase, seed=seed, tile=tile, workers=workers,
    )
    return save_request(request, out_path)


def save_request(request: RenderRequest, out_path: Optional[str] = None) -> str:
    buffer = render_request(request)
    if out_path is None:
        out_path = default_filename(request.format)
    return save(buffer, out_path, request.format, request.quality)
