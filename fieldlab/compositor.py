"""
Raster compositor: evaluates a field over every pixel and maps it through a
palette into an RGBA buffer.

Pixels never read each other, so the grid is split into horizontal bands of
``tile`` rows. Bands can run on a thread pool (NumPy releases the GIL inside
ufuncs); each band owns a disjoint slice of the output and the only
synchronization is the final join.
"""

import logging
import math
import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from .config import ConfigError, check_dimensions
from .fields import FieldFunction, resolve_field
from .palette import Color, Palette

log = logging.getLogger(__name__)


# ---------------------------- Buffer ----------------------------------------

@dataclass(frozen=True)
class RasterBuffer:
    """Row-major ``(height, width, 4)`` uint8 RGBA pixels, read-only once built."""
    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4 or self.pixels.dtype != np.uint8:
            raise ValueError(f"Expected (H, W, 4) uint8 pixels, got {self.pixels.shape} {self.pixels.dtype}")
        self.pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return (int(r), int(g), int(b), int(a))

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()


# ---------------------------- Phase -----------------------------------------

def rng_from_seed(seed: Optional[int]) -> random.Random:
    """Return a Random instance from seed (or system)."""
    r = random.Random()
    if seed is not None:
        r.seed(int(seed))
    else:
        r.seed()
    return r


def draw_phase(seed: Optional[int] = None) -> float:
    """One phase in [0, 2*pi) for a whole render."""
    return rng_from_seed(seed).random() * math.tau


# ---------------------------- Rendering -------------------------------------

FieldLike = Union[str, FieldFunction]
PaletteLike = Union[Palette, Sequence[Color]]


def _as_field(field: FieldLike) -> FieldFunction:
    return resolve_field(field) if isinstance(field, str) else field


def _as_palette(palette: PaletteLike) -> Palette:
    if isinstance(palette, Palette):
        return palette
    try:
        return Palette(tuple(palette))
    except ValueError as e:
        raise ConfigError(str(e)) from None


def _shade(out: np.ndarray, x0: int, y0: int, fn: FieldFunction, palette: Palette,
           phase: float, intensity: float, canvas_w: int, canvas_h: int) -> None:
    """Fill ``out`` (a view of the buffer) with the pixels whose top-left is (x0, y0)."""
    h, w = out.shape[:2]
    ys, xs = np.mgrid[y0:y0 + h, x0:x0 + w].astype(np.float64)
    # NaN/inf intensity or phase must not abort the render; the palette maps NaN to 0
    with np.errstate(all="ignore"):
        v = fn(xs, ys, phase, intensity, canvas_w, canvas_h)
    v = np.broadcast_to(np.asarray(v, dtype=np.float64), (h, w))
    rgb = palette.interpolate_array(v)
    out[..., :3] = rgb.astype(np.uint8)  # truncates toward zero
    out[..., 3] = 255


def _bands(height: int, tile: int) -> Iterator[Tuple[int, int]]:
    if tile <= 0 or tile >= height:
        yield (0, height)
        return
    for y in range(0, height, tile):
        yield (y, min(y + tile, height))


def render_region(
    x0: int,
    y0: int,
    width: int,
    height: int,
    canvas_width: int,
    canvas_height: int,
    field: FieldLike,
    palette: PaletteLike,
    phase: float,
    intensity: float,
) -> RasterBuffer:
    """Render the ``width`` x ``height`` rectangle at (x0, y0) of a larger canvas.

    Coordinates and the center-relative fields see the full canvas, so the
    result equals the same region cut out of a full ``render``.
    """
    width, height = check_dimensions(width, height)
    canvas_width, canvas_height = check_dimensions(canvas_width, canvas_height)
    if x0 < 0 or y0 < 0 or x0 + width > canvas_width or y0 + height > canvas_height:
        raise ConfigError(
            f"Region {width}x{height}+{x0}+{y0} does not fit in {canvas_width}x{canvas_height}"
        )
    buf = np.empty((height, width, 4), dtype=np.uint8)
    _shade(buf, x0, y0, _as_field(field), _as_palette(palette), phase, intensity,
           canvas_width, canvas_height)
    return RasterBuffer(buf)


def render(
    width: int,
    height: int,
    field: FieldLike,
    palette: PaletteLike,
    phase: float,
    intensity: float,
    *,
    tile: int = 0,
    workers: int = 1,
) -> RasterBuffer:
    """Render a full ``width`` x ``height`` frame.

    ``phase`` is supplied by the caller (see ``draw_phase``) and shared by every
    pixel. ``tile`` rows per band and ``workers`` threads only change how the
    work is split; the bytes are the same for any combination.
    """
    width, height = check_dimensions(width, height)
    fn = _as_field(field)
    pal = _as_palette(palette)

    t0 = time.perf_counter()
    buf = np.empty((height, width, 4), dtype=np.uint8)
    bands = list(_bands(height, tile))
    args = (fn, pal, phase, intensity, width, height)
    if workers > 1 and len(bands) > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fieldlab") as ex:
            futs = [ex.submit(_shade, buf[a:b], 0, a, *args) for a, b in bands]
            for fut in futs:
                fut.result()
    else:
        for a, b in bands:
            _shade(buf[a:b], 0, a, *args)
    log.debug("rendered %dx%d with %s in %d band(s), %d worker(s), %.3fs",
              width, height, getattr(fn, "__name__", fn), len(bands), max(1, workers),
              time.perf_counter() - t0)
    return RasterBuffer(buf)
