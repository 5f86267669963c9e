"""
Scalar field functions and the registry that names them.

Every field has the signature ``fn(x, y, t, i, w, h) -> value in [0, 1]``:

    x, y  pixel coordinates from the top-left corner
    t     phase, shared by every pixel of one render
    i     intensity (spatial frequency multiplier)
    w, h  canvas size; only the center-relative fields read them

The functions are written with NumPy ufuncs so the same code evaluates a
single pixel (scalars) or a whole grid (broadcast arrays).
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import numpy as np

log = logging.getLogger(__name__)

FieldFunction = Callable[..., Any]

DEFAULT_FIELD = "plasma"


# ---------------------------- Fields ----------------------------------------

def field_plasma(x, y, t, i, w=None, h=None):
    s = 0.01 * i
    v = (
        np.sin(x * s + t) +
        np.sin(y * s + t) +
        np.sin((x + y) * s + t) +
        np.sin(np.sqrt(x * x + y * y) * s + t)
    )
    return (v + 4) / 8


def field_marble(x, y, t, i, w=None, h=None):
    s = 0.005 * i
    v = (
        np.sin(x * s + np.sin(y * s * 0.6) * 3 + t) +
        np.cos(y * s + np.cos(x * s * 0.6) * 3 + t)
    )
    return (v + 2) / 4


def field_fractal(x, y, t, i, w=None, h=None):
    """Five octaves of sin*cos; amplitude halves and frequency doubles each step."""
    v = 0.0
    amp = 1.0
    freq = 0.005 * i
    for _ in range(5):
        v = v + np.sin(x * freq + t) * np.cos(y * freq + t) * amp
        amp *= 0.5
        freq *= 2
    return (v + 2) / 4


def field_ripples(x, y, t, i, w, h):
    """Interference of three radial waves: one at the center, two off-center."""
    cx = w / 2
    cy = h / 2

    d1 = np.hypot(x - cx, y - cy)
    d2 = np.hypot(x - cx * 0.5, y - cy * 1.5)
    d3 = np.hypot(x - cx * 1.5, y - cy * 0.5)

    s = 0.05 * i
    v = (
        np.sin(d1 * s + t) +
        np.sin(d2 * s * 1.4 - t) +
        np.sin(d3 * s * 1.2 + t * 0.5)
    )
    return (v + 3) / 6


def field_vortex(x, y, t, i, w, h):
    cx = w / 2
    cy = h / 2
    dx = x - cx
    dy = y - cy
    d = np.sqrt(dx * dx + dy * dy)
    a = np.arctan2(dy, dx)
    s = 0.03 * i
    v = np.sin(d * s + a * 3 + t) + np.cos(d * s * 0.66 - a * 2 + t * 0.5)
    return (v + 2) / 4


# ---------------------------- Registry --------------------------------------

FIELDS: Dict[str, FieldFunction] = {
    "plasma": field_plasma,
    "marble": field_marble,
    "fractal": field_fractal,
    "ripples": field_ripples,
    "vortex": field_vortex,
}


def field_names() -> List[str]:
    return list(FIELDS)


def resolve_field(name: Optional[str]) -> FieldFunction:
    """Look up a field by name. Unknown names fall back to plasma, never raise."""
    fn = FIELDS.get(name) if name is not None else None
    if fn is None:
        log.debug("unknown field %r, falling back to %r", name, DEFAULT_FIELD)
        return FIELDS[DEFAULT_FIELD]
    return fn
