"""
Colour palettes and linear RGB interpolation.

A palette is an ordered run of RGB stops. ``interpolate`` maps a scalar in
[0, 1] onto the run; the compositor truncates the real-valued channels to
bytes when it writes the buffer.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

Color = Tuple[int, int, int]
ColorF = Tuple[float, float, float]


# ---------------------------- Utilities ------------------------------------

def hex_to_rgb(hex_color: str) -> Color:
    """Convert '#RRGGBB' or 'RRGGBB' to (r,g,b). Handles shorthand '#RGB' too."""
    h = hex_color.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c*2 for c in h)
    if len(h) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    try:
        r = int(h[0:2], 16)
        g = int(h[2:4], 16)
        b = int(h[4:6], 16)
    except ValueError:
        raise ValueError(f"Invalid hex color: {hex_color!r}") from None
    return (r, g, b)


def rgb_to_hex(color: Color) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


def _check_color(color: Sequence[int]) -> Color:
    if len(color) != 3:
        raise ValueError(f"Color needs three channels, got {color!r}")
    out = []
    for c in color:
        c = int(c)
        if c < 0 or c > 255:
            raise ValueError(f"Color channel out of range 0-255: {color!r}")
        out.append(c)
    return (out[0], out[1], out[2])


# ---------------------------- Palette ---------------------------------------

@dataclass(frozen=True)
class Palette:
    """Ordered, immutable colour stops. One stop gives a constant colour."""
    colors: Tuple[Color, ...]

    def __post_init__(self):
        colors = tuple(_check_color(c) for c in self.colors)
        if not colors:
            raise ValueError("Palette needs at least one color")
        object.__setattr__(self, "colors", colors)

    @classmethod
    def from_hex(cls, hex_colors: Sequence[str]) -> "Palette":
        return cls(tuple(hex_to_rgb(c) for c in hex_colors))

    def __len__(self) -> int:
        return len(self.colors)

    def interpolate(self, t: float) -> ColorF:
        """Colour at position ``t``; NaN counts as 0 and ``t`` is clamped to [0, 1]."""
        if len(self.colors) == 1:
            r, g, b = self.colors[0]
            return (float(r), float(g), float(b))
        t = float(t)
        if math.isnan(t):
            t = 0.0
        t = min(max(t, 0.0), 1.0)
        n = len(self.colors) - 1
        idx = t * n
        i = min(max(math.floor(idx), 0), n - 1)
        f = idx - i
        c1 = self.colors[i]
        c2 = self.colors[i + 1]
        return (
            c1[0] + (c2[0] - c1[0]) * f,
            c1[1] + (c2[1] - c1[1]) * f,
            c1[2] + (c2[2] - c1[2]) * f,
        )

    def interpolate_array(self, t: np.ndarray) -> np.ndarray:
        """Vectorized ``interpolate``: returns a ``t.shape + (3,)`` float64 array."""
        t = np.asarray(t, dtype=np.float64)
        stops = np.asarray(self.colors, dtype=np.float64)
        if len(stops) == 1:
            return np.broadcast_to(stops[0], t.shape + (3,)).copy()
        t = np.nan_to_num(t, nan=0.0, posinf=1.0, neginf=0.0)
        t = np.clip(t, 0.0, 1.0)
        n = len(stops) - 1
        idx = t * n
        i = np.clip(np.floor(idx), 0, n - 1).astype(np.intp)
        f = (idx - i)[..., None]
        c1 = stops[i]
        c2 = stops[i + 1]
        return c1 + (c2 - c1) * f
