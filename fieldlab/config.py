"""
Render configuration: defaults, string parsing and the request dataclass.

A ``RenderRequest`` can be built directly, from CLI arguments, or from a URL
query string such as ``size=800x600&effect=vortex&colors=ff0000,0000ff``.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from urllib.parse import parse_qs

from .palette import Color, Palette, hex_to_rgb

DEFAULT_SIZE = "1200x630"
DEFAULT_EFFECT = "plasma"
DEFAULT_FORMAT = "webp"
DEFAULT_COLORS = "00ffff,0080ff,8000ff"
DEFAULT_INTENSITY = 5.0
DEFAULT_QUALITY = 0.95

PLACEHOLDER_EFFECT = "placeholder"


class ConfigError(ValueError):
    """Bad render parameters: dimensions, colours or numeric strings."""


# ---------------------------- Parsing ---------------------------------------

def check_dimensions(width, height) -> Tuple[int, int]:
    """Return (width, height) as ints, or raise ConfigError unless both are positive integers."""
    for name, value in (("width", width), ("height", height)):
        try:
            fv = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be a number, got {value!r}") from None
        if not math.isfinite(fv) or fv <= 0 or fv != int(fv):
            raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return int(width), int(height)


def parse_size(s: str) -> Tuple[int, int]:
    if "x" not in s.lower():
        raise ConfigError("Size must be like 1200x630")
    a, _, b = s.lower().partition("x")
    try:
        width, height = float(a), float(b)
    except ValueError:
        raise ConfigError(f"Invalid size: {s!r}") from None
    return check_dimensions(width, height)


def parse_colors(s: str) -> List[Color]:
    """Comma-separated hex colours, '#' optional."""
    parts = [c.strip() for c in s.split(",") if c.strip()]
    if not parts:
        raise ConfigError("At least one color is required")
    try:
        return [hex_to_rgb(c) for c in parts]
    except ValueError as e:
        raise ConfigError(str(e)) from None


def parse_float(s: str, name: str) -> float:
    try:
        return float(s)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {s!r}") from None


# ---------------------------- Request ---------------------------------------

@dataclass
class RenderRequest:
    width: int = 1200
    height: int = 630
    effect: str = DEFAULT_EFFECT
    intensity: float = DEFAULT_INTENSITY
    colors: List[Color] = field(default_factory=lambda: parse_colors(DEFAULT_COLORS))
    format: str = DEFAULT_FORMAT
    quality: float = DEFAULT_QUALITY
    placeholder: bool = False          # mode flag: draw the size label instead of a field
    phase: Optional[float] = None      # drawn once per render when None
    seed: Optional[int] = None
    tile: int = 256                    # rows per band; 0 renders in one pass
    workers: int = 1

    def __post_init__(self):
        self.width, self.height = check_dimensions(self.width, self.height)
        self.format = self.format.lower()
        if self.effect == PLACEHOLDER_EFFECT:
            self.placeholder = True

    def palette(self) -> Palette:
        try:
            return Palette(tuple(self.colors))
        except ValueError as e:
            raise ConfigError(str(e)) from None

    @classmethod
    def from_query(cls, query: str, **overrides) -> "RenderRequest":
        """Build a request from a URL query string; missing keys take the defaults."""
        params = parse_qs(query.lstrip("?"))

        def get(key: str, default: str) -> str:
            values = params.get(key)
            return values[0] if values else default

        width, height = parse_size(get("size", DEFAULT_SIZE))
        kwargs = dict(
            width=width,
            height=height,
            effect=get("effect", DEFAULT_EFFECT),
            intensity=parse_float(get("intensity", str(DEFAULT_INTENSITY)), "intensity"),
            colors=parse_colors(get("colors", DEFAULT_COLORS)),
            format=get("format", DEFAULT_FORMAT),
            quality=parse_float(get("quality", str(DEFAULT_QUALITY)), "quality"),
        )
        seed = get("seed", "")
        if seed:
            try:
                kwargs["seed"] = int(seed)
            except ValueError:
                raise ConfigError(f"seed must be an integer, got {seed!r}") from None
        kwargs.update(overrides)
        return cls(**kwargs)
