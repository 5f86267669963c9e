"""
Command line
------------
$ fieldlab --out /tmp/demo.webp --size 1200x630 --effect vortex \
    --colors "00ffff,0080ff,8000ff" --intensity 5

$ fieldlab --query "size=800x600&effect=placeholder&format=png"

Flags given explicitly override values taken from ``--query``.
"""

import argparse
import logging
from typing import Optional, Sequence

from .config import ConfigError, RenderRequest, parse_colors, parse_size
from .fields import field_names
from .pipeline import save_request

log = logging.getLogger("fieldlab")


def _size(s: str):
    try:
        return parse_size(s)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _colors(s: str):
    try:
        return parse_colors(s)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="fieldlab", description="Render procedural field images")
    ap.add_argument("--out", default=None, help="Output path (default: image-<millis>.<format>)")
    ap.add_argument("--query", default="", help="URL query string, e.g. 'size=800x600&effect=marble'")
    ap.add_argument("--size", type=_size, default=None, help="WIDTHxHEIGHT (e.g., 1200x630)")
    ap.add_argument("--effect", default=None,
                    help=f"Field name: {', '.join(field_names())} (unknown names render plasma)")
    ap.add_argument("--colors", type=_colors, default=None, help="Comma-separated hex colors (e.g., '00ffff,0080ff')")
    ap.add_argument("--intensity", type=float, default=None, help="Spatial frequency multiplier")
    ap.add_argument("--format", default=None, help="webp, png or jpeg")
    ap.add_argument("--quality", type=float, default=None, help="Lossy encoder quality, 0..1")
    ap.add_argument("--placeholder", action="store_true", help="Draw a size-label placeholder instead of a field")
    ap.add_argument("--phase", type=float, default=None, help="Fix the phase instead of drawing it at random")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--tile", type=int, default=None, help="Rows per render band. Use 0 to disable.")
    ap.add_argument("--workers", type=int, default=None, help="Threads rendering bands in parallel")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def build_request(args: argparse.Namespace) -> RenderRequest:
    overrides = {}
    if args.size is not None:
        overrides["width"], overrides["height"] = args.size
    for name in ("effect", "colors", "intensity", "format", "quality", "phase", "seed", "tile", "workers"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.placeholder:
        overrides["placeholder"] = True
    return RenderRequest.from_query(args.query, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        request = build_request(args)
        out = save_request(request, args.out)
    except ConfigError as e:
        log.error("%s", e)
        return 2
    print(out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
