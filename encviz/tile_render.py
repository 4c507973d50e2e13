"""Command line interface that renders a single map tile to a PNG file.

Tile coordinates are XYZ, counted from the bottom left of the map. The tile
server uses WTMS instead, which counts from the top left.
"""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path

from encviz.common import TileCoords
from encviz.renderer import EncRenderer

USAGE = """Usage:
  enc_tile_render [opts] <X> <Y> <Z>

Options:
  -h         - Show help
  -c <path>  - Set config directory (default=~/.config)
  -o <file>  - Set output file (default=out.png)
  -s <name>  - Set render style (default=default)

Where:
  X          - Horizontal tile coordinate
  Y          - Vertical tile coordinate
  Z          - Zoom tile coordinate
"""

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _usage(exit_code: int) -> None:
    print(USAGE, end="")
    raise SystemExit(exit_code)


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        _usage(1)


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="enc_tile_render", add_help=False)
    parser.add_argument("-h", dest="help", action="store_true")
    parser.add_argument("-c", dest="config_path", default=None)
    parser.add_argument("-o", dest="out_file", default="out.png")
    parser.add_argument("-s", dest="style_name", default="default")
    parser.add_argument("coords", nargs="*")
    return parser


def main(argv=None) -> int:
    """Render the tile named on the command line and write it to a file."""
    args = _build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    if args.help:
        _usage(0)
    if len(args.coords) < 3:
        _usage(1)
    x, y, z = (_atoi(value) for value in args.coords[:3])

    renderer = EncRenderer(args.config_path)
    png_bytes = renderer.render(TileCoords.XYZ, x, y, z, args.style_name) or b""

    print(f"Writing {len(png_bytes)} bytes")
    Path(args.out_file).write_bytes(png_bytes)
    return 0


if __name__ == "__main__":
    sys.exit(main())