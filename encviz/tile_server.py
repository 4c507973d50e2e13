"""Minimal WMTS-style HTTP tile server rendering chart tiles to PNG.

Point a map client at ``http://127.0.0.1:8888/<STYLE>/{z}/{y}/{x}.png``,
where STYLE is one of the loaded chart styles and x/y/z are WTMS tile
coordinates.
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

from encviz.common import TileCoords
from encviz.renderer import EncRenderer

PORT = 8888

USAGE = """Usage:
  enc_tile_server [opts]

Options:
  -h         - Show help
  -c <path>  - Set config directory (default=~/.config)
"""

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_log = logging.getLogger(__name__)


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"Invalid tile coordinate: {text!r}")
    return int(match.group(1))


def parse_tile_path(url: str) -> tuple[str, int, int, int]:
    """Split "/<style>/<z>/<y>/<x>[.png]" into (style, z, y, x)."""
    tokens = url.split("/")
    if len(tokens) != 5:
        raise ValueError("Invalid URL")
    return tokens[1], _leading_int(tokens[2]), _leading_int(tokens[3]), _leading_int(tokens[4])


class TileRequestHandler(BaseHTTPRequestHandler):
    """Serves rendered tiles from the renderer attached to the server."""

    def _reply(self, code: int, body: bytes, content_type: str | None = None) -> None:
        self.send_response(code)
        if content_type is not None:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)
        print(f" - HTTP {code}")

    def do_GET(self) -> None:
        url = urlsplit(self.path).path
        print(f"URL: {url}")
        try:
            style_name, z, y, x = parse_tile_path(url)
        except ValueError:
            self._reply(400, b"Invalid URL")
            return

        print(f"Tile X={x}, Y={y}, Z={z}")
        data = self.server.renderer.render(TileCoords.WTMS, x, y, z, style_name)
        if data is None:
            self._reply(404, b"")
        else:
            self._reply(200, data, "image/png")

    def log_message(self, format, *args) -> None:
        """Send access-log lines to the module logger instead of stderr."""
        _log.debug("%s - %s", self.address_string(), format % args)


def make_server(renderer, host="", port=PORT) -> ThreadingHTTPServer:
    """Create a threaded HTTP server that renders tiles with renderer."""
    server = ThreadingHTTPServer((host, port), TileRequestHandler)
    server.renderer = renderer
    return server


def _usage(exit_code: int) -> None:
    print(USAGE, end="")
    raise SystemExit(exit_code)


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        _usage(1)


def main(argv=None) -> int:
    """Run the tile server until a line is read from standard input."""
    parser = _Parser(prog="enc_tile_server", add_help=False)
    parser.add_argument("-h", dest="help", action="store_true")
    parser.add_argument("-c", dest="config_path", default=None)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if args.help:
        _usage(0)

    renderer = EncRenderer(args.config_path)
    try:
        server = make_server(renderer)
    except OSError:
        return 1

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        sys.stdin.readline()
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())