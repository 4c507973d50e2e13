"""Rendering of ENC chart data to PNG map tiles."""

from __future__ import annotations

import io
import logging
import math
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont
from shapely.geometry.base import BaseGeometry

from encviz.common import Envelope, TileCoords
from encviz.dataset import EncDataset, read_chart
from encviz.style import Color, LayerStyle, RenderStyle, load_style
from encviz.web_mercator import WebMercator
from encviz.xml_config import ConfigError, xml_query, xml_text

log = logging.getLogger(__name__)

OVERSAMPLE = 0.1
DEPTH_FONT_SIZE = 15

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

_Pen = Callable[[ImageDraw.ImageDraw], None]


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _rgba(color: Color) -> tuple[int, int, int, int]:
    return (color.red, color.green, color.blue, color.alpha)


def _load_depth_font():
    try:
        return ImageFont.truetype("DejaVuSansMono.ttf", DEPTH_FONT_SIZE)
    except OSError:
        return ImageFont.load_default()


class _Canvas:
    """An RGBA image onto which each drawing operation is alpha-composited."""

    def __init__(self, size: int):
        self.image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        self._font = None

    def _paint(self, pen: _Pen) -> None:
        overlay = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        pen(ImageDraw.Draw(overlay))
        self.image.alpha_composite(overlay)

    def flood(self, color: Color) -> None:
        width, height = self.image.size
        self._paint(lambda d: d.rectangle([0, 0, width, height], fill=_rgba(color)))

    def circle(self, x: float, y: float, radius: float, style: LayerStyle) -> None:
        bounds = [x - radius, y - radius, x + radius, y + radius]
        self._paint(lambda d: d.ellipse(bounds, fill=_rgba(style.fill_color)))
        if style.line_width > 0:
            self._paint(
                lambda d: d.ellipse(
                    bounds, outline=_rgba(style.line_color), width=style.line_width
                )
            )

    def polyline(self, points: list[tuple[float, float]], style: LayerStyle) -> None:
        if len(points) < 2 or style.line_width <= 0:
            return
        self._paint(
            lambda d: d.line(
                points, fill=_rgba(style.line_color), width=style.line_width, joint="curve"
            )
        )

    def polygon(self, points: list[tuple[float, float]], style: LayerStyle) -> None:
        if len(points) >= 3:
            self._paint(lambda d: d.polygon(points, fill=_rgba(style.fill_color)))
        self.polyline(points, style)

    def text_centered(self, x: float, y: float, text: str, color: Color) -> None:
        if self._font is None:
            self._font = _load_depth_font()
        font = self._font
        probe = ImageDraw.Draw(self.image)
        left, top, right, bottom = probe.textbbox((0, 0), text, font=font)
        origin = (x - (right - left) / 2, y - (bottom - top) / 2)
        if isinstance(font, ImageFont.FreeTypeFont):
            self._paint(lambda d: d.text(origin, text, fill=_rgba(color), font=font, anchor="ls"))
        else:
            self._paint(lambda d: d.text(origin, text, fill=_rgba(color), font=font))

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()


class EncRenderer:
    """Renders chart tiles according to a configuration directory."""

    def __init__(self, config_path=None, reader=read_chart):
        if config_path is None:
            config_path = Path.home() / ".encviz"
        self.tile_size: int = 256
        self.scale_base: float = 0.0
        self.styles: dict[str, RenderStyle] = {}
        self.dataset: EncDataset | None = None
        self._reader = reader
        self._load_config(Path(config_path))

    def render(self, tc, x, y, z, style_name) -> bytes | None:
        """Render one tile to PNG bytes; None if the style or data is missing."""
        style = self.styles.get(style_name)
        if style is None:
            return None
        layers = [layer.layer_name for layer in style.layers]

        wm = WebMercator(x, y, z, tc, self.tile_size)
        bbox = wm.bbox_deg()

        # Oversample a bit so text is not clipped between tiles
        half_w = OVERSAMPLE * (bbox.max_x - bbox.min_x) / 2
        half_h = OVERSAMPLE * (bbox.max_y - bbox.min_y) / 2
        bbox = Envelope(
            min_x=bbox.min_x - half_w,
            max_x=bbox.max_x + half_w,
            min_y=bbox.min_y - half_h,
            max_y=bbox.max_y + half_h,
        )

        avg_lat = (bbox.min_y + bbox.max_y) / 2
        scale_min = _round_half_away(
            self.scale_base * math.cos(math.radians(avg_lat)) / 2**z
        )

        data = self.dataset.export_data(layers, bbox, scale_min)
        if data is None:
            return None

        canvas = _Canvas(self.tile_size)
        if style.background is not None:
            canvas.flood(style.background)

        for layer_style in style.layers:
            for feature in data.get(layer_style.layer_name, []):
                if feature.geometry is not None:
                    self._render_geo(canvas, feature.geometry, wm, layer_style)

        return canvas.to_png()

    def _render_geo(self, canvas: _Canvas, geo: BaseGeometry, wm: WebMercator,
                    style: LayerStyle) -> None:
        if geo.is_empty:
            return
        kind = geo.geom_type
        if kind == "Point":
            if geo.has_z:
                self._render_depth(canvas, geo, wm, style)
            else:
                self._render_point(canvas, geo, wm, style)
        elif kind == "LineString":
            self._render_line(canvas, geo.coords, wm, style)
        elif kind == "Polygon":
            self._render_line_poly(canvas, geo, wm, style)
        elif kind in ("MultiPoint", "MultiLineString", "MultiPolygon", "GeometryCollection"):
            for child in geo.geoms:
                self._render_geo(canvas, child, wm, style)
        else:
            raise ValueError(f"Unhandled geometry of type {kind}")

    @staticmethod
    def _pixels(coords, wm: WebMercator) -> list[tuple[float, float]]:
        result = []
        for point in coords:
            c = wm.point_to_pixels(point[0], point[1])
            result.append((c.x, c.y))
        return result

    def _render_depth(self, canvas: _Canvas, geo, wm: WebMercator, style: LayerStyle) -> None:
        c = wm.point_to_pixels(geo.x, geo.y)
        canvas.text_centered(c.x, c.y, f"{geo.z:.1f}", style.line_color)

    def _render_point(self, canvas: _Canvas, geo, wm: WebMercator, style: LayerStyle) -> None:
        if style.marker_size == 0:
            return
        c = wm.point_to_pixels(geo.x, geo.y)
        canvas.circle(c.x, c.y, style.marker_size, style)

    def _render_line(self, canvas: _Canvas, coords, wm: WebMercator, style: LayerStyle) -> None:
        canvas.polyline(self._pixels(coords, wm), style)

    def _render_line_poly(self, canvas: _Canvas, geo, wm: WebMercator,
                          style: LayerStyle) -> None:
        # Interior rings are not drawn
        canvas.polygon(self._pixels(geo.exterior.coords, wm), style)

    def _load_config(self, config_path: Path) -> None:
        log.info("Using config directory: %s ...", config_path)
        config_file = config_path / "config.xml"
        log.info(" - Reading %s ...", config_file)
        try:
            root = ET.parse(config_file).getroot()
        except (ET.ParseError, OSError) as exc:
            raise ConfigError(f"Cannot parse {config_file}") from exc

        chart_path = Path(xml_text(xml_query(root, "chart_path")))
        meta_path = Path(xml_text(xml_query(root, "meta_path")))
        style_path = Path(xml_text(xml_query(root, "style_path")))
        self.tile_size = _atoi(xml_text(xml_query(root, "tile_size")))
        self.scale_base = _atof(xml_text(xml_query(root, "scale_base")))

        if not chart_path.is_absolute():
            chart_path = config_path / chart_path
        if not meta_path.is_absolute():
            meta_path = config_path / meta_path
        if not style_path.is_absolute():
            style_path = config_path / style_path

        log.info(" - Charts: %s", chart_path)
        log.info(" - Metadata: %s", meta_path)
        log.info(" - Styles: %s", style_path)
        log.info(" - Tile Size: %d", self.tile_size)
        log.info(" - Scale Base: %g", self.scale_base)

        self.dataset = EncDataset(cache_path=meta_path, reader=self._reader)
        self.dataset.load_charts(chart_path)

        for entry in sorted(style_path.iterdir()):
            if entry.suffix == ".xml":
                self.styles[entry.stem] = load_style(entry)