"""Layer styling loaded from XML style files."""

from __future__ import annotations

import re
import string
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from encviz.xml_config import ConfigError, xml_query, xml_query_all, xml_text

_HEX_DIGITS = frozenset(string.hexdigits)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Color:
    """8-bit ARGB color."""

    alpha: int = 255
    red: int = 0
    green: int = 0
    blue: int = 0


@dataclass
class LayerStyle:
    """Styling for a single chart layer."""

    layer_name: str
    fill_color: Color = field(default_factory=Color)
    line_color: Color = field(default_factory=Color)
    line_width: int = 1
    marker_size: int = 0
    attr_name: str = ""


@dataclass
class RenderStyle:
    """A full rendering style: optional background plus ordered layers."""

    background: Color | None = None
    layers: list[LayerStyle] = field(default_factory=list)


def _get8(bits: int, shift: int) -> int:
    return 0xFF & (bits >> shift)


def _get4(bits: int, shift: int) -> int:
    return 0x11 * (0xF & (bits >> shift))


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_color_code(code: str) -> Color:
    """Parse a hex color code: "rgb", "argb", "rrggbb" or "aarrggbb"."""
    if not code or not set(code) <= _HEX_DIGITS:
        raise ConfigError("Invalid color code")
    bits = int(code, 16)
    length = len(code)
    if length == 3:
        return Color(255, _get4(bits, 8), _get4(bits, 4), _get4(bits, 0))
    if length == 4:
        return Color(_get4(bits, 12), _get4(bits, 8), _get4(bits, 4), _get4(bits, 0))
    if length == 6:
        return Color(255, _get8(bits, 16), _get8(bits, 8), _get8(bits, 0))
    if length == 8:
        return Color(_get8(bits, 24), _get8(bits, 16), _get8(bits, 8), _get8(bits, 0))
    raise ConfigError("Invalid color code")


def parse_color(node: ET.Element | None) -> Color:
    """Parse the color code held in an element's text."""
    return parse_color_code(xml_text(node))


def parse_layer(node: ET.Element | None) -> LayerStyle:
    """Parse a <layer> element into a LayerStyle."""
    if node is None:
        raise ConfigError("Layer style may not be null")
    return LayerStyle(
        layer_name=xml_text(xml_query(node, "layer_name")),
        fill_color=parse_color(xml_query(node, "fill_color")),
        line_color=parse_color(xml_query(node, "line_color")),
        line_width=_atoi(xml_text(xml_query(node, "line_width"))),
        marker_size=_atoi(xml_text(xml_query(node, "marker_size"))),
    )


def load_style(filename) -> RenderStyle:
    """Load a RenderStyle from an XML style file."""
    try:
        root = ET.parse(filename).getroot()
    except (ET.ParseError, OSError) as exc:
        raise ConfigError(f"Cannot parse {filename}") from exc

    try:
        background = parse_color(xml_query(root, "background"))
    except ConfigError:
        background = None

    layers = [parse_layer(child) for child in xml_query_all(root, "layer")]
    return RenderStyle(background=background, layers=layers)