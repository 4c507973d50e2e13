import xml.etree.ElementTree as ET

import pytest

from encviz.style import (
    Color,
    LayerStyle,
    load_style,
    parse_color,
    parse_color_code,
    parse_layer,
)
from encviz.xml_config import ConfigError


def _hex(color):
    return f"{color.alpha:02x}{color.red:02x}{color.green:02x}{color.blue:02x}"


def test_argb8_round_trip():
    code = "a1b2c3d4"
    assert _hex(parse_color_code(code)) == code


def test_rgb8_is_opaque():
    code = "12ab34"
    assert _hex(parse_color_code(code)) == "ff" + code


def test_short_forms_expand_nibbles():
    assert parse_color_code("f0f") == parse_color_code("ff00ff")
    assert parse_color_code("ff0f") == parse_color_code("ffff00ff")
    assert parse_color_code("8abc") == parse_color_code("88aabbcc")


def test_magenta_example():
    assert parse_color_code("ff00ff") == Color(alpha=255, red=255, green=0, blue=255)


def test_uppercase_accepted():
    assert parse_color_code("ABCDEF") == parse_color_code("abcdef")


@pytest.mark.parametrize("code", ["", "ff", "12345", "1234567", "123456789", "ggg", "12 34"])
def test_invalid_color_codes(code):
    with pytest.raises(ConfigError, match="Invalid color code"):
        parse_color_code(code)


def test_parse_color_from_element():
    node = ET.fromstring("<fill_color>c0ffee</fill_color>")
    assert parse_color(node) == parse_color_code("c0ffee")


def _layer_xml(width="2", marker="4"):
    return ET.fromstring(
        "<layer>"
        "<layer_name>DEPARE</layer_name>"
        "<fill_color>8800ff00</fill_color>"
        "<line_color>000</line_color>"
        f"<line_width>{width}</line_width>"
        f"<marker_size>{marker}</marker_size>"
        "</layer>"
    )


def test_parse_layer_fields():
    layer = parse_layer(_layer_xml())
    assert layer == LayerStyle(
        layer_name="DEPARE",
        fill_color=parse_color_code("8800ff00"),
        line_color=parse_color_code("000"),
        line_width=2,
        marker_size=4,
    )


def test_parse_layer_integer_prefix():
    layer = parse_layer(_layer_xml(width="3px", marker="abc"))
    assert layer.line_width == 3
    assert layer.marker_size == 0


def test_parse_layer_null_raises():
    with pytest.raises(ConfigError, match="may not be null"):
        parse_layer(None)


def test_parse_layer_missing_tag_raises():
    node = ET.fromstring("<layer><layer_name>X</layer_name></layer>")
    with pytest.raises(ConfigError, match="Tag fill_color not found"):
        parse_layer(node)


def test_load_style_with_background(tmp_path):
    path = tmp_path / "day.xml"
    path.write_text(
        "<style><background>fff</background>"
        "<layer><layer_name>LNDARE</layer_name><fill_color>ccc</fill_color>"
        "<line_color>000</line_color><line_width>1</line_width>"
        "<marker_size>0</marker_size></layer>"
        "<layer><layer_name>SOUNDG</layer_name><fill_color>000</fill_color>"
        "<line_color>00f</line_color><line_width>1</line_width>"
        "<marker_size>2</marker_size></layer>"
        "</style>"
    )
    style = load_style(path)
    assert style.background == parse_color_code("ffffff")
    assert [layer.layer_name for layer in style.layers] == ["LNDARE", "SOUNDG"]


def test_load_style_bad_background_is_ignored(tmp_path):
    path = tmp_path / "night.xml"
    path.write_text("<style><background>zz</background></style>")
    style = load_style(path)
    assert style.background is None
    assert style.layers == []


def test_load_style_unparseable_file(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("<style><layer>")
    with pytest.raises(ConfigError, match="Cannot parse"):
        load_style(path)


def test_load_style_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot parse"):
        load_style(tmp_path / "absent.xml")