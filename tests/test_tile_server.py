import threading
import urllib.error
import urllib.request

import pytest

from encviz.common import TileCoords
from encviz.tile_server import main, make_server, parse_tile_path
from encviz.xml_config import ConfigError


class _StubRenderer:
    def __init__(self):
        self.calls = []

    def render(self, tc, x, y, z, style_name):
        self.calls.append((tc, x, y, z, style_name))
        return b"tile-bytes" if style_name == "default" else None


@pytest.fixture
def served():
    renderer = _StubRenderer()
    server = make_server(renderer, "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base = f"http://127.0.0.1:{server.server_address[1]}"
    yield base, renderer
    server.shutdown()
    server.server_close()
    thread.join()


def _get(url):
    try:
        with urllib.request.urlopen(url, timeout=5) as resp:
            return resp.status, resp.read()
    except urllib.error.HTTPError as err:
        return err.code, err.read()


def test_parse_tile_path_with_extension():
    assert parse_tile_path("/default/5/13/8.png") == ("default", 5, 13, 8)


def test_parse_tile_path_without_extension():
    assert parse_tile_path("/night/0/0/0") == ("night", 0, 0, 0)


@pytest.mark.parametrize("url", ["/default/5/13", "/a/b/c/d/e/f", "", "/"])
def test_parse_tile_path_wrong_token_count(url):
    with pytest.raises(ValueError):
        parse_tile_path(url)


def test_parse_tile_path_non_numeric():
    with pytest.raises(ValueError):
        parse_tile_path("/default/z/1/2.png")


def test_server_returns_rendered_tile(served):
    base, renderer = served
    status, body = _get(base + "/default/5/13/8.png")
    assert status == 200
    assert body == b"tile-bytes"
    assert renderer.calls == [(TileCoords.WTMS, 8, 13, 5, "default")]


def test_server_returns_404_without_data(served):
    base, renderer = served
    status, body = _get(base + "/other/1/0/1.png")
    assert status == 404
    assert body == b""
    assert renderer.calls == [(TileCoords.WTMS, 1, 0, 1, "other")]


def test_server_rejects_invalid_url(served):
    base, renderer = served
    status, body = _get(base + "/default/1/2")
    assert status == 400
    assert body == b"Invalid URL"
    assert renderer.calls == []


def test_main_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["-h"])
    assert exc.value.code == 0
    assert "enc_tile_server" in capsys.readouterr().out


def test_main_bad_option_exits_one():
    with pytest.raises(SystemExit) as exc:
        main(["-x"])
    assert exc.value.code == 1


def test_main_missing_config_raises(tmp_path):
    with pytest.raises(ConfigError):
        main(["-c", str(tmp_path / "nowhere")])