# encviz

Render electronic navigational chart (ENC) data into PNG map tiles, either
one tile at a time from the command line or on demand through a small HTTP
tile server that any slippy-map client can use.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Chart files

Charts are files ending in `.000`. The built-in reader,
`encviz.dataset.read_chart`, expects each one to be a JSON document whose
`layers` object maps S-57 layer names to GeoJSON feature collections:

```json
{
  "layers": {
    "DSID": {"type": "FeatureCollection", "features": [
      {"type": "Feature", "geometry": null, "properties": {"DSPM_CSCL": 80000}}
    ]},
    "M_COVR": {"type": "FeatureCollection", "features": [
      {"type": "Feature", "properties": {"CATCOV": 1},
       "geometry": {"type": "Polygon",
                    "coordinates": [[[-82, 24], [-80, 24], [-80, 26], [-82, 26], [-82, 24]]]}}
    ]},
    "LNDARE": {"type": "FeatureCollection", "features": []}
  }
}
```

- `DSID` must have at least one feature; the integer `DSPM_CSCL` attribute of
  the first is the chart's compilation scale.
- `M_COVR` must be present. Features with the integer attribute `CATCOV` equal
  to `1` give the chart's coverage; other values are ignored.
- Any other layer can be drawn by naming it in a style.

A file that cannot be read or lacks this content raises
`encviz.dataset.ChartError`.

## Configuration

Both commands read a configuration directory, `~/.encviz` by default. It
holds a `config.xml`:

```xml
<config>
  <chart_path>charts</chart_path>
  <meta_path>meta</meta_path>
  <style_path>styles</style_path>
  <tile_size>256</tile_size>
  <scale_base>500000000</scale_base>
</config>
```

- `chart_path` is searched recursively for chart files ending in `.000`.
- `meta_path` is where per-chart metadata (compilation scale and coverage
  bounds) is cached, one small text file per chart, so charts are not read
  again on the next start.
- `style_path` holds one XML file per render style; the file name without
  `.xml` is the style name.
- `tile_size` is the side of an output tile in pixels.
- `scale_base` is the minimum display scale at zoom level 0. For a tile, the
  needed scale is `scale_base * cos(latitude) / 2**z`, rounded; charts with a
  smaller compilation scale are skipped.

Each of these tags must appear exactly once and not be empty, otherwise
`encviz.xml_config.ConfigError` is raised. Relative paths are taken relative
to the configuration directory.

A style file lists the layers to draw, in drawing order, and an optional
background colour:

```xml
<style>
  <background>fff</background>
  <layer>
    <layer_name>LNDARE</layer_name>
    <fill_color>f0d8b0</fill_color>
    <line_color>000</line_color>
    <line_width>1</line_width>
    <marker_size>0</marker_size>
  </layer>
</style>
```

Colours are hex codes in one of four forms: `RGB`, `ARGB`, `RRGGBB` or
`AARRGGBB`. A missing or invalid background leaves the tile transparent.

How features are drawn:

- polygons are filled and outlined (only the outer ring is drawn);
- lines are stroked with the line colour and width;
- 2D points are circles of radius `marker_size`, or not drawn when it is `0`;
- 3D points (soundings) are drawn as their depth with one decimal place.

For each tile the most detailed charts are used first; less detailed charts
only fill in the part of the tile not yet covered. The tile area is widened by
10% so that labels are not cut off at tile edges.

## Rendering a single tile

```
enc-tile-render [-c CONFIG_DIR] [-o OUT_FILE] [-s STYLE] X Y Z
```

`X`, `Y` and `Z` are XYZ tile coordinates, with row 0 at the bottom (south) of
the map. The output defaults to `out.png` and the style to `default`. The
command prints how many bytes it writes; if the style is unknown or no chart
covers the tile, the output file is written empty.

```
enc-tile-render -s default -o florida.png 8 18 5
```

## Serving tiles

```
enc-tile-server [-c CONFIG_DIR]
```

The server listens on port 8888 on all interfaces and runs until a line is
entered on standard input. Point a map client at

```
http://127.0.0.1:8888/<STYLE>/{z}/{y}/{x}.png
```

where `STYLE` is the name of one of your style files. Tile coordinates here
follow the WMTS convention, with row 0 at the top (north) of the map. Tiles
with no chart data, or requests for an unknown style, get a 404; malformed
paths get a 400.

## Using the library

The coordinate helpers can be used on their own:

```python
from encviz.common import Coord, TileCoords
from encviz.web_mercator import WebMercator

wm = WebMercator(8, 18, 5, TileCoords.XYZ, 256)
print(wm.bbox_meters())
print(wm.bbox_deg())
print(wm.point_to_pixels(-85.0, 25.0))
print(wm.meters_to_deg(Coord(-9000000.0, 3000000.0)))
```

Charts can be indexed and queried directly:

```python
from encviz.common import Envelope
from encviz.dataset import EncDataset

dataset = EncDataset(cache_path="meta")
dataset.load_charts("charts")
data = dataset.export_data(["LNDARE"], Envelope(-82, -80, 24, 26), 0)
```

`export_data` returns a dict of layer name to clipped features, or `None` when
no chart qualifies. `EncDataset` and `EncRenderer` both accept a `reader`
callable that turns a path into an `encviz.dataset.Chart`, so other chart
sources can be plugged in.

Styles can be loaded with `encviz.style.load_style`, and tiles rendered with
`encviz.renderer.EncRenderer`, whose `render(tc, x, y, z, style_name)` method
returns the PNG bytes of a tile, or `None`. `encviz.tile_server.make_server`
builds the HTTP server around any renderer.

## What this package does not do

- It does not read native S-57 (ISO 8211) binary chart files; charts must be
  supplied as the JSON documents described above, or through a custom reader.
- It has no bathymetry triangulation or interactive viewer for soundings and
  land areas; soundings are only drawn as depth labels on tiles.