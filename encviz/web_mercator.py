"""Conversions between WGS84 degrees, Web Mercator meters and tile pixels."""

from __future__ import annotations

import math

from encviz.common import Coord, Envelope, TileCoords

EARTH_RADIUS = 6378137.0


class WebMercator:
    """Coordinate mapper for a single map tile."""

    def __init__(self, x, y, z, tc=TileCoords.XYZ, tile_size=256):
        tile_side = 2 * math.pi * EARTH_RADIUS
        # Meter coordinates are measured from the bottom left, not the centre
        self._offset_m = tile_side / 2

        ntiles = int(2**z)
        if tc is TileCoords.WTMS:
            y = ntiles - y - 1

        tile_side /= ntiles
        min_x = x * tile_side - self._offset_m
        min_y = y * tile_side - self._offset_m
        self._bbox_m = Envelope(
            min_x=min_x,
            max_x=min_x + tile_side,
            min_y=min_y,
            max_y=min_y + tile_side,
        )
        self._ppm = tile_size / tile_side

    def bbox_meters(self) -> Envelope:
        """Tile bounds in meters (EPSG:3857)."""
        return self._bbox_m

    def bbox_deg(self) -> Envelope:
        """Tile bounds in degrees (EPSG:4326)."""
        cmin = self.meters_to_deg(Coord(self._bbox_m.min_x, self._bbox_m.min_y))
        cmax = self.meters_to_deg(Coord(self._bbox_m.max_x, self._bbox_m.max_y))
        return Envelope(min_x=cmin.x, max_x=cmax.x, min_y=cmin.y, max_y=cmax.y)

    def deg_to_meters(self, coord: Coord) -> Coord:
        """Convert degrees to meters."""
        x = coord.x * self._offset_m / 180.0
        y = math.log(math.tan((90 + coord.y) * math.pi / 360.0)) / (math.pi / 180.0)
        return Coord(x, y * self._offset_m / 180.0)

    def meters_to_deg(self, coord: Coord) -> Coord:
        """Convert meters to degrees."""
        x = (coord.x / self._offset_m) * 180
        y = (coord.y / self._offset_m) * 180
        y = 180 / math.pi * (2 * math.atan(math.exp(y * math.pi / 180)) - math.pi / 2)
        return Coord(x, y)

    def meters_to_pixels(self, coord: Coord) -> Coord:
        """Convert meters to pixels measured from the tile's top left."""
        return Coord(
            (coord.x - self._bbox_m.min_x) * self._ppm,
            (self._bbox_m.max_y - coord.y) * self._ppm,
        )

    def pixels_to_meters(self, coord: Coord) -> Coord:
        """Convert tile pixels to meters."""
        return Coord(
            self._bbox_m.min_x + coord.x / self._ppm,
            self._bbox_m.max_y - coord.y / self._ppm,
        )

    def point_to_pixels(self, x: float, y: float) -> Coord:
        """Convert a longitude/latitude point to tile pixels."""
        return self.meters_to_pixels(self.deg_to_meters(Coord(x, y)))