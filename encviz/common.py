"""Shared coordinate and bounding-box types."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass


class TileCoords(enum.Enum):
    """Tile numbering scheme."""

    WTMS = "wtms"  # 0,0 at northwest
    XYZ = "xyz"  # 0,0 at southwest


@dataclass(frozen=True)
class Coord:
    """Generic 2D coordinate (longitude/column as x, latitude/row as y)."""

    x: float
    y: float


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding box; the default instance is empty."""

    min_x: float = math.inf
    max_x: float = -math.inf
    min_y: float = math.inf
    max_y: float = -math.inf

    def intersects(self, other: Envelope) -> bool:
        """Return True if the two boxes overlap or touch."""
        return (
            self.min_x <= other.max_x
            and self.max_x >= other.min_x
            and self.min_y <= other.max_y
            and self.max_y >= other.min_y
        )

    def merge(self, other: Envelope) -> Envelope:
        """Return the smallest box covering both boxes."""
        return Envelope(
            min_x=min(self.min_x, other.min_x),
            max_x=max(self.max_x, other.max_x),
            min_y=min(self.min_y, other.min_y),
            max_y=max(self.max_y, other.max_y),
        )