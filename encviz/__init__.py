"""Render electronic navigational chart data to PNG web map tiles."""

__version__ = "0.1.0"