"""Indexing of ENC charts and extraction of their data by area and scale.

Charts are read through a reader callable that turns a chart file into a
:class:`Chart`. The default reader, :func:`read_chart`, expects one JSON
document per chart file::

    {"layers": {"DSID": {"type": "FeatureCollection", "features": [...]},
                "M_COVR": {...}, "LNDARE": {...}}}

Each layer is a GeoJSON feature collection. A feature's ``properties`` hold
the S-57 attributes, and its ``geometry`` is a GeoJSON geometry or null.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shapely.errors import ShapelyError
from shapely.geometry import box, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from encviz.common import Envelope

log = logging.getLogger(__name__)

CHART_SUFFIX = ".000"
COVERAGE_AVAILABLE = 1


class ChartError(RuntimeError):
    """Raised when a chart cannot be read or lacks required content."""


@dataclass
class Feature:
    """A single chart feature: optional geometry plus attribute values."""

    geometry: BaseGeometry | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class Chart:
    """A chart's content as features grouped by layer name."""

    layers: dict[str, list[Feature]] = field(default_factory=dict)


@dataclass(frozen=True)
class ChartMetadata:
    """Index entry for one chart file."""

    path: Path
    scale: int
    bbox: Envelope


ChartReader = Callable[[Path], Chart]


def _parse_feature(obj: dict) -> Feature:
    geometry = obj.get("geometry")
    return Feature(
        geometry=shape(geometry) if geometry else None,
        attributes=dict(obj.get("properties") or {}),
    )


def read_chart(path) -> Chart:
    """Read a chart stored as a JSON document of GeoJSON layers."""
    try:
        with open(path, encoding="utf-8") as handle:
            doc = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ChartError(f"Cannot open chart dataset {path}") from exc

    try:
        layers = {
            name: [_parse_feature(obj) for obj in collection["features"]]
            for name, collection in doc["layers"].items()
        }
    except (KeyError, TypeError, AttributeError, ValueError, ShapelyError) as exc:
        raise ChartError(f"Malformed chart dataset {path}") from exc
    return Chart(layers=layers)


def _int_field(feature: Feature, name: str) -> int:
    if name not in feature.attributes:
        raise ChartError(f'Feature does not have field "{name}"')
    value = feature.attributes[name]
    if not isinstance(value, int) or isinstance(value, bool):
        raise ChartError(f'Feature field "{name}" is not an integer')
    return value


def _required_layer(chart: Chart, name: str) -> list[Feature]:
    layer = chart.layers.get(name)
    if layer is None:
        raise ChartError(f"Cannot open {name} layer")
    return layer


def _coverage_features(chart: Chart) -> Iterator[Feature]:
    for feature in _required_layer(chart, "M_COVR"):
        if _int_field(feature, "CATCOV") == COVERAGE_AVAILABLE:
            yield feature


def _coverage(chart: Chart) -> BaseGeometry:
    return unary_union(
        [f.geometry for f in _coverage_features(chart) if f.geometry is not None]
    )


def _clip_features(features: Iterable[Feature], clip: BaseGeometry) -> Iterator[Feature]:
    for feature in features:
        if feature.geometry is None or feature.geometry.is_empty:
            continue
        part = feature.geometry.intersection(clip)
        if part.is_empty:
            continue
        yield Feature(geometry=part, attributes=dict(feature.attributes))


class EncDataset:
    """Index of ENC charts, with a small on-disk metadata cache."""

    def __init__(self, cache_path=None, reader: ChartReader = read_chart):
        if cache_path is None:
            home = os.environ.get("HOME")
            cache_path = Path(home) / ".encviz" if home else None
        self.cache_path: Path | None = Path(cache_path) if cache_path is not None else None
        self._reader = reader
        self._charts: dict[str, ChartMetadata] = {}

    @property
    def charts(self) -> dict[str, ChartMetadata]:
        """Loaded chart metadata keyed by chart name (file stem)."""
        return dict(self._charts)

    def __len__(self) -> int:
        return len(self._charts)

    def clear(self) -> None:
        """Forget all loaded charts."""
        self._charts.clear()

    def load_charts(self, enc_root) -> int:
        """Recursively load every chart file under enc_root; return the index size."""
        for path in sorted(Path(enc_root).rglob(f"*{CHART_SUFFIX}")):
            self.load_chart(path)
        log.info("%d charts loaded", len(self._charts))
        return len(self._charts)

    def load_chart(self, path) -> bool:
        """Index one chart, from the cache when possible."""
        path = Path(path)
        return self._load_cache(path) or self._load_disk(path)

    def export_data(self, layers, bbox: Envelope, scale_min: int) -> dict[str, list[Feature]] | None:
        """Collect the best available features for the area and scale.

        Charts are taken most detailed first; each only contributes inside the
        part of bbox not already covered by a more detailed chart. Returns None
        when no chart qualifies.
        """
        log.info(
            "Filter: Scale=%d, BBOX=(%g to %g),(%g to %g)",
            scale_min, bbox.min_x, bbox.max_x, bbox.min_y, bbox.max_y,
        )

        candidates = (
            meta
            for _, meta in sorted(self._charts.items())
            if scale_min <= meta.scale and bbox.intersects(meta.bbox)
        )
        selected = sorted(candidates, key=lambda meta: meta.scale)
        if not selected:
            return None

        log.info("Selected %d/%d charts:", len(selected), len(self._charts))
        for meta in selected:
            log.info(" - (%d) %s", meta.scale, meta.path)

        output: dict[str, list[Feature]] = {name: [] for name in layers}
        missing = box(bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y)

        for meta in selected:
            log.info(" - Process: %s", meta.path.stem)
            chart = self._reader(meta.path)
            for name, collected in output.items():
                source = chart.layers.get(name)
                if source is None:
                    # Inland charts may lack some layers, such as depth contours
                    continue
                collected.extend(_clip_features(source, missing))

            missing = missing.difference(_coverage(chart))
            if missing.is_empty:
                log.info(" - Complete coverage (STOP)")
                break

        return output

    def _cache_file(self, path: Path) -> Path | None:
        return self.cache_path / path.stem if self.cache_path is not None else None

    def _save_cache(self, meta: ChartMetadata) -> bool:
        cache_file = self._cache_file(meta.path)
        if cache_file is None:
            return False
        lines = [
            str(meta.path),
            str(meta.scale),
            repr(meta.bbox.min_x),
            repr(meta.bbox.max_x),
            repr(meta.bbox.min_y),
            repr(meta.bbox.max_y),
        ]
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            cache_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError:
            return False
        return True

    def _load_cache(self, path: Path) -> bool:
        cache_file = self._cache_file(path)
        if cache_file is None or not cache_file.exists():
            return False
        try:
            lines = cache_file.read_text(encoding="utf-8").splitlines()
            if len(lines) < 6 or Path(lines[0]) != path:
                return False
            min_x, max_x, min_y, max_y = (float(value) for value in lines[2:6])
            meta = ChartMetadata(
                path=path,
                scale=int(lines[1]),
                bbox=Envelope(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y),
            )
        except (OSError, ValueError):
            return False
        self._charts[path.stem] = meta
        return True

    def _load_disk(self, path: Path) -> bool:
        chart = self._reader(path)

        dsid = _required_layer(chart, "DSID")
        if not dsid:
            raise ChartError("Cannot read DSID feature")
        scale = _int_field(dsid[0], "DSPM_CSCL")

        bbox = Envelope()
        for feature in _coverage_features(chart):
            if feature.geometry is None:
                raise ChartError("Cannot get feature geometry")
            if feature.geometry.is_empty:
                continue
            min_x, min_y, max_x, max_y = feature.geometry.bounds
            bbox = bbox.merge(Envelope(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y))

        meta = ChartMetadata(path=path, scale=scale, bbox=bbox)
        self._charts[path.stem] = meta
        self._save_cache(meta)
        return True