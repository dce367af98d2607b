"""
Join Input Adapters

Converts what the loaders hand us (pandas attribute tables, pyshp shape
records, plain JSON-ish dicts) into AttributeRow / GeometryRecord values.
This is the boundary where part offsets get checked; the decoder itself
trusts its input.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd
import shapefile

from .types import AttributeRow, GeometryRecord, GeometryRecordError, Key, Point

logger = logging.getLogger(__name__)

POLYGON_SHAPE_TYPES = (shapefile.POLYGON, shapefile.POLYGONZ, shapefile.POLYGONM)


def validate_parts(key: Key, point_count: int, parts: Sequence[int]) -> Tuple[int, ...]:
    """Check part offsets: start at 0, strictly increasing, inside the stream."""
    parts = tuple(int(p) for p in parts)
    if not parts:
        return parts
    if point_count == 0:
        raise GeometryRecordError(f"Record {key!r} has part offsets {list(parts)} but no points")
    if parts[0] != 0:
        raise GeometryRecordError(f"Record {key!r} first part starts at {parts[0]}, expected 0")
    for prev, cur in zip(parts, parts[1:]):
        if cur <= prev:
            raise GeometryRecordError(f"Record {key!r} part offsets not strictly increasing: {list(parts)}")
    if parts[-1] >= point_count:
        raise GeometryRecordError(
            f"Record {key!r} part offset {parts[-1]} out of range for {point_count} points"
        )
    return parts


def _to_points(raw_points: Iterable[Sequence[float]]) -> Tuple[Point, ...]:
    # Z/M shapes carry extra ordinates; rings are 2D
    return tuple((float(p[0]), float(p[1])) for p in raw_points)


def make_record(key: Key, points: Iterable[Sequence[float]], parts: Sequence[int] = ()) -> GeometryRecord:
    pts = _to_points(points)
    return GeometryRecord(key=key, points=pts, parts=validate_parts(key, len(pts), parts))


def rows_from_dataframe(df: pd.DataFrame, key_field: str) -> List[AttributeRow]:
    """One AttributeRow per DataFrame row, in frame order; the key column is lifted out."""
    if key_field not in df.columns:
        raise KeyError(f"Key field '{key_field}' not in attribute columns: {list(df.columns)}")
    value_cols = [c for c in df.columns if c != key_field]
    rows = []
    for key, values in zip(df[key_field].tolist(), df[value_cols].to_dict(orient="records")):
        rows.append(AttributeRow(key=key, fields=values))
    return rows


def rows_from_dicts(items: Iterable[Mapping[str, Any]], key_field: str) -> List[AttributeRow]:
    rows = []
    for i, item in enumerate(items):
        if key_field not in item:
            raise KeyError(f"Attribute row {i} has no key field '{key_field}'")
        fields = {k: v for k, v in item.items() if k != key_field}
        rows.append(AttributeRow(key=item[key_field], fields=fields))
    return rows


def records_from_dicts(items: Iterable[Mapping[str, Any]], key_field: str = "key") -> List[GeometryRecord]:
    """Records from ``{key, points, parts}`` mappings (the HTTP request shape)."""
    records = []
    for i, item in enumerate(items):
        if key_field not in item:
            raise KeyError(f"Geometry record {i} has no key field '{key_field}'")
        records.append(make_record(item[key_field], item.get("points") or [], item.get("parts") or ()))
    return records


def records_from_shapes(shapes: Sequence[Any], keys: Sequence[Key]) -> List[GeometryRecord]:
    """
    Records from pyshp shapes paired with their key values.

    Null shapes are skipped (their rows then simply go unmatched); any
    non-polygon shape type is rejected.
    """
    if len(shapes) != len(keys):
        raise GeometryRecordError(f"Got {len(shapes)} shapes but {len(keys)} keys")

    records = []
    skipped = 0
    for shape, key in zip(shapes, keys):
        if shape.shapeType == shapefile.NULL or not shape.points:
            skipped += 1
            continue
        if shape.shapeType not in POLYGON_SHAPE_TYPES:
            raise GeometryRecordError(
                f"Record {key!r} has shape type {shape.shapeTypeName}, expected a polygon type"
            )
        records.append(make_record(key, shape.points, shape.parts))

    if skipped:
        logger.warning(f"⚠️ Skipped {skipped} null shapes")
    return records


def records_from_shape_records(shape_records: Iterable[Any], key_field: str) -> List[GeometryRecord]:
    """Records from ``Reader.iterShapeRecords()`` output, keyed by a DBF field."""
    shapes: List[Any] = []
    keys: List[Key] = []
    for sr in shape_records:
        attrs: Dict[str, Any] = sr.record.as_dict()
        if key_field not in attrs:
            raise KeyError(f"Key field '{key_field}' not in shape attributes: {list(attrs)}")
        shapes.append(sr.shape)
        keys.append(attrs[key_field])
    return records_from_shapes(shapes, keys)
