"""
Renderer hand-off: CombinedDataset -> GeoDataFrame / GeoJSON
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import geopandas as gpd
from shapely.geometry import MultiPolygon, Polygon

from .types import CombinedDataset, PolygonEntity, ReservedFieldError

logger = logging.getLogger(__name__)

GENERATED_COLUMNS = ("ring_count", "geometry")


def check_reserved_fields(dataset: CombinedDataset, key_column: str) -> None:
    """Refuse attribute fields that would shadow the key or a generated column."""
    reserved = {key_column, *GENERATED_COLUMNS}
    for feature in dataset:
        clashes = sorted(reserved.intersection(feature.row.fields))
        if clashes:
            raise ReservedFieldError(
                f"Attribute fields {clashes} on row {feature.key!r} clash with exported columns; "
                f"rename them before joining"
            )


def polygon_to_shape(polygon: PolygonEntity):
    """Shapely geometry for an entity: Polygon for one ring, MultiPolygon otherwise."""
    shells = [Polygon(ring.points) for ring in polygon.rings]
    if len(shells) == 1:
        return shells[0]
    return MultiPolygon(shells)


def to_geodataframe(
    dataset: CombinedDataset,
    key_column: str = "key",
    crs: Optional[str] = None,
) -> gpd.GeoDataFrame:
    """
    One row per joined feature, in dataset order.

    Columns are the key column, the attribute fields in first-seen order,
    ``ring_count`` and ``geometry``.
    """
    check_reserved_fields(dataset, key_column)
    columns: List[str] = [key_column]
    data: List[Dict[str, Any]] = []
    for feature in dataset:
        record = {key_column: feature.key}
        for name, value in feature.row.fields.items():
            if name not in columns:
                columns.append(name)
            record[name] = value
        record["ring_count"] = feature.polygon.ring_count
        data.append(record)
    columns.append("ring_count")

    geometries = [polygon_to_shape(f.polygon) for f in dataset]
    gdf = gpd.GeoDataFrame(data, columns=columns, geometry=geometries, crs=crs)
    logger.info(f"🗺️ Built GeoDataFrame with {len(gdf)} features")
    return gdf


def polygon_to_geojson(polygon: PolygonEntity) -> Dict[str, Any]:
    # Rings go out exactly as assembled; shapely would re-close them
    rings = [[[x, y] for x, y in ring.points] for ring in polygon.rings]
    if len(rings) == 1:
        return {"type": "Polygon", "coordinates": [rings[0]]}
    return {"type": "MultiPolygon", "coordinates": [[ring] for ring in rings]}


def to_feature_collection(dataset: CombinedDataset, key_column: str = "key") -> Dict[str, Any]:
    check_reserved_fields(dataset, key_column)
    features = []
    for feature in dataset:
        properties = {key_column: feature.key}
        properties.update(feature.row.fields)
        properties["ring_count"] = feature.polygon.ring_count
        features.append({
            "type": "Feature",
            "geometry": polygon_to_geojson(feature.polygon),
            "properties": properties,
        })
    return {"type": "FeatureCollection", "features": features}
