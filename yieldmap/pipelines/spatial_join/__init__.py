"""
Spatial Join Module
Reconstructs county polygons from shape records and joins them to attribute tables
"""
from .join_engine import join
from .key_index import KeyIndex
from .geometry_decoder import decode_rings
from .polygon_assembler import assemble_polygon
from .pipeline import SpatialJoinPipeline
from .types import (
    AttributeRow,
    CombinedDataset,
    GeometryRecord,
    GeometryRecordError,
    JoinedFeature,
    NoMatchError,
    PolygonEntity,
    ReservedFieldError,
    Ring,
)

__all__ = [
    "join",
    "KeyIndex",
    "decode_rings",
    "assemble_polygon",
    "SpatialJoinPipeline",
    "AttributeRow",
    "CombinedDataset",
    "GeometryRecord",
    "GeometryRecordError",
    "JoinedFeature",
    "NoMatchError",
    "PolygonEntity",
    "ReservedFieldError",
    "Ring",
]
