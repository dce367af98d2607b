"""
Polygon Assembler
Turns the geometry records matching one key into a single polygon entity
"""
from __future__ import annotations

from typing import Optional, Sequence

from .geometry_decoder import decode_rings, first_ring
from .types import GeometryRecord, Key, PolygonEntity


def assemble_polygon(key: Key, matches: Sequence[GeometryRecord]) -> Optional[PolygonEntity]:
    """
    Build the polygon entity for ``key`` from its matching records.

    - no match: ``None``; the caller drops the row
    - one match: every part of the record becomes a ring
    - several matches: one ring per record, from each record's first part only

    The several-matches case deliberately does not decode further parts so
    ring counts stay what existing renderers expect.
    """
    if not matches:
        return None

    if len(matches) == 1:
        rings = decode_rings(matches[0])
    else:
        rings = [first_ring(record) for record in matches]

    return PolygonEntity(key=key, rings=tuple(rings))
