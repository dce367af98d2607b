"""
Geometry Decoder
Splits a shape record's flat point stream into rings at its part offsets
"""
from __future__ import annotations

from typing import List

from .types import GeometryRecord, Ring


def decode_rings(record: GeometryRecord) -> List[Ring]:
    """
    Decode one geometry record into its rings.

    Ring i spans ``points[parts[i]:parts[i + 1]]``; the last ring runs to the
    end of the point stream. Offsets are trusted here: records are checked
    for sane offsets by the adapters in ``sources`` before they get this far.
    """
    points = record.points
    if record.part_count == 1:
        return [Ring(tuple(points))]

    bounds = list(record.parts) + [len(points)]
    return [Ring(tuple(points[start:end])) for start, end in zip(bounds, bounds[1:])]


def first_ring(record: GeometryRecord) -> Ring:
    """Only the first part of a record (the whole stream when single-part)."""
    if record.part_count == 1:
        return Ring(tuple(record.points))
    return Ring(tuple(record.points[record.parts[0]:record.parts[1]]))
