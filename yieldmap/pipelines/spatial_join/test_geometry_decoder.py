from __future__ import annotations

import pytest

from .geometry_decoder import decode_rings, first_ring
from .types import GeometryRecord


SQUARE = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0))


@pytest.mark.parametrize("parts", [(), (0,)])
def test_single_part_is_one_ring_with_every_point(parts) -> None:
    record = GeometryRecord(key=1, points=SQUARE, parts=parts)
    rings = decode_rings(record)
    assert len(rings) == 1
    assert rings[0].points == SQUARE


def test_multi_part_splits_at_offsets() -> None:
    points = tuple((float(i), float(i)) for i in range(10))
    record = GeometryRecord(key="A", points=points, parts=(0, 3, 7))
    rings = decode_rings(record)

    assert [len(r) for r in rings] == [3, 4, 3]
    assert rings[0].points == points[0:3]
    assert rings[1].points == points[3:7]
    assert rings[2].points == points[7:10]
    assert sum(len(r) for r in rings) == record.point_count


def test_two_parts_split_eight_points_at_four() -> None:
    points = SQUARE + tuple((x + 5, y) for x, y in SQUARE)
    rings = decode_rings(GeometryRecord(key=3, points=points, parts=(0, 4)))
    assert [r.points for r in rings] == [SQUARE, points[4:]]


def test_first_ring_only_reads_first_part() -> None:
    points = SQUARE + tuple((x + 5, y) for x, y in SQUARE)
    assert first_ring(GeometryRecord(key=3, points=points, parts=(0, 4))).points == SQUARE
    assert first_ring(GeometryRecord(key=3, points=SQUARE)).points == SQUARE
