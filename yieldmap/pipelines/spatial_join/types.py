from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, Optional, Sequence, Tuple

Key = Hashable
Point = Tuple[float, float]


@dataclass(frozen=True)
class Ring:
    """
    One closed boundary loop taken from a geometry record's point stream.

    Points are kept exactly as the source supplied them; no closing point is
    appended.
    """

    points: Tuple[Point, ...]

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)


@dataclass(frozen=True)
class AttributeRow:
    """
    Tabular record to be joined onto a geometry.

    Keys are not guaranteed to be unique across rows.
    """

    key: Key
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GeometryRecord:
    """
    Parsed shape record: a flat point stream plus zero-based part start offsets.

    A single-part record may carry ``parts=(0,)`` or an empty tuple; both
    mean "one ring spanning every point".
    """

    key: Key
    points: Tuple[Point, ...]
    parts: Tuple[int, ...] = ()

    @property
    def part_count(self) -> int:
        return max(len(self.parts), 1)

    @property
    def point_count(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class PolygonEntity:
    """One rendered region: every ring grouped under a single key."""

    key: Key
    rings: Tuple[Ring, ...]

    @property
    def ring_count(self) -> int:
        return len(self.rings)


@dataclass(frozen=True)
class JoinedFeature:
    row: AttributeRow
    polygon: PolygonEntity

    @property
    def key(self) -> Key:
        return self.row.key


@dataclass
class CombinedDataset:
    """
    Ordered join output plus the diagnostics a caller needs to detect
    silent data loss.

    ``len(features) + dropped_count == total_rows`` always holds.
    """

    features: List[JoinedFeature]
    total_rows: int
    unmatched_keys: List[Key] = field(default_factory=list)
    duplicate_keys: List[Key] = field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.unmatched_keys)

    @property
    def keys(self) -> List[Key]:
        return [f.key for f in self.features]

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[JoinedFeature]:
        return iter(self.features)

    def summary(self) -> Dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "matched_rows": len(self.features),
            "dropped_rows": self.dropped_count,
            "unmatched_keys": list(self.unmatched_keys),
            "duplicate_keys": list(self.duplicate_keys),
        }


class NoMatchError(ValueError):
    """Raised when not a single attribute row found a geometry match."""

    def __init__(self, total_rows: int, sample_keys: Optional[Sequence[Key]] = None):
        self.total_rows = total_rows
        self.sample_keys = list(sample_keys or [])
        message = f"None of the {total_rows} attribute rows matched a geometry record"
        if self.sample_keys:
            message += f" (sample keys: {self.sample_keys!r}); check that key types agree on both sides"
        super().__init__(message)


class GeometryRecordError(ValueError):
    """Raised at the adapter boundary for records with unusable part offsets."""


class ReservedFieldError(ValueError):
    """Raised when an attribute field collides with a column the exporter writes."""
