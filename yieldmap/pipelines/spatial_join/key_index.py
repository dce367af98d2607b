"""
Key Index

Hash lookup from join key to every geometry record position carrying that
key. Shapefiles routinely store one county as several records (islands,
exclaves) under the same code, so all positions are kept in source order.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, KeysView, List, Optional, Sequence, Tuple

from .types import GeometryRecord, Key

logger = logging.getLogger(__name__)

_UNMATCHABLE = object()


def apply_normalizer(key: Key, key_normalizer: Optional[Callable[[Key], Key]]) -> Key:
    """
    Normalize a key, mapping failures to a sentinel that never matches.

    A value the normalizer cannot handle (``int("abc")``) should just leave
    that row or record unmatched instead of aborting the whole join.
    """
    if key_normalizer is None:
        return key
    try:
        return key_normalizer(key)
    except (TypeError, ValueError):
        logger.debug(f"Key {key!r} could not be normalized; treating as unmatched")
        return _UNMATCHABLE


class KeyIndex:
    """Join key -> ordered record positions."""

    def __init__(self, positions: Dict[Key, List[int]], key_normalizer: Optional[Callable[[Key], Key]] = None) -> None:
        self._positions = positions
        self._key_normalizer = key_normalizer

    @classmethod
    def build(
        cls,
        records: Iterable[Tuple[Key, GeometryRecord]],
        key_normalizer: Optional[Callable[[Key], Key]] = None,
    ) -> "KeyIndex":
        positions: Dict[Key, List[int]] = {}
        for position, (key, _record) in enumerate(records):
            norm = apply_normalizer(key, key_normalizer)
            if norm is _UNMATCHABLE:
                continue
            positions.setdefault(norm, []).append(position)
        return cls(positions, key_normalizer)

    @classmethod
    def from_records(
        cls,
        records: Sequence[GeometryRecord],
        key_normalizer: Optional[Callable[[Key], Key]] = None,
    ) -> "KeyIndex":
        return cls.build(((r.key, r) for r in records), key_normalizer)

    def lookup(self, key: Key) -> List[int]:
        """Positions for ``key``; an absent key yields an empty list."""
        norm = apply_normalizer(key, self._key_normalizer)
        if norm is _UNMATCHABLE:
            return []
        return list(self._positions.get(norm, ()))

    def duplicated_keys(self) -> List[Key]:
        return [k for k, pos in self._positions.items() if len(pos) > 1]

    def keys(self) -> KeysView:
        return self._positions.keys()

    def __contains__(self, key: Key) -> bool:
        return bool(self.lookup(key))

    def __len__(self) -> int:
        return len(self._positions)
