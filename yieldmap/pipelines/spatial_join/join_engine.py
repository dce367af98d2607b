"""
Join Engine
Joins an attribute table onto shape geometries by key and assembles the
combined spatial dataset handed to the map renderer.
"""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .key_index import KeyIndex
from .polygon_assembler import assemble_polygon
from .types import (
    AttributeRow,
    CombinedDataset,
    GeometryRecord,
    JoinedFeature,
    Key,
    NoMatchError,
    PolygonEntity,
)

logger = logging.getLogger(__name__)

_SAMPLE_KEYS = 5


def _resolve_row(
    row: AttributeRow,
    index: KeyIndex,
    records: Sequence[GeometryRecord],
) -> Tuple[Optional[PolygonEntity], int]:
    positions = index.lookup(row.key)
    matches = [records[p] for p in positions]
    return assemble_polygon(row.key, matches), len(matches)


def join(
    rows: Sequence[AttributeRow],
    records: Sequence[GeometryRecord],
    key_normalizer: Optional[Callable[[Key], Key]] = None,
    max_workers: Optional[int] = None,
) -> CombinedDataset:
    """
    Join attribute rows onto geometry records.

    Rows without any geometry are dropped and reported through
    ``CombinedDataset.unmatched_keys``. If every row is dropped the key
    columns almost certainly disagree (int vs str codes), so
    ``NoMatchError`` is raised instead of returning an empty dataset.

    Args:
        rows: Attribute rows in output order
        records: Geometry records in source order
        key_normalizer: Applied to keys on both sides before matching
        max_workers: Assemble rows on a thread pool when greater than 1

    Returns:
        CombinedDataset: matched rows in input order plus drop diagnostics
    """
    index = KeyIndex.from_records(records, key_normalizer)
    logger.info(f"🔗 Indexed {len(records)} geometry records under {len(index)} keys")

    if max_workers and max_workers > 1 and len(rows) > 1:
        # map() yields in submission order, so output order matches the sequential path
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            resolved = list(executor.map(lambda r: _resolve_row(r, index, records), rows))
    else:
        resolved = [_resolve_row(row, index, records) for row in rows]

    features: List[JoinedFeature] = []
    unmatched: List[Key] = []
    duplicates: List[Key] = []
    for row, (polygon, match_count) in zip(rows, resolved):
        if polygon is None:
            unmatched.append(row.key)
            continue
        if match_count > 1:
            duplicates.append(row.key)
        features.append(JoinedFeature(row=row, polygon=polygon))

    if not features:
        logger.error(f"❌ No attribute rows matched any of {len(records)} geometry records")
        raise NoMatchError(len(rows), unmatched[:_SAMPLE_KEYS])

    if unmatched:
        logger.warning(
            f"⚠️ Dropped {len(unmatched)} of {len(rows)} attribute rows without geometry "
            f"(e.g. {unmatched[:_SAMPLE_KEYS]})"
        )
    if duplicates:
        logger.info(f"🧩 {len(duplicates)} rows resolved through duplicate geometry keys")

    logger.info(f"✅ Joined {len(features)}/{len(rows)} attribute rows")
    return CombinedDataset(
        features=features,
        total_rows=len(rows),
        unmatched_keys=unmatched,
        duplicate_keys=duplicates,
    )
