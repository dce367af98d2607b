from __future__ import annotations

import pandas as pd
import pytest
import shapefile

from .pipeline import SpatialJoinPipeline, get_key_normalizer


SQUARE = [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0], [0.0, 0.0]]
ISLAND = [[5.0, 5.0], [5.0, 6.0], [6.0, 6.0], [6.0, 5.0], [5.0, 5.0]]


def test_get_key_normalizer() -> None:
    assert get_key_normalizer("none") is None
    assert get_key_normalizer(None) is None
    assert get_key_normalizer("STR")(140100) == "140100"
    assert get_key_normalizer("int")(" 0140100 ") == 140100
    with pytest.raises(ValueError):
        get_key_normalizer("float")


def test_process_returns_geojson_and_diagnostics() -> None:
    pipeline = SpatialJoinPipeline(key_field="key")
    rows = [{"key": 1, "val": 10}, {"key": 2, "val": 20}, {"key": 3, "val": 30}]
    records = [
        {"key": "1", "points": SQUARE, "parts": [0]},
        {"key": "3", "points": SQUARE + ISLAND, "parts": [0, 5]},
    ]
    result = pipeline.process(rows, records, {"normalize_keys": "str"})

    assert result["success"] is True
    meta = result["metadata"]
    assert meta["matched_rows"] == 2
    assert meta["dropped_rows"] == 1
    assert meta["unmatched_keys"] == [2]
    features = result["geojson"]["features"]
    assert [f["properties"]["key"] for f in features] == [1, 3]
    assert features[1]["geometry"]["type"] == "MultiPolygon"


def test_process_without_normalization_reports_no_match() -> None:
    pipeline = SpatialJoinPipeline(key_field="key")
    result = pipeline.process(
        [{"key": 1}],
        [{"key": "1", "points": SQUARE, "parts": [0]}],
        {"normalize_keys": "none"},
    )
    assert result["success"] is False
    assert result["error_type"] == "no_match"


def test_process_bad_offsets_is_invalid_input() -> None:
    pipeline = SpatialJoinPipeline(key_field="key")
    result = pipeline.process([{"key": 1}], [{"key": 1, "points": SQUARE, "parts": [0, 9]}])
    assert result["success"] is False
    assert result["error_type"] == "invalid_input"


def test_join_frames_from_shapefile(tmp_path) -> None:
    base = str(tmp_path / "county_LP")
    with shapefile.Writer(base, shapeType=shapefile.POLYGON) as w:
        w.field("CODE", "C", size=10)
        w.poly([SQUARE])
        w.record("140100")
        w.poly([ISLAND])
        w.record("140200")
        w.poly([SQUARE])
        w.record("140200")

    attributes = pd.DataFrame({"CODE": [140100, 140200, 149900], "Yield_t_ha": [5.5, 6.1, 4.0]})
    pipeline = SpatialJoinPipeline(key_field="CODE")
    with shapefile.Reader(base) as r:
        gdf, dataset = pipeline.join_frames(attributes, r.iterShapeRecords(), {"normalize_keys": "str"})

    assert list(gdf["CODE"]) == [140100, 140200]
    assert list(gdf["ring_count"]) == [1, 2]
    assert dataset.unmatched_keys == [149900]
    assert dataset.duplicate_keys == [140200]


@pytest.mark.parametrize("name, expected", [("str", "140100"), ("int", 140100)])
def test_normalizers_treat_integral_floats_as_ints(name, expected) -> None:
    assert get_key_normalizer(name)(140100.0) == expected
    assert get_key_normalizer(name)("140100") == expected


def test_float_code_column_with_missing_values_still_joins() -> None:
    pipeline = SpatialJoinPipeline(key_field="CODE")
    attributes = pd.DataFrame({"CODE": [140100, None, 140200], "Yield_t_ha": [5.5, 4.0, 6.1]})
    assert attributes["CODE"].dtype == "float64"

    records = [
        {"key": "140100", "points": SQUARE, "parts": [0]},
        {"key": "140200", "points": ISLAND, "parts": [0]},
    ]
    rows = attributes.to_dict(orient="records")
    for option in ("str", "int"):
        result = pipeline.process(rows, records, {"normalize_keys": option})
        assert result["success"] is True, result
        assert result["metadata"]["matched_rows"] == 2
        assert result["metadata"]["dropped_rows"] == 1
