from __future__ import annotations

from .key_index import KeyIndex
from .types import GeometryRecord


def _record(key) -> GeometryRecord:
    return GeometryRecord(key=key, points=((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)))


def test_keeps_every_position_for_duplicate_keys() -> None:
    index = KeyIndex.from_records([_record("a"), _record("b"), _record("a"), _record("a")])
    assert index.lookup("a") == [0, 2, 3]
    assert index.lookup("b") == [1]
    assert index.duplicated_keys() == ["a"]
    assert len(index) == 2


def test_absent_key_is_empty_not_an_error() -> None:
    index = KeyIndex.from_records([_record(1)])
    assert index.lookup(2) == []
    assert 2 not in index
    assert 1 in index


def test_int_and_str_keys_do_not_match_without_normalizer() -> None:
    index = KeyIndex.from_records([_record(140100)])
    assert index.lookup("140100") == []


def test_normalizer_applies_to_both_sides() -> None:
    index = KeyIndex.from_records([_record(140100), _record(" 140200 ")], key_normalizer=lambda k: str(k).strip())
    assert index.lookup("140100") == [0]
    assert index.lookup(140200) == [1]


def test_keys_the_normalizer_rejects_never_match() -> None:
    index = KeyIndex.from_records([_record("12"), _record("n/a")], key_normalizer=int)
    assert index.lookup(12) == [0]
    assert index.lookup("n/a") == []
    assert len(index) == 1
