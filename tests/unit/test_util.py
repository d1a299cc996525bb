"""Unit tests for the shared helpers and deep merge."""

from datetime import datetime, timezone

from supplejack.domain.util import (
    as_list,
    deep_merge,
    deep_merge_in_place,
    is_blank,
    is_present,
    parse_time,
    stringify_keys,
    to_int,
)


# ── Deep merge ──


def test_deep_merge_combines_disjoint_keys():
    assert deep_merge({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}


def test_deep_merge_keeps_equal_values_once():
    assert deep_merge({"category": "Images"}, {"category": "Images"}) == {"category": "Images"}


def test_deep_merge_concatenates_conflicting_scalars():
    merged = deep_merge({"category": "Images"}, {"category": "Videos"})
    assert merged == {"category": ["Images", "Videos"]}


def test_deep_merge_appends_scalar_to_list():
    assert deep_merge({"year": ["1900", "1901"]}, {"year": "1902"}) == {"year": ["1900", "1901", "1902"]}


def test_deep_merge_recurses_into_mappings():
    merged = deep_merge({"and": {"category": "Images"}}, {"and": {"creator": "Smith"}})
    assert merged == {"and": {"category": "Images", "creator": "Smith"}}


def test_deep_merge_mapping_against_scalar_becomes_list():
    assert deep_merge({"a": {"x": 1}}, {"a": 2}) == {"a": [{"x": 1}, 2]}


def test_deep_merge_ignores_none_on_the_right():
    assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}


def test_deep_merge_does_not_mutate_inputs():
    left = {"and": {"category": "Images"}}
    right = {"and": {"category": "Videos"}}
    deep_merge(left, right)
    assert left == {"and": {"category": "Images"}}
    assert right == {"and": {"category": "Videos"}}


def test_deep_merge_stringifies_keys_and_tolerates_non_mappings():
    assert deep_merge({1: "a"}, None) == {"1": "a"}


def test_deep_merge_in_place_mutates_left():
    left = {"a": 1}
    result = deep_merge_in_place(left, {"b": 2})
    assert result is left
    assert left == {"a": 1, "b": 2}


# ── Coercion helpers ──


def test_to_int_is_lenient():
    assert to_int("12abc") == 12
    assert to_int("-3") == -3
    assert to_int("abc") == 0
    assert to_int(None) == 0
    assert to_int(4.7) == 4
    assert to_int(True) == 1


def test_is_blank():
    for value in (None, False, "", "   ", [], {}, ()):
        assert is_blank(value)
    for value in (0, "a", [None], {"a": 1}, True):
        assert is_present(value)


def test_as_list():
    assert as_list(None) == []
    assert as_list("a") == ["a"]
    assert as_list(("a", "b")) == ["a", "b"]
    values = [1]
    assert as_list(values) is values


def test_parse_time():
    assert parse_time("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_time("not a date") is None
    assert parse_time(None) is None


def test_stringify_keys():
    assert stringify_keys({1: "a", "b": 2}) == {"1": "a", "b": 2}
    assert stringify_keys("junk") == {}
