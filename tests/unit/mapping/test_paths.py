"""Unit tests for dot-path reads and writes."""

import copy

import pytest

from platform_adapter.mapping.paths import (
    MISSING,
    get_path,
    is_index_segment,
    set_path,
    split_path,
)


@pytest.fixture
def product():
    return {
        "title": "Shirt",
        "variants": [{"price": 1999, "sku": None}, {"price": 2499}],
        "meta": {"0": "zero", "tags": ["a", "b"]},
    }


class TestSegments:
    def test_split(self):
        assert split_path("variants.0.price") == ["variants", "0", "price"]

    @pytest.mark.parametrize("segment,expected", [("0", True), ("12", True), ("-1", False),
                                                   ("1a", False), ("", False), ("١", False)])
    def test_index_segment(self, segment, expected):
        assert is_index_segment(segment) is expected


class TestGetPath:
    def test_top_level(self, product):
        assert get_path(product, "title") == "Shirt"

    def test_nested_index(self, product):
        assert get_path(product, "variants.0.price") == 1999
        assert get_path(product, "variants.1.price") == 2499

    def test_digit_key_on_mapping(self, product):
        assert get_path(product, "meta.0") == "zero"

    def test_whole_container(self, product):
        assert get_path(product, "meta.tags") == ["a", "b"]

    @pytest.mark.parametrize(
        "path",
        [
            "missing",
            "variants.5.price",
            "variants.first.price",
            "variants.-1.price",
            "title.length",
            "variants.0.sku",
            "variants.0.sku.code",
        ],
    )
    def test_misses(self, product, path):
        assert get_path(product, path) is MISSING

    def test_read_does_not_mutate(self, product):
        before = copy.deepcopy(product)
        get_path(product, "variants.9.price")
        assert product == before

    def test_missing_is_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"


class TestSetPath:
    def test_creates_dicts(self):
        target = {}
        set_path(target, "item.details.name", "Shirt")
        assert target == {"item": {"details": {"name": "Shirt"}}}

    def test_creates_list_for_index_segment(self):
        target = {}
        set_path(target, "variants.0.price", 19.99)
        assert target == {"variants": [{"price": 19.99}]}

    def test_extends_list_with_placeholders(self):
        target = {}
        set_path(target, "tags.2", "c")
        assert target == {"tags": [None, None, "c"]}

    def test_writes_into_existing_list(self):
        target = {"tags": ["a"]}
        set_path(target, "tags.1", "b")
        assert target == {"tags": ["a", "b"]}

    def test_replaces_wrong_container_kind(self):
        target = {"item": "scalar", "list": {"x": 1}}
        set_path(target, "item.name", "Shirt")
        set_path(target, "list.0", "first")
        assert target == {"item": {"name": "Shirt"}, "list": ["first"]}

    def test_leading_index_segment_is_a_key(self):
        target = {}
        set_path(target, "0.name", "x")
        assert target == {"0": {"name": "x"}}

    def test_keeps_siblings(self):
        target = {"item": {"sku": "A1"}}
        set_path(target, "item.price", 5)
        assert target == {"item": {"sku": "A1", "price": 5}}

    @pytest.mark.parametrize(
        "path,value",
        [("a", 1), ("a.b.c", "x"), ("list.3", True), ("a.0.b.1.c", {"k": [1]}), ("n", None)],
    )
    def test_write_then_read(self, path, value):
        target = {}
        set_path(target, path, value)
        if value is None:
            assert get_path(target, path) is MISSING
        else:
            assert get_path(target, path) == value
