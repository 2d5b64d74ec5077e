import json

import pytest

from occasions.exceptions import ValidationError
from occasions.gid import customer_gid, metaobject_gid
from occasions.occasion_list import (
    append_occasion,
    dump_occasion_list,
    parse_occasion_list,
    remove_occasion,
)


class TestParseOccasionList:
    @pytest.mark.parametrize("raw", [None, "", "not json", "{\"a\": 1}", "42", "null", "[1, 2"])
    def test_missing_or_malformed_value_is_empty(self, raw):
        assert parse_occasion_list(raw) == []

    def test_keeps_order_and_drops_non_strings(self):
        raw = json.dumps(["gid://shopify/Metaobject/2", 7, None, "", "gid://shopify/Metaobject/1"])
        assert parse_occasion_list(raw) == [
            "gid://shopify/Metaobject/2",
            "gid://shopify/Metaobject/1",
        ]

    def test_reads_what_dump_writes(self):
        ids = ["gid://shopify/Metaobject/1", "gid://shopify/Metaobject/2"]
        assert parse_occasion_list(dump_occasion_list(ids)) == ids


def test_dump_is_a_plain_json_array():
    assert dump_occasion_list([]) == "[]"
    assert dump_occasion_list(["gid://shopify/Metaobject/1"]) == '["gid://shopify/Metaobject/1"]'


def test_append_does_not_duplicate():
    ids = ["a", "b"]
    assert append_occasion(ids, "c") == ["a", "b", "c"]
    assert append_occasion(ids, "a") == ["a", "b"]
    assert ids == ["a", "b"]


def test_remove_drops_every_copy():
    assert remove_occasion(["a", "b", "a"], "a") == ["b"]
    assert remove_occasion(["a"], "z") == ["a"]


class TestGid:
    def test_numeric_ids_are_qualified(self):
        assert customer_gid("123") == "gid://shopify/Customer/123"
        assert metaobject_gid(" 42 ") == "gid://shopify/Metaobject/42"

    def test_qualified_ids_pass_through(self):
        assert customer_gid("gid://shopify/Customer/9") == "gid://shopify/Customer/9"

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "abc",
            "12a",
            "gid://shopify/Metaobject/5",
            "gid://shopify/Customer/abc",
            "gid://shopify/Customer/",
            "gid://other/Customer/5",
        ],
    )
    def test_other_values_are_rejected(self, value):
        with pytest.raises(ValidationError):
            customer_gid(value)
