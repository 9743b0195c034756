# tests/test_canonical.py
"""Tests for canonical JSON serialization."""

import copy
import math

import pytest

from scrapesafe_core.app.utils.canonical import canonical, canonical_json


class TestCanonical:

    def test_key_order_does_not_matter(self):
        a = {"b": 1, "a": 2, "c": {"y": 1, "x": 2}}
        b = {"c": {"x": 2, "y": 1}, "a": 2, "b": 1}
        assert canonical(a) == canonical(b)

    def test_exact_output(self):
        value = {"b": 1, "a": {"d": [3, {"z": 1, "y": 2}], "c": None}}
        assert canonical(value) == '{"a":{"c":null,"d":[3,{"y":2,"z":1}]},"b":1}'

    def test_arrays_keep_order(self):
        assert canonical(["SCRAPE", "TRAIN"]) != canonical(["TRAIN", "SCRAPE"])

    def test_input_not_mutated(self):
        value = {"b": [{"d": 1, "c": 2}], "a": (1, 2)}
        snapshot = copy.deepcopy(value)
        canonical(value)
        assert value == snapshot
        assert list(value.keys()) == ["b", "a"]

    def test_primitives(self):
        assert canonical(None) == "null"
        assert canonical(True) == "true"
        assert canonical("x") == '"x"'
        assert canonical(1.5) == "1.5"

    def test_integral_float_matches_integer(self):
        assert canonical({"price": 50.0}) == canonical({"price": 50}) == '{"price":50}'

    def test_non_ascii_kept_verbatim(self):
        assert canonical({"k": "é"}) == '{"k":"é"}'

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            canonical({"x": math.nan})

    def test_canonical_json_reorders(self):
        assert canonical_json('{ "b": 1,\n "a": [1, 2] }') == '{"a":[1,2],"b":1}'
