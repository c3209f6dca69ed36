"""Tests for deterministic hashing helpers."""

import math
import re

from reactor_planning.utils import canonical_json, fnv1a32, normalize_number, stable_id


class TestFnv1a:
    """Tests for the 32-bit FNV-1a hash."""

    def test_empty_string_is_offset_basis(self):
        assert fnv1a32("") == 0x811C9DC5

    def test_known_value(self):
        assert fnv1a32("a") == 0xE40C292C

    def test_fits_in_32_bits(self):
        assert 0 <= fnv1a32("rwBatch|RW09|0|335|" * 50) <= 0xFFFFFFFF

    def test_non_ascii_hashes_utf8_bytes(self):
        """Test that product names with umlauts hash deterministically."""
        assert fnv1a32("Lösung") == fnv1a32("Lösung")
        assert fnv1a32("Lösung") != fnv1a32("Losung")


class TestNormalizeNumber:
    """Tests for stable number serialization."""

    def test_integral_float_becomes_int(self):
        value = normalize_number(330.0)

        assert value == 330
        assert isinstance(value, int)

    def test_rounded_to_six_decimals(self):
        assert normalize_number(1 / 3) == 0.333333

    def test_non_finite_becomes_none(self):
        assert normalize_number(math.nan) is None
        assert normalize_number(math.inf) is None

    def test_none(self):
        assert normalize_number(None) is None


class TestStableId:
    """Tests for content-derived ids."""

    def test_canonical_json_sorts_keys(self):
        assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_format(self):
        assert re.fullmatch(r"rwBatch_[0-9a-f]{8}", stable_id("rwBatch", {"laneId": "RW09"}))

    def test_same_content_same_id(self):
        first = stable_id("lineFill", {"a": 1, "b": [1, 2]})
        second = stable_id("lineFill", {"b": [1, 2], "a": 1})

        assert first == second

    def test_different_content_different_id(self):
        assert stable_id("lineFill", {"a": 1}) != stable_id("lineFill", {"a": 2})
