"""Tests for value tier classification.

Coverage:
- Bracket edges (upper bound inclusive)
- Unbounded top tier
- Unrated fallback
- Tier compatibility
"""

import math

import pytest

from src.domain.value_tier import UNRATED, VALUE_TIERS, same_tier, tier_of, tier_table


class TestTierOf:
    @pytest.mark.parametrize(
        "value, label",
        [
            (0, "5 coins and below"),
            (5, "5 coins and below"),
            (5.01, "5-25 coins"),
            (25, "5-25 coins"),
            (25.5, "25-50 coins"),
            (40, "25-50 coins"),
            (50, "25-50 coins"),
            (75, "50-75 coins"),
            (100, "75-100 coins"),
            (100.001, "100-250 coins"),
            (250, "100-250 coins"),
            (500, "250-500 coins"),
            (500.01, "500+ coins"),
            (10**9, "500+ coins"),
        ],
    )
    def test_brackets(self, value, label):
        assert tier_of(value) == label

    def test_value_between_legacy_gaps_is_rated(self):
        """5.005 sits between 5 and 5.01 and still belongs to the 5-25 tier."""
        assert tier_of(5.005) == "5-25 coins"

    @pytest.mark.parametrize("value", [-0.01, -100, math.nan, math.inf, None, "abc", True])
    def test_unrated_fallback(self, value):
        assert tier_of(value) == UNRATED

    def test_numeric_strings_are_classified(self):
        assert tier_of("45") == "25-50 coins"


class TestSameTier:
    def test_same_bracket(self):
        assert same_tier(40, 45)

    def test_adjacent_brackets(self):
        assert not same_tier(50, 50.5)

    def test_is_symmetric(self):
        assert same_tier(26, 49) == same_tier(49, 26)


class TestTierTable:
    def test_table_matches_brackets(self):
        table = tier_table()
        assert [entry["label"] for entry in table] == [label for label, _, _ in VALUE_TIERS]
        assert table[0]["min"] == 0.0
        assert table[-1]["max"] is None
