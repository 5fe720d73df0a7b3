"""Tests for price rounding."""

import logging
from decimal import Decimal

import pytest

from src.services.rounding_engine import (
    CurrencyRoundingHelper,
    apply_charm_pricing,
    apply_rounding,
    common_rounding_intervals,
    is_valid_rounding_rule,
    parse_rounding_rule,
    round_down,
    round_up,
    rounding_proposals,
    rounding_rule_instructions,
)


class TestParseRoundingRule:
    """Tests for parse_rounding_rule."""

    def test_valid_rule(self):
        assert parse_rounding_rule("0.05") == Decimal("0.05")
        assert parse_rounding_rule(" 100 ") == Decimal("100")

    @pytest.mark.parametrize("rule", [None, "", "   "])
    def test_empty_rule_is_none(self, rule):
        assert parse_rounding_rule(rule) is None

    @pytest.mark.parametrize("rule", ["abc", "0", "-0.05", "NaN", "Infinity"])
    def test_unusable_rule_is_none_with_warning(self, rule, caplog):
        with caplog.at_level(logging.WARNING):
            assert parse_rounding_rule(rule) is None
        assert "parse_rounding_rule: invalid_rule" in caplog.text


class TestApplyRounding:
    """Tests for apply_rounding."""

    def test_nearest_five_cents(self):
        assert apply_rounding(Decimal("12.348"), "0.05") == Decimal("12.35")
        assert apply_rounding(Decimal("12.32"), "0.05") == Decimal("12.30")

    def test_whole_units(self):
        assert apply_rounding(Decimal("45.622"), "1.00") == Decimal("46")
        assert apply_rounding(Decimal("1234"), "100") == Decimal("1200")

    def test_half_rounds_away_from_zero(self):
        """Exact halves go up: 0.125 -> 0.15 with 0.05, 2.5 -> 3 with 1."""
        assert apply_rounding(Decimal("0.125"), "0.05") == Decimal("0.15")
        assert apply_rounding(Decimal("2.5"), "1") == Decimal("3")
        assert apply_rounding(Decimal("3.5"), "1") == Decimal("4")
        assert apply_rounding(Decimal("150"), "100") == Decimal("200")

    def test_unusable_rule_returns_price_unchanged(self):
        assert apply_rounding(Decimal("12.348"), "") == Decimal("12.348")
        assert apply_rounding(Decimal("12.348"), "abc") == Decimal("12.348")
        assert apply_rounding(Decimal("12.348"), "-1") == Decimal("12.348")

    def test_increment_too_fine_leaves_price_unrounded(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert apply_rounding(Decimal("10"), "1E-27") == Decimal("10")
        assert "round_to_interval: unrepresentable" in caplog.text

    @pytest.mark.parametrize("rule", ["0.01", "0.05", "0.10", "1", "100"])
    @pytest.mark.parametrize("price", ["0.127", "12.348", "99.999", "1234.5"])
    def test_idempotent(self, price, rule):
        once = apply_rounding(Decimal(price), rule)
        assert apply_rounding(once, rule) == once


class TestRoundingHelpers:
    """Tests for directional rounding, charm pricing and proposals."""

    def test_is_valid_rounding_rule(self):
        assert is_valid_rounding_rule("0.05")
        assert is_valid_rounding_rule("1000")
        assert not is_valid_rounding_rule("1000.01")
        assert not is_valid_rounding_rule("")
        assert not is_valid_rounding_rule("0")

    def test_round_up_and_down(self):
        assert round_up(Decimal("12.31"), "0.05") == Decimal("12.35")
        assert round_down(Decimal("12.34"), "0.05") == Decimal("12.30")
        assert round_up(Decimal("12.30"), "0.05") == Decimal("12.30")
        assert round_up(Decimal("12.31"), "bad") == Decimal("12.31")
        assert round_up(Decimal("10"), "1E-27") == Decimal("10")
        assert round_down(Decimal("10"), "1E-27") == Decimal("10")

    def test_charm_pricing(self):
        assert apply_charm_pricing(Decimal("12.75")) == Decimal("12.99")
        assert apply_charm_pricing(Decimal("12.20")) == Decimal("11.99")

    def test_charm_pricing_invalid_suffix(self):
        assert apply_charm_pricing(Decimal("12.20"), Decimal("1.5")) == Decimal("12.20")

    def test_rounding_proposals(self):
        proposals = rounding_proposals(Decimal("12.348"))
        assert list(proposals) == [
            "0.01", "0.05", "0.10", "0.25", "0.50", "1.00", "5.00", "10.00",
        ]
        assert proposals["0.05"] == Decimal("12.35")
        assert proposals["10.00"] == Decimal("10")
        assert len(common_rounding_intervals()) == 8

    def test_instructions_mention_examples(self):
        assert "0.05" in rounding_rule_instructions()


class TestCurrencyRoundingHelper:
    """Tests for CurrencyRoundingHelper."""

    def test_known_currencies(self):
        helper = CurrencyRoundingHelper()
        assert helper.get_rule("IDR") == Decimal("100")
        assert helper.get_rule("myr") == Decimal("0.05")
        assert helper.get_rule("JPY") == Decimal("1")

    def test_unknown_currency_defaults_to_cent(self):
        helper = CurrencyRoundingHelper()
        assert helper.get_rule("XYZ") == Decimal("0.01")
        assert helper.get_rule(None) == Decimal("0.01")

    def test_set_rule(self):
        helper = CurrencyRoundingHelper()
        helper.set_rule("chf", "0.05")
        assert helper.get_rule("CHF") == Decimal("0.05")
        helper.set_rule("CHF", "0")
        assert helper.get_rule("CHF") == Decimal("0.05")

    def test_round_for_currency(self):
        helper = CurrencyRoundingHelper()
        assert helper.round_for_currency(Decimal("12345"), "IDR") == Decimal("12300")
