"""Tests for waste normalization and output unit resolution."""

import logging
from decimal import Decimal

import pytest

from src.models.batch_request import BatchRequest, RecipeItem
from src.services.exceptions import UnresolvableOutputError
from src.services.output_units import (
    WASTE_BASED,
    WEIGHT_BASED,
    calculate_donut_count_by_weight,
    normalize_waste_percent,
    resolve_output_units,
)


def _weight_request(donut_weight="25", **kwargs):
    return BatchRequest(
        items=(RecipeItem(ingredient_id=1, quantity="1000", unit="g"),),
        use_weight_based_output=True,
        donut_weight_grams=donut_weight,
        **kwargs,
    )


class TestNormalizeWastePercent:
    """Tests for normalize_waste_percent."""

    def test_in_range_unchanged(self):
        assert normalize_waste_percent(Decimal("0.10")) == (Decimal("0.10"), None)

    def test_above_range_clamped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            waste, warning = normalize_waste_percent(Decimal("1.5"))
        assert waste == Decimal("0.99")
        assert warning == "Waste percent 1.5 is outside the valid range; clamped to 0.99."
        assert "normalize_waste_percent: clamped" in caplog.text

    def test_negative_clamped_to_zero(self):
        waste, warning = normalize_waste_percent("-0.2")
        assert waste == Decimal("0")
        assert warning is not None

    def test_upper_bound_is_kept(self):
        assert normalize_waste_percent(Decimal("0.99")) == (Decimal("0.99"), None)


class TestWasteBasedOutput:
    """Tests for the waste-based output path."""

    def test_sample_output(self, sample_request):
        output = resolve_output_units(sample_request, Decimal("6.5"), Decimal("0.10"))
        assert output.mode == WASTE_BASED
        assert output.sellable_units == 90
        assert output.divisor == Decimal("90")
        assert output.donut_count_by_weight == Decimal("0.26")

    def test_donut_count_reported_but_not_used(self):
        """Dough weight still yields a unit count; the divisor stays waste based."""
        request = BatchRequest(theoretical_output=100, donut_weight_grams="25")
        output = resolve_output_units(request, Decimal("1000"), Decimal("0.10"))
        assert output.donut_count_by_weight == Decimal("40")
        assert output.sellable_units == 90
        assert output.divisor == Decimal("90")

    def test_floor_applied(self):
        request = BatchRequest(theoretical_output=10)
        output = resolve_output_units(request, Decimal("0"), Decimal("0.15"))
        assert output.sellable_units == 8

    def test_at_least_one_unit(self):
        request = BatchRequest(theoretical_output=1)
        output = resolve_output_units(request, Decimal("0"), Decimal("0.99"))
        assert output.sellable_units == 1

    def test_zero_output_unresolvable(self, caplog):
        request = BatchRequest(theoretical_output=0)
        with caplog.at_level(logging.ERROR):
            with pytest.raises(UnresolvableOutputError) as exc_info:
                resolve_output_units(request, Decimal("0"), Decimal("0"))
        assert exc_info.value.mode == WASTE_BASED
        assert "theoretical_output is 0" in str(exc_info.value)
        assert "resolve_output_units: unresolvable" in caplog.text


class TestWeightBasedOutput:
    """Tests for the weight-based output path."""

    def test_count_by_weight(self):
        assert calculate_donut_count_by_weight(Decimal("1000"), Decimal("30")) == Decimal(
            "1000"
        ) / Decimal("30")
        assert calculate_donut_count_by_weight(Decimal("1000"), Decimal("0")) == 0

    def test_fractional_divisor_kept(self):
        """Unit cost divides by the unrounded count; sellable units are floored."""
        request = _weight_request(donut_weight="30")
        output = resolve_output_units(request, Decimal("1000"), Decimal("0"))
        assert output.mode == WEIGHT_BASED
        assert output.sellable_units == 33
        assert output.divisor == Decimal("1000") / Decimal("30")
        assert output.divisor > 33

    def test_small_dough_gives_one_unit(self):
        request = _weight_request()
        output = resolve_output_units(request, Decimal("10"), Decimal("0"))
        assert output.sellable_units == 1
        assert output.divisor == Decimal("0.4")

    def test_waste_ignored_in_weight_mode(self):
        request = _weight_request()
        output = resolve_output_units(request, Decimal("1000"), Decimal("0.5"))
        assert output.sellable_units == 40

    def test_zero_unit_weight_unresolvable(self):
        request = _weight_request(donut_weight="0")
        with pytest.raises(UnresolvableOutputError) as exc_info:
            resolve_output_units(request, Decimal("1000"), Decimal("0"))
        assert exc_info.value.mode == WEIGHT_BASED
        assert "donut_weight_grams" in exc_info.value.detail

    def test_zero_dough_weight_unresolvable(self):
        request = _weight_request()
        with pytest.raises(UnresolvableOutputError) as exc_info:
            resolve_output_units(request, Decimal("0"), Decimal("0"))
        assert "dough weight total" in exc_info.value.detail
