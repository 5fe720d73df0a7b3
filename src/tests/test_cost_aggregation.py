"""Tests for recipe line valuation and batch cost aggregators."""

import dataclasses
import logging
from decimal import Decimal

from src.models.batch_request import BatchRequest, LaborRole, RecipeItem
from src.services import cost_aggregation


class TestLineCost:
    """Tests for calculate_line_cost."""

    def test_costable_line(self):
        item = RecipeItem(ingredient_id=1, quantity="5", unit="kg", price_per_unit="3")
        assert cost_aggregation.calculate_line_cost(item, Decimal("2")) == Decimal("30")

    def test_skipped_line_contributes_zero_and_warns(self, caplog):
        item = RecipeItem(ingredient_id=7, quantity="0", unit="kg", price_per_unit="3")
        with caplog.at_level(logging.WARNING):
            assert cost_aggregation.calculate_line_cost(item) == Decimal("0")
        assert "calculate_line_cost: line_skipped" in caplog.text
        assert caplog.records[0].ingredient_id == 7

    def test_negative_price_skipped(self):
        item = RecipeItem(ingredient_id=1, quantity="1", unit="kg", price_per_unit="-2")
        assert cost_aggregation.calculate_line_cost(item) == Decimal("0")


class TestIngredientCost:
    """Tests for calculate_ingredient_cost and dough weight."""

    def test_sample_ingredient_cost(self, sample_request):
        """5kg flour @3 + 1kg sugar @8 + 0.5L oil @12."""
        assert cost_aggregation.calculate_ingredient_cost(sample_request) == Decimal("29")

    def test_multiplier_scales_every_line(self, sample_request):
        request = dataclasses.replace(sample_request, batch_multiplier="2")
        assert cost_aggregation.calculate_ingredient_cost(request) == Decimal("58")

    def test_invalid_lines_excluded(self):
        request = BatchRequest(
            items=(
                RecipeItem(ingredient_id=1, quantity="2", unit="kg", price_per_unit="5"),
                RecipeItem(ingredient_id=2, quantity="-1", unit="kg", price_per_unit="5"),
            )
        )
        assert cost_aggregation.calculate_ingredient_cost(request) == Decimal("10")

    def test_dough_weight_respects_flag(self):
        request = BatchRequest(
            items=(
                RecipeItem(ingredient_id=1, quantity="1000", unit="g"),
                RecipeItem(ingredient_id=2, quantity="200", unit="g"),
                RecipeItem(ingredient_id=3, quantity="50", unit="g", include_in_dough_weight=False),
            ),
            batch_multiplier="1.5",
        )
        assert cost_aggregation.calculate_dough_weight_total(request) == Decimal("1800")

    def test_dough_weight_skips_non_costable_lines(self):
        request = BatchRequest(
            items=(
                RecipeItem(ingredient_id=1, quantity="1000", unit="g"),
                RecipeItem(ingredient_id=2, quantity="300", unit="g", price_per_unit="-1"),
            )
        )
        assert cost_aggregation.calculate_dough_weight_total(request) == Decimal("1000")


class TestBatchAggregators:
    """Tests for oil, energy, labor, overhead, packaging and topping."""

    def test_sample_components(self, sample_request):
        assert cost_aggregation.calculate_oil_cost(sample_request) == Decimal("24")
        assert cost_aggregation.calculate_oil_amortization(sample_request) == Decimal("50")
        assert cost_aggregation.calculate_energy_cost(sample_request) == Decimal("12.5")
        assert cost_aggregation.calculate_labor_cost(sample_request) == Decimal("100")
        assert cost_aggregation.calculate_overhead_cost(sample_request) == Decimal("100")
        assert cost_aggregation.calculate_packaging_cost(sample_request, 90) == Decimal("45")

    def test_zero_inputs_give_zero(self):
        request = BatchRequest()
        assert cost_aggregation.calculate_oil_cost(request) == 0
        assert cost_aggregation.calculate_oil_amortization(request) == 0
        assert cost_aggregation.calculate_energy_cost(request) == 0
        assert cost_aggregation.calculate_labor_cost(request) == 0
        assert cost_aggregation.calculate_overhead_cost(request) == 0
        assert cost_aggregation.calculate_packaging_cost(request, 10) == 0
        assert cost_aggregation.calculate_topping_cost_per_unit(request) == 0

    def test_oil_price_without_liters_is_zero(self):
        request = BatchRequest(oil_price_per_liter="12")
        assert cost_aggregation.calculate_oil_cost(request) == 0

    def test_invalid_labor_roles_skipped(self, baker, caplog):
        request = BatchRequest(
            labor=(
                baker,
                LaborRole(name="Helper", hourly_rate="30", hours="0"),
                LaborRole(name="Volunteer", hourly_rate="0", hours="3"),
            )
        )
        with caplog.at_level(logging.WARNING):
            assert cost_aggregation.calculate_labor_cost(request) == Decimal("100")
        skipped = [r for r in caplog.records if r.outcome == "role_skipped"]
        assert [r.role_name for r in skipped] == ["Helper", "Volunteer"]

    def test_packaging_needs_units(self):
        request = BatchRequest(packaging_per_unit="0.5")
        assert cost_aggregation.calculate_packaging_cost(request, 0) == 0

    def test_topping_cost_per_unit(self):
        """A 1000g pack at 40 with 5g per unit costs 0.20 per unit."""
        request = BatchRequest(
            topping_pack_price="40",
            topping_pack_weight_grams="1000",
            topping_weight_per_unit_grams="5",
        )
        assert cost_aggregation.calculate_topping_cost_per_unit(request) == Decimal("0.2")

    def test_topping_missing_usage_is_zero(self):
        request = BatchRequest(topping_pack_price="40", topping_pack_weight_grams="1000")
        assert cost_aggregation.calculate_topping_cost_per_unit(request) == 0

    def test_sum_cost_components_exact(self):
        total = cost_aggregation.sum_cost_components(
            Decimal("0.1"), Decimal("0.2"), Decimal("0.3")
        )
        assert total == Decimal("0.6")
