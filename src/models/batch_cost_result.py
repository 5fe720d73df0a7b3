"""
BatchCostResult model - the immutable outcome of one batch calculation.

A result is created fresh by the PricingEngine and never mutated afterwards;
the result cache stores and hands out the same instance to every caller.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from src.utils.constants import format_currency, format_percent
from src.utils.datetime_utils import utc_now


@dataclass(frozen=True)
class BatchCostResult:
    """
    Full cost breakdown, unit cost (HPP) and price band for a batch.

    Cost components:
        ingredient_cost, oil_cost, oil_amortization, energy_cost, labor_cost,
        overhead_cost, packaging_cost; total_batch_cost is their exact sum.
        topping_cost_per_unit is a per-unit figure and is not part of the total.

    Output metrics:
        dough_weight_total: Sum of scaled quantities flagged for dough weight
        donut_count_by_weight: Unrounded weight-based unit count
        sellable_units: Integer sellable units after waste
        unit_cost: total_batch_cost / output divisor

    Pricing metrics:
        The price band, margins, planning figures and confidence score
        produced by the risk pricing stage.
    """

    ingredient_cost: Decimal
    oil_cost: Decimal
    oil_amortization: Decimal
    energy_cost: Decimal
    labor_cost: Decimal
    overhead_cost: Decimal
    packaging_cost: Decimal
    topping_cost_per_unit: Decimal
    total_batch_cost: Decimal

    dough_weight_total: Decimal
    donut_count_by_weight: Decimal
    sellable_units: int
    unit_cost: Decimal

    cost_per_unit_with_topping: Decimal
    cost_volatility_score: Decimal
    risk_buffer_percent: Decimal
    minimum_safe_price: Decimal
    suggested_price_conservative: Decimal
    suggested_price_aggressive: Decimal
    suggested_price: Decimal
    recommended_price_low: Decimal
    recommended_price_high: Decimal
    price_inc_vat: Decimal
    margin: Decimal
    contribution_margin_per_unit: Decimal
    profit_per_unit_at_suggested_price: Decimal
    profit_per_batch_at_suggested_price: Decimal
    units_for_target_profit: int
    monthly_break_even_units: int
    pricing_confidence_score: Decimal

    warnings: Tuple[str, ...] = ()
    recommendation_note: str = ""
    breakdown: Mapping[str, Decimal] = field(default_factory=dict)
    calculated_at: datetime = field(default_factory=utc_now)
    strategy_name: Optional[str] = None

    @property
    def total_costs(self) -> Decimal:
        """Re-sum of the seven batch cost components."""
        return (
            self.ingredient_cost
            + self.oil_cost
            + self.oil_amortization
            + self.energy_cost
            + self.labor_cost
            + self.overhead_cost
            + self.packaging_cost
        )

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def summary(self) -> str:
        """One-line human readable summary."""
        return (
            f"Total: {format_currency(self.total_batch_cost)}, "
            f"Units: {self.sellable_units}, "
            f"HPP: {format_currency(self.unit_cost)}, "
            f"Price: {format_currency(self.suggested_price)}, "
            f"Margin: {format_percent(self.margin)}"
        )

    def __str__(self) -> str:
        return f"BatchCostResult({self.summary()})"
