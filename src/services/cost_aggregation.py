"""
Cost aggregation for the HPP Pricing Engine.

This module provides:
- Recipe line valuation (manual cost, pack pricing, price per unit)
- Batch cost aggregators (ingredients, oil, energy, labor, overhead, packaging)
- Per-unit topping cost
- Dough weight totals for weight-based output

Every aggregator is a pure function of the request that returns zero when
its inputs are non-positive. Invalid ingredient lines and labor roles are
skipped with a warning log and never abort the calculation.
"""

import logging
from decimal import Decimal

from src.models.batch_request import BatchRequest, LaborRole, RecipeItem
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.decimal_utils import ONE, ZERO, to_decimal

logger = get_service_logger(__name__)


# ============================================================================
# Recipe Line Valuation
# ============================================================================


def calculate_line_cost(item: RecipeItem, batch_multiplier: Decimal = ONE) -> Decimal:
    """
    Value one recipe line for a scaled batch.

    Lines with quantity <= 0, a negative unit price or a negative manual
    cost are skipped and contribute zero.

    Args:
        item: Recipe line to value
        batch_multiplier: Batch scale multiplier

    Returns:
        Line cost, or 0 for a skipped line
    """
    if not item.is_costable():
        log_operation(
            logger,
            operation="calculate_line_cost",
            outcome="line_skipped",
            level=logging.WARNING,
            ingredient_id=item.ingredient_id,
            quantity=str(item.quantity),
            price_per_unit=str(item.price_per_unit),
        )
        return ZERO

    return item.calculate_cost(batch_multiplier)


def calculate_ingredient_cost(request: BatchRequest) -> Decimal:
    """Sum of all line costs at the request's batch multiplier."""
    total = ZERO
    for item in request.items:
        total += calculate_line_cost(item, request.batch_multiplier)

    log_operation(
        logger,
        operation="calculate_ingredient_cost",
        outcome="success",
        level=logging.DEBUG,
        ingredient_cost=str(total),
        line_count=len(request.items),
    )
    return total


def calculate_dough_weight_total(request: BatchRequest) -> Decimal:
    """
    Sum quantity x batch multiplier over lines flagged for dough weight.

    Skipped (non-costable) lines are excluded so the weight matches the
    lines that were actually costed.
    """
    total = ZERO
    for item in request.items:
        if item.include_in_dough_weight and item.is_costable():
            total += item.quantity * request.batch_multiplier
    return total


# ============================================================================
# Batch Cost Aggregators
# ============================================================================


def calculate_oil_cost(request: BatchRequest) -> Decimal:
    """Frying oil consumed: liters used x price per liter."""
    if request.oil_used_liters <= 0 or request.oil_price_per_liter <= 0:
        return ZERO
    return request.oil_used_liters * request.oil_price_per_liter


def calculate_oil_amortization(request: BatchRequest) -> Decimal:
    """Oil change cost spread over the batches one oil change serves."""
    if request.oil_change_cost <= 0 or request.batches_per_oil_change <= 0:
        return ZERO
    return request.oil_change_cost / Decimal(request.batches_per_oil_change)


def calculate_energy_cost(request: BatchRequest) -> Decimal:
    if request.energy_kwh <= 0 or request.energy_rate_per_kwh <= 0:
        return ZERO
    return request.energy_kwh * request.energy_rate_per_kwh


def calculate_role_cost(role: LaborRole) -> Decimal:
    """Cost of one labor role, 0 (with a warning) when hours or rate is not positive."""
    if role.hours <= 0 or role.hourly_rate <= 0:
        log_operation(
            logger,
            operation="calculate_labor_cost",
            outcome="role_skipped",
            level=logging.WARNING,
            role_name=role.name,
            hours=str(role.hours),
            hourly_rate=str(role.hourly_rate),
        )
        return ZERO
    return role.total_cost


def calculate_labor_cost(request: BatchRequest) -> Decimal:
    total = ZERO
    for role in request.labor:
        total += calculate_role_cost(role)
    return total


def calculate_overhead_cost(request: BatchRequest) -> Decimal:
    """Overhead is allocated upstream and passed through unchanged."""
    if request.overhead_allocated <= 0:
        return ZERO
    return request.overhead_allocated


def calculate_packaging_cost(request: BatchRequest, sellable_units: int) -> Decimal:
    """Packaging per unit x sellable units."""
    if request.packaging_per_unit <= 0 or sellable_units <= 0:
        return ZERO
    return request.packaging_per_unit * Decimal(sellable_units)


def calculate_topping_cost_per_unit(request: BatchRequest) -> Decimal:
    """
    Topping cost for one unit.

    (topping pack price / topping pack weight) x topping weight per unit,
    or 0 if any factor is not positive.
    """
    pack_price = request.topping_pack_price
    pack_weight = request.topping_pack_weight_grams
    usage = request.topping_weight_per_unit_grams

    if pack_price <= 0 or pack_weight <= 0 or usage <= 0:
        return ZERO
    return (pack_price / pack_weight) * usage


def sum_cost_components(*components) -> Decimal:
    """Exact Decimal sum of cost components."""
    total = ZERO
    for component in components:
        total += to_decimal(component)
    return total
