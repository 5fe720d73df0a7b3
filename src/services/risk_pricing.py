"""
Risk-aware pricing for the HPP Pricing Engine.

Turns a unit cost and a strategy's nominal price into a price band:

1. Cost volatility score from the spread of ingredient unit costs
2. Risk buffer from volatility, waste, overhead share and risk appetite
3. Minimum safe, conservative, aggressive and suggested prices
4. Rounding of every candidate price
5. VAT price, margins, profit and planning figures
6. Advisory warnings, confidence score and recommendation note

All figures are Decimal. Every ratio is clamped to its documented range so
extreme inputs never produce out-of-range scores.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from src.models.batch_request import BatchRequest
from src.services.rounding_engine import parse_rounding_rule, round_to_interval
from src.utils.constants import (
    AGGRESSIVE_APPETITE_THRESHOLD,
    AGGRESSIVE_MULTIPLIER_BASE,
    AGGRESSIVE_MULTIPLIER_SLOPE,
    CONFIDENCE_MARKET_WEIGHT,
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    CONFIDENCE_OVERHEAD_WEIGHT,
    CONFIDENCE_VOLATILITY_WEIGHT,
    CONFIDENCE_WASTE_WEIGHT,
    CONSERVATIVE_APPETITE_THRESHOLD,
    CONSERVATIVE_MULTIPLIER_BASE,
    CONSERVATIVE_MULTIPLIER_SLOPE,
    HIGH_OVERHEAD_SHARE_THRESHOLD,
    HIGH_VOLATILITY_THRESHOLD,
    HIGH_WASTE_THRESHOLD,
    LOW_CONFIDENCE_THRESHOLD,
    MINIMUM_UNIT_PRICE,
    NOTE_BELOW_SUSTAINABLE_MARGIN,
    NOTE_LOW_CONFIDENCE,
    NOTE_MODERATE_CONFIDENCE,
    NOTE_STRONG_CONFIDENCE,
    RISK_APPETITE_FACTOR_BASE,
    RISK_APPETITE_FACTOR_SLOPE,
    RISK_BUFFER_BASE,
    RISK_BUFFER_MAX,
    RISK_BUFFER_MIN,
    RISK_BUFFER_OVERHEAD_WEIGHT,
    RISK_BUFFER_VOLATILITY_WEIGHT,
    RISK_BUFFER_WASTE_WEIGHT,
    STRONG_CONFIDENCE_THRESHOLD,
    VOLATILITY_DECLARED_WEIGHT,
    VOLATILITY_OBSERVED_WEIGHT,
    WARNING_BREAK_EVEN_UNREACHABLE,
    WARNING_HIGH_OVERHEAD,
    WARNING_HIGH_VOLATILITY,
    WARNING_HIGH_WASTE,
    WARNING_TARGET_PROFIT_UNREACHABLE,
    WARNING_THIN_MARGIN,
)
from src.utils.decimal_utils import ONE, ZERO, clamp

_TWO = Decimal("2")


@dataclass(frozen=True)
class PricingAnalysis:
    """Risk and pricing figures for one batch."""

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
    warnings: Tuple[str, ...]
    recommendation_note: str


# ============================================================================
# Volatility and Risk
# ============================================================================


def extract_ingredient_unit_costs(request: BatchRequest) -> List[Decimal]:
    """Positive per-unit ingredient costs, one per line that has one."""
    unit_costs = []
    for item in request.items:
        unit_cost = item.unit_cost()
        if unit_cost is not None and unit_cost > 0:
            unit_costs.append(unit_cost)
    return unit_costs


def coefficient_of_variation(values: Sequence[Decimal]) -> Optional[Decimal]:
    """
    Population standard deviation / mean.

    Returns:
        The coefficient, or None with fewer than 2 values or a mean <= 0
    """
    if len(values) < 2:
        return None

    count = Decimal(len(values))
    mean = sum(values, ZERO) / count
    if mean <= 0:
        return None

    variance = sum(((value - mean) ** 2 for value in values), ZERO) / count
    return variance.sqrt() / mean


def calculate_cost_volatility_score(request: BatchRequest) -> Decimal:
    """
    Blend observed unit-cost dispersion with the declared volatility.

    Falls back to the declared volatility when fewer than two unit costs
    are available.

    Returns:
        Score in [0, 1]
    """
    declared = clamp(request.price_volatility_percent, ZERO, ONE)
    cv = coefficient_of_variation(extract_ingredient_unit_costs(request))
    if cv is None:
        return declared

    observed = clamp(cv, ZERO, ONE)
    blended = VOLATILITY_OBSERVED_WEIGHT * observed + VOLATILITY_DECLARED_WEIGHT * declared
    return clamp(blended, ZERO, ONE)


def calculate_overhead_share(overhead_cost: Decimal, total_batch_cost: Decimal) -> Decimal:
    if total_batch_cost <= 0:
        return ZERO
    return overhead_cost / total_batch_cost


def calculate_risk_buffer_percent(
    volatility: Decimal,
    waste_percent: Decimal,
    overhead_share: Decimal,
    risk_appetite: Decimal,
) -> Decimal:
    """
    Safety margin added on top of unit cost.

    Returns:
        Buffer in [0.02, 0.35]
    """
    base = (
        RISK_BUFFER_BASE
        + RISK_BUFFER_VOLATILITY_WEIGHT * volatility
        + RISK_BUFFER_WASTE_WEIGHT * waste_percent
        + RISK_BUFFER_OVERHEAD_WEIGHT * overhead_share
    )
    appetite_factor = RISK_APPETITE_FACTOR_BASE - RISK_APPETITE_FACTOR_SLOPE * risk_appetite
    return clamp(base * appetite_factor, RISK_BUFFER_MIN, RISK_BUFFER_MAX)


def calculate_confidence_score(
    volatility: Decimal,
    waste_percent: Decimal,
    overhead_share: Decimal,
    market_pressure: Decimal,
) -> Decimal:
    """
    How much to trust the suggested price.

    Returns:
        Score in [0.05, 0.98]
    """
    score = (
        ONE
        - CONFIDENCE_VOLATILITY_WEIGHT * volatility
        - CONFIDENCE_WASTE_WEIGHT * waste_percent
        - CONFIDENCE_OVERHEAD_WEIGHT * overhead_share
        - CONFIDENCE_MARKET_WEIGHT * max(ZERO, -market_pressure)
    )
    return clamp(score, CONFIDENCE_MIN, CONFIDENCE_MAX)


# ============================================================================
# Price Band
# ============================================================================


def choose_suggested_price(
    conservative: Decimal,
    strategy_adjusted: Decimal,
    aggressive: Decimal,
    risk_appetite: Decimal,
) -> Decimal:
    """Pick the suggested price for the risk appetite."""
    if risk_appetite <= CONSERVATIVE_APPETITE_THRESHOLD:
        return conservative
    if risk_appetite >= AGGRESSIVE_APPETITE_THRESHOLD:
        return (strategy_adjusted + aggressive) / _TWO
    return strategy_adjusted


def calculate_units_needed(amount: Decimal, contribution_margin: Decimal) -> int:
    """Units needed to cover an amount, 0 when nothing is set or it cannot be covered."""
    if amount <= 0 or contribution_margin <= 0:
        return 0
    return math.ceil(amount / contribution_margin)


def build_recommendation_note(contribution_margin: Decimal, confidence: Decimal) -> str:
    if contribution_margin <= 0:
        return NOTE_BELOW_SUSTAINABLE_MARGIN
    if confidence < LOW_CONFIDENCE_THRESHOLD:
        return NOTE_LOW_CONFIDENCE
    if confidence < STRONG_CONFIDENCE_THRESHOLD:
        return NOTE_MODERATE_CONFIDENCE
    return NOTE_STRONG_CONFIDENCE


def collect_warnings(
    request: BatchRequest,
    waste_percent: Decimal,
    overhead_share: Decimal,
    volatility: Decimal,
    contribution_margin: Decimal,
) -> List[str]:
    """Advisory warnings, in a fixed order."""
    warnings = []
    if waste_percent > HIGH_WASTE_THRESHOLD:
        warnings.append(WARNING_HIGH_WASTE)
    if overhead_share > HIGH_OVERHEAD_SHARE_THRESHOLD:
        warnings.append(WARNING_HIGH_OVERHEAD)
    if volatility > HIGH_VOLATILITY_THRESHOLD:
        warnings.append(WARNING_HIGH_VOLATILITY)
    if contribution_margin <= MINIMUM_UNIT_PRICE:
        warnings.append(WARNING_THIN_MARGIN)
    if request.target_profit_per_batch > 0 and contribution_margin <= 0:
        warnings.append(WARNING_TARGET_PROFIT_UNREACHABLE)
    if request.monthly_fixed_cost > 0 and contribution_margin <= 0:
        warnings.append(WARNING_BREAK_EVEN_UNREACHABLE)
    return warnings


def enrich_pricing(
    request: BatchRequest,
    *,
    base_cost: Decimal,
    nominal_price: Decimal,
    waste_percent: Decimal,
    overhead_cost: Decimal,
    total_batch_cost: Decimal,
    output_units: Decimal,
) -> PricingAnalysis:
    """
    Build the full risk-aware price analysis.

    Args:
        request: Batch request (market and planning parameters)
        base_cost: Per-unit pricing base (unit cost, or cost with topping)
        nominal_price: Price from the pricing strategy
        waste_percent: Normalized waste percent
        overhead_cost: Overhead component of the batch cost
        total_batch_cost: Total batch cost
        output_units: Unit cost divisor; the unrounded unit count in weight-based mode

    Returns:
        PricingAnalysis
    """
    risk_appetite = request.risk_appetite_percent

    volatility = calculate_cost_volatility_score(request)
    overhead_share = calculate_overhead_share(overhead_cost, total_batch_cost)
    risk_buffer = calculate_risk_buffer_percent(
        volatility, waste_percent, overhead_share, risk_appetite
    )

    minimum_safe = base_cost * (ONE + risk_buffer)
    market_adjusted = nominal_price * (ONE + request.market_pressure_percent)
    strategy_adjusted = max(minimum_safe, market_adjusted)

    conservative_multiplier = (
        CONSERVATIVE_MULTIPLIER_BASE + (ONE - risk_appetite) * CONSERVATIVE_MULTIPLIER_SLOPE
    )
    aggressive_multiplier = AGGRESSIVE_MULTIPLIER_BASE + risk_appetite * AGGRESSIVE_MULTIPLIER_SLOPE
    conservative = max(strategy_adjusted, minimum_safe * conservative_multiplier)
    aggressive = max(strategy_adjusted, strategy_adjusted * aggressive_multiplier)
    chosen = choose_suggested_price(conservative, strategy_adjusted, aggressive, risk_appetite)

    interval = parse_rounding_rule(request.rounding_rule)
    minimum_safe = round_to_interval(minimum_safe, interval)
    conservative = round_to_interval(conservative, interval)
    aggressive = round_to_interval(aggressive, interval)
    suggested = round_to_interval(chosen, interval)

    band = (conservative, aggressive, suggested)
    price_inc_vat = suggested * (ONE + request.vat_percent)

    contribution_margin = suggested - base_cost
    margin = contribution_margin / suggested if suggested > 0 else ZERO
    profit_per_batch = contribution_margin * output_units

    units_for_target_profit = calculate_units_needed(
        request.target_profit_per_batch, contribution_margin
    )
    monthly_break_even_units = calculate_units_needed(
        request.monthly_fixed_cost, contribution_margin
    )

    confidence = calculate_confidence_score(
        volatility, waste_percent, overhead_share, request.market_pressure_percent
    )
    warnings = collect_warnings(
        request, waste_percent, overhead_share, volatility, contribution_margin
    )

    return PricingAnalysis(
        cost_volatility_score=volatility,
        risk_buffer_percent=risk_buffer,
        minimum_safe_price=minimum_safe,
        suggested_price_conservative=conservative,
        suggested_price_aggressive=aggressive,
        suggested_price=suggested,
        recommended_price_low=min(band),
        recommended_price_high=max(band),
        price_inc_vat=price_inc_vat,
        margin=margin,
        contribution_margin_per_unit=contribution_margin,
        profit_per_unit_at_suggested_price=contribution_margin,
        profit_per_batch_at_suggested_price=profit_per_batch,
        units_for_target_profit=units_for_target_profit,
        monthly_break_even_units=monthly_break_even_units,
        pricing_confidence_score=confidence,
        warnings=tuple(warnings),
        recommendation_note=build_recommendation_note(contribution_margin, confidence),
    )
