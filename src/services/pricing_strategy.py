"""Pricing strategies for the HPP Pricing Engine.

A pricing strategy turns a per-unit base cost into a nominal selling price.
The PricingEngine depends only on the PricingStrategy protocol, so any
object with the same shape can be supplied without touching the engine.

Built-in strategies:
    FixedMarkupStrategy  - base x (1 + markup) (default)
    TargetMarginStrategy - base / (1 - target margin)
    CostPlusStrategy     - (base + fixed adder) x (1 + markup)
    CompetitiveStrategy  - known market price, never below cost

Usage:
    from src.services.pricing_strategy import create_strategy

    strategy = create_strategy("TargetMargin")
    price = strategy.calculate_price(Decimal("4.00"), request)
"""

import logging
import threading
from decimal import Decimal
from typing import Dict, List, Optional, Protocol, runtime_checkable

from src.models.batch_request import BatchRequest
from src.services.exceptions import PricingStrategyError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import (
    DEFAULT_TARGET_MARGIN_PERCENT,
    MAXIMUM_MARKUP,
    MAXIMUM_TARGET_MARGIN,
)
from src.utils.decimal_utils import ONE, ZERO, to_decimal

logger = get_service_logger(__name__)


# ============================================================================
# Protocol Definition
# ============================================================================


@runtime_checkable
class PricingStrategy(Protocol):
    """
    Protocol for pricing strategies.

    Attributes:
        name: Display name reported on results and diagnostics
        description: One-sentence description of the pricing approach
    """

    name: str
    description: str

    def validate_parameters(self, request: BatchRequest) -> bool:
        """Check the request carries usable parameters for this strategy."""
        ...

    def calculate_price(self, base_cost: Decimal, request: BatchRequest) -> Decimal:
        """
        Price one unit.

        Args:
            base_cost: Per-unit base cost (unit cost or cost with topping)
            request: Batch request supplying strategy parameters

        Returns:
            Nominal price before risk adjustment and rounding

        Raises:
            PricingStrategyError: If the base cost is negative or the
                parameters are invalid
        """
        ...


def _check_inputs(strategy: PricingStrategy, base_cost: Decimal, request: BatchRequest) -> Decimal:
    base_cost = to_decimal(base_cost)
    if base_cost < 0:
        log_operation(
            logger,
            operation="calculate_price",
            outcome="negative_base_cost",
            level=logging.WARNING,
            strategy=strategy.name,
            base_cost=str(base_cost),
        )
        raise PricingStrategyError(strategy.name, "base cost cannot be negative")
    if not strategy.validate_parameters(request):
        raise PricingStrategyError(strategy.name, "request contains invalid parameters")
    return base_cost


# ============================================================================
# Built-in Strategies
# ============================================================================


class FixedMarkupStrategy:
    """Applies a fixed percentage markup to the unit cost."""

    name = "Fixed Markup"
    description = (
        "Applies a fixed percentage markup to the unit cost. "
        "Simple and consistent across products."
    )

    def validate_parameters(self, request: BatchRequest) -> bool:
        if request is None:
            return False
        return ZERO <= request.markup < MAXIMUM_MARKUP

    def calculate_price(self, base_cost: Decimal, request: BatchRequest) -> Decimal:
        base_cost = _check_inputs(self, base_cost, request)
        return base_cost * (ONE + request.markup)

    def __repr__(self) -> str:
        return "FixedMarkupStrategy()"


class TargetMarginStrategy:
    """
    Prices so the selling price carries a target margin.

    price = base / (1 - margin). A margin of 0 returns the base cost; the
    margin is clamped below 0.99 so the price stays finite.
    """

    name = "Target Margin"
    description = (
        "Calculates price based on a target profit margin percentage. "
        "More sophisticated than fixed markup."
    )

    def validate_parameters(self, request: BatchRequest) -> bool:
        if request is None:
            return False
        return ZERO <= request.target_margin_percent < MAXIMUM_TARGET_MARGIN

    def calculate_price(self, base_cost: Decimal, request: BatchRequest) -> Decimal:
        base_cost = _check_inputs(self, base_cost, request)
        margin = min(max(request.target_margin_percent, ZERO), MAXIMUM_TARGET_MARGIN)

        if margin == 0:
            return base_cost

        price = base_cost / (ONE - margin)
        log_operation(
            logger,
            operation="calculate_price",
            outcome="success",
            level=logging.DEBUG,
            strategy=self.name,
            base_cost=str(base_cost),
            target_margin=str(margin),
            price=str(price),
        )
        return price

    def __repr__(self) -> str:
        return "TargetMarginStrategy()"


class CostPlusStrategy:
    """Adds a fixed amount per unit, then applies the markup."""

    name = "Cost-Plus"
    description = (
        "Adds a fixed amount per unit and applies a percentage markup. "
        "Suitable for recovering mixed cost structures."
    )

    def __init__(self, fixed_adder_per_unit=ZERO):
        self._fixed_adder_per_unit = max(ZERO, to_decimal(fixed_adder_per_unit))

    @property
    def fixed_adder_per_unit(self) -> Decimal:
        return self._fixed_adder_per_unit

    def set_fixed_adder(self, fixed_adder) -> None:
        """Replace the per-unit adder; negative values become 0."""
        self._fixed_adder_per_unit = max(ZERO, to_decimal(fixed_adder))

    def validate_parameters(self, request: BatchRequest) -> bool:
        if request is None:
            return False
        return ZERO <= request.markup < MAXIMUM_MARKUP

    def calculate_price(self, base_cost: Decimal, request: BatchRequest) -> Decimal:
        base_cost = _check_inputs(self, base_cost, request)
        return (base_cost + self._fixed_adder_per_unit) * (ONE + request.markup)

    def __repr__(self) -> str:
        return f"CostPlusStrategy(fixed_adder_per_unit={self._fixed_adder_per_unit.normalize()})"


class CompetitiveStrategy:
    """
    Prices against known market prices.

    When the request's product_id has a registered market price, the price
    is that market price, but never below the base cost. Otherwise the
    strategy falls back to target-margin pricing (0.30 when unset).
    """

    name = "Competitive"
    description = (
        "Pricing based on market conditions and competitive analysis. "
        "Ensures prices meet market expectations while covering costs."
    )

    def __init__(self, market_prices: Optional[Dict[int, Decimal]] = None):
        self._market_prices: Dict[int, Decimal] = {}
        self._lock = threading.Lock()
        for product_id, price in (market_prices or {}).items():
            self.set_market_price(product_id, price)

    def set_market_price(self, product_id: int, market_price) -> None:
        """Register a market price; negative prices are ignored."""
        market_price = to_decimal(market_price)
        if market_price < 0:
            log_operation(
                logger,
                operation="set_market_price",
                outcome="ignored",
                level=logging.WARNING,
                product_id=product_id,
                market_price=str(market_price),
            )
            return
        with self._lock:
            self._market_prices[product_id] = market_price

    def get_market_price(self, product_id: Optional[int]) -> Optional[Decimal]:
        if product_id is None:
            return None
        with self._lock:
            return self._market_prices.get(product_id)

    def validate_parameters(self, request: BatchRequest) -> bool:
        if request is None:
            return False
        return ZERO <= request.target_margin_percent < MAXIMUM_TARGET_MARGIN

    def calculate_price(self, base_cost: Decimal, request: BatchRequest) -> Decimal:
        base_cost = _check_inputs(self, base_cost, request)

        market_price = self.get_market_price(request.product_id)
        if market_price is not None:
            return max(base_cost, market_price)

        margin = request.target_margin_percent
        if margin <= 0:
            margin = DEFAULT_TARGET_MARGIN_PERCENT
        return base_cost / (ONE - margin)

    def __repr__(self) -> str:
        with self._lock:
            prices = sorted(
                (key, str(price.normalize())) for key, price in self._market_prices.items()
            )
        return f"CompetitiveStrategy(market_prices={prices})"


# ============================================================================
# Factory
# ============================================================================


_STRATEGY_CLASSES = {
    "FixedMarkup": FixedMarkupStrategy,
    "TargetMargin": TargetMarginStrategy,
    "CostPlus": CostPlusStrategy,
    "Competitive": CompetitiveStrategy,
}


def _normalize_strategy_name(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch not in " _-")


def create_strategy(strategy_name: Optional[str]) -> PricingStrategy:
    """
    Create a strategy by name.

    Names are matched ignoring case, spaces, hyphens and underscores, so
    "Target Margin", "target_margin" and "TargetMargin" are equivalent.

    Args:
        strategy_name: Strategy name, None for the default

    Returns:
        New strategy instance. Unknown names fall back to fixed markup.
    """
    if strategy_name is None or not strategy_name.strip():
        return FixedMarkupStrategy()

    normalized = _normalize_strategy_name(strategy_name)
    for key, strategy_class in _STRATEGY_CLASSES.items():
        if _normalize_strategy_name(key) == normalized:
            return strategy_class()

    log_operation(
        logger,
        operation="create_strategy",
        outcome="unknown_strategy",
        level=logging.WARNING,
        strategy_name=strategy_name,
        fallback="FixedMarkup",
    )
    return FixedMarkupStrategy()


def available_strategies() -> List[str]:
    """Names accepted by create_strategy."""
    return list(_STRATEGY_CLASSES)


def strategy_descriptions() -> Dict[str, str]:
    return {key: strategy_class.description for key, strategy_class in _STRATEGY_CLASSES.items()}
