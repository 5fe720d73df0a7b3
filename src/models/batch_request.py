"""
Batch request models for the HPP Pricing Engine.

A BatchRequest describes one production batch: its recipe lines, labor,
oil, energy, packaging and topping inputs, and the market parameters the
pricing stages need. Requests are immutable so a single instance can be
priced concurrently and used as a cache source without defensive copies.

All numeric fields are coerced to Decimal on construction.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional, Sequence

from src.utils.constants import (
    DEFAULT_BATCH_MULTIPLIER,
    DEFAULT_BATCHES_PER_OIL_CHANGE,
    DEFAULT_DONUT_WEIGHT_GRAMS,
    DEFAULT_PRICE_VOLATILITY_PERCENT,
    DEFAULT_RISK_APPETITE_PERCENT,
    DEFAULT_ROUNDING_RULE,
    DEFAULT_TARGET_MARGIN_PERCENT,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_POSITIVE,
    ERROR_NO_ITEMS,
    ERROR_NO_VALID_ITEMS,
    MAX_MARKET_PRESSURE,
    MIN_MARKET_PRESSURE,
)
from src.utils.decimal_utils import ONE, ZERO, to_decimal, to_optional_decimal

if TYPE_CHECKING:
    from src.services.pricing_strategy import PricingStrategy


def _set(instance, name: str, value) -> None:
    # Frozen dataclasses only allow assignment through object.__setattr__
    object.__setattr__(instance, name, value)


@dataclass(frozen=True)
class RecipeItem:
    """
    A single ingredient line of a recipe.

    The line cost comes from exactly one source, first match wins:
    manual total cost, pack pricing, or direct price per unit.

    Attributes:
        ingredient_id: Ingredient this line references
        quantity: Quantity used at batch multiplier 1
        unit: Unit of measurement (e.g., "kg", "liter", "piece")
        price_per_unit: Direct price per unit
        pack_net_quantity: Net quantity per purchase pack
        price_per_pack: Price of one purchase pack
        manual_cost: Manual total line cost at batch multiplier 1
        include_in_dough_weight: Whether the line counts toward dough weight
    """

    ingredient_id: int
    quantity: Decimal
    unit: str = ""
    price_per_unit: Decimal = ZERO
    pack_net_quantity: Optional[Decimal] = None
    price_per_pack: Optional[Decimal] = None
    manual_cost: Optional[Decimal] = None
    include_in_dough_weight: bool = True

    def __post_init__(self) -> None:
        _set(self, "quantity", to_decimal(self.quantity))
        _set(self, "price_per_unit", to_decimal(self.price_per_unit))
        _set(self, "pack_net_quantity", to_optional_decimal(self.pack_net_quantity))
        _set(self, "price_per_pack", to_optional_decimal(self.price_per_pack))
        _set(self, "manual_cost", to_optional_decimal(self.manual_cost))

    @property
    def has_manual_cost(self) -> bool:
        return self.manual_cost is not None

    @property
    def has_pack_pricing(self) -> bool:
        """True when both pack fields are present and usable."""
        return (
            self.pack_net_quantity is not None
            and self.pack_net_quantity > 0
            and self.price_per_pack is not None
            and self.price_per_pack >= 0
        )

    @property
    def total_cost(self) -> Decimal:
        """Line cost for a single batch."""
        return self.calculate_cost()

    def calculate_cost(self, batch_multiplier: Decimal = ONE) -> Decimal:
        """
        Calculate the line cost for a scaled batch.

        Priority: manual cost, then pack pricing, then price per unit.

        Args:
            batch_multiplier: Batch scale multiplier (negative treated as 0)

        Returns:
            Line cost as Decimal
        """
        multiplier = max(ZERO, to_decimal(batch_multiplier))

        if self.has_manual_cost:
            return self.manual_cost * multiplier

        scaled_quantity = self.quantity * multiplier

        if self.has_pack_pricing:
            return (self.price_per_pack / self.pack_net_quantity) * scaled_quantity

        return scaled_quantity * self.price_per_unit

    def unit_cost(self) -> Optional[Decimal]:
        """
        Cost of one unit of this ingredient, using the line cost priority.

        Returns:
            Unit cost, or None when quantity is not positive
        """
        if self.quantity <= 0:
            return None
        if self.has_manual_cost:
            return self.manual_cost / self.quantity
        if self.has_pack_pricing:
            return self.price_per_pack / self.pack_net_quantity
        return self.price_per_unit

    def is_costable(self) -> bool:
        """True when the line can contribute to ingredient cost."""
        if self.quantity <= 0 or self.price_per_unit < 0:
            return False
        return self.manual_cost is None or self.manual_cost >= 0

    def is_valid(self) -> bool:
        """Validate the recipe item fields."""
        has_manual_cost = self.manual_cost is not None and self.manual_cost >= 0
        has_direct_pricing = self.price_per_unit >= 0

        return (
            self.ingredient_id > 0
            and self.quantity > 0
            and bool(self.unit and self.unit.strip())
            and (has_manual_cost or self.has_pack_pricing or has_direct_pricing)
        )


@dataclass(frozen=True)
class LaborRole:
    """
    A labor role with hourly rate and hours spent on one batch.

    Attributes:
        name: Display name (e.g., "Baker", "Packaging Staff")
        hourly_rate: Rate per hour
        hours: Hours required per batch
        role_id: Optional identifier
    """

    name: str
    hourly_rate: Decimal
    hours: Decimal
    role_id: Optional[int] = None

    def __post_init__(self) -> None:
        _set(self, "hourly_rate", to_decimal(self.hourly_rate))
        _set(self, "hours", to_decimal(self.hours))

    @property
    def total_cost(self) -> Decimal:
        return self.hours * self.hourly_rate

    def is_valid(self) -> bool:
        return bool(self.name and self.name.strip()) and self.hourly_rate >= 0 and self.hours >= 0


_NON_NEGATIVE_FIELDS = (
    "oil_used_liters",
    "oil_price_per_liter",
    "oil_change_cost",
    "energy_kwh",
    "energy_rate_per_kwh",
    "overhead_allocated",
    "packaging_per_unit",
    "topping_weight_per_unit_grams",
    "topping_pack_weight_grams",
    "topping_pack_price",
    "markup",
    "target_profit_per_batch",
    "monthly_fixed_cost",
)

_DECIMAL_FIELDS = _NON_NEGATIVE_FIELDS + (
    "batch_multiplier",
    "waste_percent",
    "donut_weight_grams",
    "vat_percent",
    "target_margin_percent",
    "price_volatility_percent",
    "risk_appetite_percent",
    "market_pressure_percent",
)


@dataclass(frozen=True)
class BatchRequest:
    """
    Everything needed to cost and price one production batch.

    Ratios are fractions: 0.10 means 10%.

    Attributes:
        items: Recipe lines
        batch_multiplier: Scale applied to every line quantity
        oil_used_liters / oil_price_per_liter: Frying oil consumed
        oil_change_cost / batches_per_oil_change: Oil maintenance amortization
        energy_kwh / energy_rate_per_kwh: Energy consumed
        labor: Labor roles
        overhead_allocated: Pre-computed overhead passed through unchanged
        theoretical_output: Units produced before waste
        waste_percent: Share of output lost (clamped to [0, 0.99])
        use_weight_based_output: Derive output from dough weight instead
        donut_weight_grams: Weight of one unit for weight-based output
        packaging_per_unit: Packaging cost per sellable unit
        topping_*: Topping pack price/weight and usage per unit
        markup, vat_percent, rounding_rule: Pricing inputs
        pricing_strategy: Optional strategy name (see pricing_strategy.create_strategy)
        target_margin_percent: Target margin for margin-based strategies
        price_volatility_percent: Declared input price volatility (0 to 1)
        risk_appetite_percent: 0 = conservative, 1 = aggressive
        market_pressure_percent: -0.5 (heavy competition) to 0.5 (strong demand)
        target_profit_per_batch: Optional profit target for unit planning
        monthly_fixed_cost: Optional fixed cost for break-even planning
        product_id: Optional reference product for market lookups
    """

    items: Sequence[RecipeItem] = ()
    batch_multiplier: Decimal = DEFAULT_BATCH_MULTIPLIER
    oil_used_liters: Decimal = ZERO
    oil_price_per_liter: Decimal = ZERO
    oil_change_cost: Decimal = ZERO
    batches_per_oil_change: int = DEFAULT_BATCHES_PER_OIL_CHANGE
    energy_kwh: Decimal = ZERO
    energy_rate_per_kwh: Decimal = ZERO
    labor: Sequence[LaborRole] = ()
    overhead_allocated: Decimal = ZERO
    theoretical_output: int = 0
    waste_percent: Decimal = ZERO
    use_weight_based_output: bool = False
    donut_weight_grams: Decimal = DEFAULT_DONUT_WEIGHT_GRAMS
    packaging_per_unit: Decimal = ZERO
    topping_weight_per_unit_grams: Decimal = ZERO
    topping_pack_weight_grams: Decimal = ZERO
    topping_pack_price: Decimal = ZERO
    markup: Decimal = ZERO
    vat_percent: Decimal = ZERO
    rounding_rule: Optional[str] = DEFAULT_ROUNDING_RULE
    pricing_strategy: Optional[str] = None
    target_margin_percent: Decimal = DEFAULT_TARGET_MARGIN_PERCENT
    price_volatility_percent: Decimal = DEFAULT_PRICE_VOLATILITY_PERCENT
    risk_appetite_percent: Decimal = DEFAULT_RISK_APPETITE_PERCENT
    market_pressure_percent: Decimal = ZERO
    target_profit_per_batch: Decimal = ZERO
    monthly_fixed_cost: Decimal = ZERO
    product_id: Optional[int] = None

    def __post_init__(self) -> None:
        _set(self, "items", tuple(self.items or ()))
        _set(self, "labor", tuple(self.labor or ()))
        for name in _DECIMAL_FIELDS:
            _set(self, name, to_decimal(getattr(self, name)))
        _set(self, "theoretical_output", int(self.theoretical_output))
        _set(self, "batches_per_oil_change", int(self.batches_per_oil_change))

    @property
    def has_topping_inputs(self) -> bool:
        return (
            self.topping_weight_per_unit_grams > 0
            or self.topping_pack_weight_grams > 0
            or self.topping_pack_price > 0
        )

    def validation_errors(self, strategy: Optional["PricingStrategy"] = None) -> List[str]:
        """
        Collect every structural problem with this request.

        Waste and output fields are not checked here: waste is clamped with a
        warning, and output problems are reported by the output resolver.

        Args:
            strategy: Optional pricing strategy whose parameters must also validate

        Returns:
            List of error messages (empty when the request is valid)
        """
        errors: List[str] = []

        if not self.items:
            errors.append(ERROR_NO_ITEMS)
        elif not any(item.is_valid() for item in self.items):
            errors.append(ERROR_NO_VALID_ITEMS)

        if self.batch_multiplier <= 0:
            errors.append(f"batch_multiplier {ERROR_INVALID_POSITIVE}")
        if self.batches_per_oil_change <= 0:
            errors.append(f"batches_per_oil_change {ERROR_INVALID_POSITIVE}")

        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0:
                errors.append(f"{name} {ERROR_INVALID_NON_NEGATIVE}")

        if not ZERO <= self.vat_percent < ONE:
            errors.append("vat_percent must be between 0 and 1 (exclusive)")

        if self.has_topping_inputs and self.topping_pack_weight_grams <= 0:
            errors.append(f"topping_pack_weight_grams {ERROR_INVALID_POSITIVE} when toppings are used")

        if not ZERO <= self.price_volatility_percent <= ONE:
            errors.append("price_volatility_percent must be between 0 and 1")
        if not ZERO <= self.risk_appetite_percent <= ONE:
            errors.append("risk_appetite_percent must be between 0 and 1")
        if not MIN_MARKET_PRESSURE <= self.market_pressure_percent <= MAX_MARKET_PRESSURE:
            errors.append(
                f"market_pressure_percent must be between {MIN_MARKET_PRESSURE} "
                f"and {MAX_MARKET_PRESSURE}"
            )

        if strategy is not None and not strategy.validate_parameters(self):
            errors.append(f"Invalid parameters for {strategy.name} strategy")

        return errors

    def is_valid(self, strategy: Optional["PricingStrategy"] = None) -> bool:
        """Check whether the request passes structural validation."""
        return not self.validation_errors(strategy)
