"""
Constants for the HPP Pricing Engine.

This module defines all system-wide constants including:
- Application metadata
- Request defaults
- Calculation limits and risk model coefficients
- Warning and recommendation messages
"""

from decimal import Decimal
from typing import Dict, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "HPP Pricing Engine"
APP_VERSION = "1.0.0"
ENGINE_VERSION = "1.0"

# ============================================================================
# Request Defaults
# ============================================================================

DEFAULT_BATCH_MULTIPLIER = Decimal("1")
DEFAULT_BATCHES_PER_OIL_CHANGE = 1
DEFAULT_DONUT_WEIGHT_GRAMS = Decimal("25")
DEFAULT_ROUNDING_RULE = "0.05"
DEFAULT_STRATEGY_NAME = "FixedMarkup"
DEFAULT_TARGET_MARGIN_PERCENT = Decimal("0.30")
DEFAULT_PRICE_VOLATILITY_PERCENT = Decimal("0.08")
DEFAULT_RISK_APPETITE_PERCENT = Decimal("0.50")

# ============================================================================
# Calculation Limits
# ============================================================================

MINIMUM_UNIT_PRICE = Decimal("0.01")
MAXIMUM_WASTE_PERCENT = Decimal("0.99")
MAXIMUM_MARKUP = Decimal("5")
MAXIMUM_TARGET_MARGIN = Decimal("0.99")
MIN_MARKET_PRESSURE = Decimal("-0.50")
MAX_MARKET_PRESSURE = Decimal("0.50")
MAXIMUM_ROUNDING_INTERVAL = Decimal("1000")

# Cache
CACHE_KEY_PREFIX = "batch_cost_"
DEFAULT_CACHE_TTL_MINUTES = 60

# Monetary formatting
CURRENCY_DECIMAL_PLACES = 2

# ============================================================================
# Risk Model Coefficients
# ============================================================================

# Volatility blend: observed coefficient of variation vs. declared volatility
VOLATILITY_OBSERVED_WEIGHT = Decimal("0.65")
VOLATILITY_DECLARED_WEIGHT = Decimal("0.35")

# Risk buffer
RISK_BUFFER_BASE = Decimal("0.03")
RISK_BUFFER_VOLATILITY_WEIGHT = Decimal("0.20")
RISK_BUFFER_WASTE_WEIGHT = Decimal("0.12")
RISK_BUFFER_OVERHEAD_WEIGHT = Decimal("0.08")
RISK_APPETITE_FACTOR_BASE = Decimal("1.15")
RISK_APPETITE_FACTOR_SLOPE = Decimal("0.60")
RISK_BUFFER_MIN = Decimal("0.02")
RISK_BUFFER_MAX = Decimal("0.35")

# Price band multipliers
CONSERVATIVE_MULTIPLIER_BASE = Decimal("1.04")
CONSERVATIVE_MULTIPLIER_SLOPE = Decimal("0.06")
AGGRESSIVE_MULTIPLIER_BASE = Decimal("1.06")
AGGRESSIVE_MULTIPLIER_SLOPE = Decimal("0.08")

# Risk appetite thresholds for choosing the suggested price
CONSERVATIVE_APPETITE_THRESHOLD = Decimal("0.35")
AGGRESSIVE_APPETITE_THRESHOLD = Decimal("0.75")

# Confidence score
CONFIDENCE_VOLATILITY_WEIGHT = Decimal("0.45")
CONFIDENCE_WASTE_WEIGHT = Decimal("0.25")
CONFIDENCE_OVERHEAD_WEIGHT = Decimal("0.20")
CONFIDENCE_MARKET_WEIGHT = Decimal("0.10")
CONFIDENCE_MIN = Decimal("0.05")
CONFIDENCE_MAX = Decimal("0.98")
LOW_CONFIDENCE_THRESHOLD = Decimal("0.40")
STRONG_CONFIDENCE_THRESHOLD = Decimal("0.70")

# Warning thresholds
HIGH_WASTE_THRESHOLD = Decimal("0.12")
HIGH_OVERHEAD_SHARE_THRESHOLD = Decimal("0.35")
HIGH_VOLATILITY_THRESHOLD = Decimal("0.35")

# ============================================================================
# Warning Messages
# ============================================================================

WARNING_WASTE_CLAMPED = "Waste percent {original} is outside the valid range; clamped to {clamped}."
WARNING_HIGH_WASTE = "Waste is high (>12%). Reducing waste can improve margin significantly."
WARNING_HIGH_OVERHEAD = "Overhead share is high (>35%). Consider overhead allocation review."
WARNING_HIGH_VOLATILITY = "Input price volatility is elevated. Consider shorter re-pricing cycle."
WARNING_THIN_MARGIN = "Contribution margin is too thin. Suggested price may not be sustainable."
WARNING_TARGET_PROFIT_UNREACHABLE = "Target profit cannot be reached with current suggested price."
WARNING_BREAK_EVEN_UNREACHABLE = (
    "Monthly break-even is unreachable because contribution margin is non-positive."
)

# ============================================================================
# Recommendation Notes
# ============================================================================

NOTE_BELOW_SUSTAINABLE_MARGIN = (
    "Price is below sustainable contribution margin. Raise price or reduce cost."
)
NOTE_LOW_CONFIDENCE = "Low confidence pricing. Use conservative range and monitor costs weekly."
NOTE_MODERATE_CONFIDENCE = (
    "Moderate confidence pricing. Recalculate when any major input price changes."
)
NOTE_STRONG_CONFIDENCE = "Pricing confidence is strong. Maintain standard monitoring cadence."

# ============================================================================
# Breakdown Keys
# ============================================================================

BREAKDOWN_INGREDIENTS = "Ingredients"
BREAKDOWN_OIL_USAGE = "Oil (Usage)"
BREAKDOWN_OIL_MAINTENANCE = "Oil (Maintenance)"
BREAKDOWN_ENERGY = "Energy"
BREAKDOWN_LABOR = "Labor"
BREAKDOWN_OVERHEAD = "Overhead"
BREAKDOWN_PACKAGING = "Packaging"
BREAKDOWN_TOPPING_PER_UNIT = "ToppingPerUnit"
BREAKDOWN_COST_WITH_TOPPING = "CostPerUnitWithTopping"
BREAKDOWN_RISK_BUFFER = "RiskBufferPercent"
BREAKDOWN_MINIMUM_SAFE_PRICE = "MinimumSafePrice"
BREAKDOWN_CONTRIBUTION_MARGIN = "ContributionMarginPerUnit"

# ============================================================================
# Rounding
# ============================================================================

COMMON_ROUNDING_INTERVALS: List[Decimal] = [
    Decimal("0.01"),
    Decimal("0.05"),
    Decimal("0.10"),
    Decimal("0.25"),
    Decimal("0.50"),
    Decimal("1.00"),
    Decimal("5.00"),
    Decimal("10.00"),
]

# Smallest circulating increment per ISO 4217 currency
CURRENCY_ROUNDING_RULES: Dict[str, Decimal] = {
    "USD": Decimal("0.01"),
    "EUR": Decimal("0.01"),
    "IDR": Decimal("100"),  # Rp 100 is the smallest coin
    "MYR": Decimal("0.05"),  # no 1-cent coin
    "SGD": Decimal("0.05"),
    "JPY": Decimal("1"),
    "TRY": Decimal("0.01"),
    "INR": Decimal("1"),
}
DEFAULT_CURRENCY_ROUNDING = Decimal("0.01")

# ============================================================================
# Error Messages
# ============================================================================

ERROR_NO_ITEMS = "Request must contain at least one recipe item"
ERROR_NO_VALID_ITEMS = "Request must contain at least one valid recipe item"
ERROR_INVALID_POSITIVE = "must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "must be zero or greater"


# ============================================================================
# Helper Functions
# ============================================================================


def format_currency(amount: Decimal) -> str:
    """
    Format a number as currency.

    Args:
        amount: The amount to format

    Returns:
        Formatted string like "12.34"
    """
    return f"{amount:,.{CURRENCY_DECIMAL_PLACES}f}"


def format_percent(ratio: Decimal, precision: int = 1) -> str:
    """
    Format a ratio as a percentage.

    Args:
        ratio: Ratio where 0.15 means 15%
        precision: Number of decimal places

    Returns:
        Formatted string like "15.0%"
    """
    return f"{ratio * 100:.{precision}f}%"
