"""
Price rounding for the HPP Pricing Engine.

A rounding rule is a string holding a positive increment such as "0.05" or
"100". Prices are rounded to the nearest multiple of the increment with
ROUND_HALF_UP (halves move away from zero), the same behavior as the
two-decimal cost format in decimal_utils.

An empty, unparseable or non-positive rule is not an error: the price is
returned unchanged and a warning is logged.

Example:
    >>> apply_rounding(Decimal("12.348"), "0.05")
    Decimal('12.35')
    >>> apply_rounding(Decimal("12.348"), "")
    Decimal('12.348')
"""

import logging
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Optional

from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import (
    COMMON_ROUNDING_INTERVALS,
    CURRENCY_ROUNDING_RULES,
    DEFAULT_CURRENCY_ROUNDING,
    MAXIMUM_ROUNDING_INTERVAL,
)
from src.utils.decimal_utils import ONE, ZERO, to_decimal

logger = get_service_logger(__name__)

_WHOLE = Decimal("1")


def parse_rounding_rule(rounding_rule: Optional[str]) -> Optional[Decimal]:
    """
    Parse a rounding rule into its increment.

    Args:
        rounding_rule: Rule string, e.g. "0.05"

    Returns:
        Positive finite increment, or None when the rule is empty,
        unparseable, NaN/Infinity or not positive
    """
    if rounding_rule is None:
        return None

    text = str(rounding_rule).strip()
    if not text:
        return None

    try:
        interval = Decimal(text)
    except InvalidOperation:
        interval = None

    if interval is None or not interval.is_finite() or interval <= 0:
        log_operation(
            logger,
            operation="parse_rounding_rule",
            outcome="invalid_rule",
            level=logging.WARNING,
            rounding_rule=text,
        )
        return None

    return interval


def _quantize_to_interval(price: Decimal, interval: Decimal, rounding: str) -> Decimal:
    """Snap price to a multiple of interval; an increment too fine to represent leaves it unrounded."""
    try:
        quotient = (price / interval).quantize(_WHOLE, rounding=rounding)
    except InvalidOperation:
        log_operation(
            logger,
            operation="round_to_interval",
            outcome="unrepresentable",
            level=logging.WARNING,
            price=str(price),
            interval=str(interval),
        )
        return price
    return quotient * interval


def round_to_interval(price: Decimal, interval: Optional[Decimal]) -> Decimal:
    """
    Round a price to the nearest multiple of an already parsed interval.

    None leaves the price unchanged.
    """
    if interval is None:
        return price
    return _quantize_to_interval(price, interval, ROUND_HALF_UP)


def apply_rounding(price, rounding_rule: Optional[str]) -> Decimal:
    """
    Round a price with a rounding rule.

    Args:
        price: Price to round
        rounding_rule: Increment rule string

    Returns:
        Rounded price, or the price unchanged when the rule is unusable
    """
    return round_to_interval(to_decimal(price), parse_rounding_rule(rounding_rule))


def is_valid_rounding_rule(rounding_rule: Optional[str]) -> bool:
    """A rule is valid when it parses to an increment in (0, 1000]."""
    interval = parse_rounding_rule(rounding_rule)
    return interval is not None and interval <= MAXIMUM_ROUNDING_INTERVAL


def round_up(price, rounding_rule: Optional[str]) -> Decimal:
    """Round a price up to the next multiple of the rule's increment."""
    price = to_decimal(price)
    interval = parse_rounding_rule(rounding_rule)
    if interval is None:
        return price
    return _quantize_to_interval(price, interval, ROUND_CEILING)


def round_down(price, rounding_rule: Optional[str]) -> Decimal:
    """Round a price down to the previous multiple of the rule's increment."""
    price = to_decimal(price)
    interval = parse_rounding_rule(rounding_rule)
    if interval is None:
        return price
    return _quantize_to_interval(price, interval, ROUND_FLOOR)


def apply_charm_pricing(price, charm_suffix=Decimal("0.99")) -> Decimal:
    """
    Convert a price to a charm price ending in the given suffix.

    The price is floored to a whole unit and the suffix added. When the
    original sits more than half a unit below that charm price, the previous
    whole unit's charm price is used instead.

    Args:
        price: Price to convert
        charm_suffix: Fractional ending in [0, 1)

    Returns:
        Charm price, or the price unchanged for an invalid suffix
    """
    price = to_decimal(price)
    charm_suffix = to_decimal(charm_suffix)

    if charm_suffix < 0 or charm_suffix >= ONE:
        log_operation(
            logger,
            operation="apply_charm_pricing",
            outcome="invalid_suffix",
            level=logging.WARNING,
            charm_suffix=str(charm_suffix),
        )
        return price

    base_price = price.quantize(_WHOLE, rounding=ROUND_FLOOR)
    charm_price = base_price + charm_suffix

    if price < charm_price - Decimal("0.5"):
        charm_price = base_price - Decimal("0.01")
        if charm_price < 0:
            charm_price = price

    return charm_price


def rounding_proposals(price) -> Dict[str, Decimal]:
    """
    Round a price with every common interval.

    Returns:
        Dict mapping the interval formatted to two decimals ("0.05") to the
        rounded price
    """
    price = to_decimal(price)
    return {
        f"{interval:.2f}": round_to_interval(price, interval)
        for interval in COMMON_ROUNDING_INTERVALS
    }


def common_rounding_intervals() -> List[Decimal]:
    return list(COMMON_ROUNDING_INTERVALS)


def rounding_rule_instructions() -> str:
    """User-facing explanation of rounding rules."""
    return (
        "Rounding rules specify the interval to round prices to. Examples:\n"
        "  0.01 - Round to nearest 1 cent (exact prices)\n"
        "  0.05 - Round to nearest 5 cents (common in retail)\n"
        "  0.10 - Round to nearest 10 cents\n"
        "  1.00 - Round to nearest whole unit\n"
        "  5.00 - Round to nearest 5 units\n"
        "\nEnter the value as a decimal number."
    )


class CurrencyRoundingHelper:
    """
    Smallest practical price increment per currency.

    Unknown or empty currency codes use 0.01.
    """

    def __init__(self):
        self._rules: Dict[str, Decimal] = dict(CURRENCY_ROUNDING_RULES)

    def get_rule(self, currency_code: Optional[str]) -> Decimal:
        if not currency_code:
            return DEFAULT_CURRENCY_ROUNDING
        return self._rules.get(currency_code.strip().upper(), DEFAULT_CURRENCY_ROUNDING)

    def set_rule(self, currency_code: str, interval) -> None:
        """Register or replace the increment for a currency; non-positive values are ignored."""
        interval = to_decimal(interval)
        if not currency_code or interval <= ZERO:
            log_operation(
                logger,
                operation="set_currency_rule",
                outcome="ignored",
                level=logging.WARNING,
                currency_code=currency_code,
                interval=str(interval),
            )
            return
        self._rules[currency_code.strip().upper()] = interval

    def round_for_currency(self, price, currency_code: Optional[str]) -> Decimal:
        return round_to_interval(to_decimal(price), self.get_rule(currency_code))

    def all_rules(self) -> Dict[str, Decimal]:
        return dict(self._rules)
