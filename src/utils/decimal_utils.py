"""Decimal utilities for monetary and ratio values.

Provides the conversions every pricing stage relies on, so that no binary
float ever enters a calculation, plus the standard 2-decimal money format.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

Numeric = Union[Decimal, float, int, str]

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal without binary float drift.

    Floats are converted through their shortest string form, so 0.1 becomes
    Decimal("0.1") rather than Decimal("0.1000000000000000055511151231257827").

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal value

    Raises:
        ValueError: If the value is None, a bool, not numeric, NaN or infinite

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal(" 12.50 ")
        Decimal('12.50')
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Cannot convert {value!r} to Decimal") from None
    if not result.is_finite():
        raise ValueError(f"{value!r} is not a finite number")
    return result


def to_optional_decimal(value: Optional[Numeric]) -> Optional[Decimal]:
    """Convert a value to Decimal, passing None through."""
    if value is None:
        return None
    return to_decimal(value)


def cost_to_string(value: Union[Decimal, float, int, str, None]) -> str:
    """
    Convert a cost value to a 2-decimal string format.

    Args:
        value: Cost value (Decimal, float, int, str, or None)

    Returns:
        String formatted as "12.34" (2 decimal places).
        Returns "0.00" if value is None.

    Examples:
        >>> cost_to_string(Decimal("12.345"))
        '12.35'
        >>> cost_to_string(12.3)
        '12.30'
        >>> cost_to_string(None)
        '0.00'
    """
    if value is None:
        return "0.00"

    decimal_value = to_decimal(value)

    # Round to 2 decimal places using standard rounding
    rounded = decimal_value.quantize(CENT, rounding=ROUND_HALF_UP)

    return str(rounded)


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Clamp a Decimal into [lower, upper]."""
    return max(lower, min(value, upper))
