"""Utilities package for the HPP Pricing Engine."""

from .decimal_utils import cost_to_string, to_decimal
from .datetime_utils import utc_now

__all__ = [
    "cost_to_string",
    "to_decimal",
    "utc_now",
]
