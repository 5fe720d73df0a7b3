"""
Output unit resolution for the HPP Pricing Engine.

Derives how many sellable units a batch yields and which divisor the unit
cost uses. Two paths exist:

- Weight based: units = dough weight total / unit weight. The divisor is the
  unrounded unit count so unit cost keeps fractional precision.
- Waste based: units = theoretical output x (1 - waste percent).

Sellable units are floored and never below 1 when the path's inputs are
usable. When no positive divisor can be derived the calculation fails with
UnresolvableOutputError naming the path.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from src.models.batch_request import BatchRequest
from src.services.exceptions import UnresolvableOutputError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import MAXIMUM_WASTE_PERCENT, WARNING_WASTE_CLAMPED
from src.utils.decimal_utils import ONE, ZERO, clamp, to_decimal

logger = get_service_logger(__name__)

WEIGHT_BASED = "weight_based"
WASTE_BASED = "waste_based"


@dataclass(frozen=True)
class OutputResolution:
    """Resolved output for one batch."""

    mode: str
    dough_weight_total: Decimal
    donut_count_by_weight: Decimal
    sellable_units: int
    divisor: Decimal


def normalize_waste_percent(waste_percent) -> Tuple[Decimal, Optional[str]]:
    """
    Clamp a waste percent into [0, 0.99].

    Args:
        waste_percent: Declared waste as a fraction

    Returns:
        Tuple of (clamped waste, warning message or None when unchanged)

    Example:
        >>> normalize_waste_percent(Decimal("1.5"))
        (Decimal('0.99'), 'Waste percent 1.5 is outside the valid range; clamped to 0.99.')
    """
    original = to_decimal(waste_percent)
    clamped = clamp(original, ZERO, MAXIMUM_WASTE_PERCENT)

    if clamped == original:
        return original, None

    log_operation(
        logger,
        operation="normalize_waste_percent",
        outcome="clamped",
        level=logging.WARNING,
        original_waste=str(original),
        clamped_waste=str(clamped),
    )
    return clamped, WARNING_WASTE_CLAMPED.format(original=original, clamped=clamped)


def calculate_donut_count_by_weight(dough_weight_total: Decimal, donut_weight_grams: Decimal) -> Decimal:
    """Dough weight / unit weight, 0 when the unit weight is not positive."""
    if donut_weight_grams <= 0:
        return ZERO
    return dough_weight_total / donut_weight_grams


def calculate_sellable_units(
    request: BatchRequest, donut_count_by_weight: Decimal, waste_percent: Decimal
) -> int:
    """
    Integer sellable units for the request's output path.

    Returns:
        max(1, floor(units)) when the path has usable inputs, else 0
    """
    if request.use_weight_based_output:
        if donut_count_by_weight <= 0:
            return 0
        return max(1, math.floor(donut_count_by_weight))

    if request.theoretical_output <= 0:
        return 0
    return max(1, math.floor(Decimal(request.theoretical_output) * (ONE - waste_percent)))


def resolve_output_units(
    request: BatchRequest, dough_weight_total: Decimal, waste_percent: Decimal
) -> OutputResolution:
    """
    Resolve sellable units and the unit cost divisor.

    Args:
        request: Batch request
        dough_weight_total: Total dough weight from costed lines
        waste_percent: Already normalized waste percent

    Returns:
        OutputResolution for the request

    Raises:
        UnresolvableOutputError: If no positive divisor can be derived
    """
    mode = WEIGHT_BASED if request.use_weight_based_output else WASTE_BASED
    donut_count = calculate_donut_count_by_weight(dough_weight_total, request.donut_weight_grams)

    sellable_units = calculate_sellable_units(request, donut_count, waste_percent)

    if mode == WEIGHT_BASED and donut_count > 0:
        divisor = donut_count
    else:
        divisor = Decimal(sellable_units)

    if divisor <= 0:
        if mode == WEIGHT_BASED and request.donut_weight_grams <= 0:
            detail = f"donut_weight_grams is {request.donut_weight_grams}"
        elif mode == WEIGHT_BASED:
            detail = f"dough weight total is {dough_weight_total}"
        else:
            detail = f"theoretical_output is {request.theoretical_output}"

        log_operation(
            logger,
            operation="resolve_output_units",
            outcome="unresolvable",
            level=logging.ERROR,
            mode=mode,
            detail=detail,
        )
        raise UnresolvableOutputError(mode, detail)

    log_operation(
        logger,
        operation="resolve_output_units",
        outcome="success",
        level=logging.DEBUG,
        mode=mode,
        sellable_units=sellable_units,
        divisor=str(divisor),
    )
    return OutputResolution(
        mode=mode,
        dough_weight_total=dough_weight_total,
        donut_count_by_weight=donut_count,
        sellable_units=sellable_units,
        divisor=divisor,
    )
