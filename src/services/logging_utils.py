"""Service layer logging utilities.

Provides structured logging functions for pricing operations, enabling
consistent log format and context across the cost aggregators, the cache
and the pricing engine.

Usage:
    from src.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    # Log successful calculation
    log_operation(
        logger,
        operation="calculate_batch_cost",
        outcome="success",
        unit_cost="4.0056",
        sellable_units=90,
    )

    # Log a skipped input line
    log_operation(
        logger,
        operation="calculate_ingredient_cost",
        outcome="line_skipped",
        level=logging.WARNING,
        ingredient_id=3,
        quantity="0",
    )
"""

import logging
from typing import Any

LOGGER_NAMESPACE = "hpp_pricing.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured logger instance with the 'hpp_pricing.services' prefix.

    Example:
        >>> logger = get_service_logger(__name__)
        >>> logger.name
        'hpp_pricing.services.pricing_engine'
    """
    # Extract just the module name if full path is provided
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging,
    so handlers can read fields such as ``record.sellable_units`` directly.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "calculate_batch_cost", "clear_cache")
        outcome: Outcome description (e.g., "success", "cache_hit", "error")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (figures, counts, error details)

    Example:
        >>> log_operation(
        ...     logger,
        ...     operation="resolve_output_units",
        ...     outcome="unresolvable",
        ...     level=logging.ERROR,
        ...     mode="waste_based",
        ... )
        # Logs "resolve_output_units: unresolvable" at ERROR with extra context
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
