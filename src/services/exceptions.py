"""Service layer exception classes for the HPP Pricing Engine.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the pricing pipeline.

Fatal errors abort a calculation and surface to the caller. Non-fatal issues
(skipped lines, clamped waste, unparseable rounding rules) never raise; they
are logged and, where useful, reported as warnings on the result.

Exception Hierarchy:
    ServiceError (base)
    ├── InvalidArgumentError
    ├── ValidationError
    │   └── InvalidBatchRequestError
    ├── UnresolvableOutputError
    └── PricingStrategyError
"""

from typing import Any, List, Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.

    Args:
        message: Human-readable error message
        correlation_id: Optional correlation ID for tracing
        **context: Additional diagnostic context kept on the exception

    HTTP Status: 500 Internal Server Error
    """

    http_status_code = 500

    def __init__(self, message: str = "", correlation_id: Optional[str] = None, **context: Any):
        self.message = message
        self.correlation_id = correlation_id
        self.context = context
        super().__init__(message)


class InvalidArgumentError(ServiceError):
    """Raised when a required argument is absent.

    Args:
        argument: Name of the missing argument

    Example:
        >>> raise InvalidArgumentError("request")
        InvalidArgumentError: Argument 'request' cannot be None

    HTTP Status: 400 Bad Request
    """

    http_status_code = 400

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"Argument '{argument}' cannot be None", argument=argument)


class ValidationError(ServiceError):
    """Raised when data validation fails.

    HTTP Status: 400 Bad Request
    """

    http_status_code = 400

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        error_msg = "; ".join(self.errors)
        super().__init__(f"Validation failed: {error_msg}", errors=self.errors)


class InvalidBatchRequestError(ValidationError):
    """Raised when a batch request fails structural validation.

    Raised before any cost aggregation runs.

    Args:
        errors: List of validation problems

    Example:
        >>> raise InvalidBatchRequestError(["batch_multiplier must be greater than zero"])
        InvalidBatchRequestError: Validation failed: batch_multiplier must be greater than zero

    HTTP Status: 400 Bad Request
    """

    http_status_code = 400


class UnresolvableOutputError(ServiceError):
    """Raised when no positive output-unit count can be derived.

    Args:
        mode: Output path that failed ("weight_based" or "waste_based")
        detail: Which input made the output unresolvable

    Example:
        >>> raise UnresolvableOutputError("waste_based", "theoretical_output is 0")
        UnresolvableOutputError: Cannot calculate unit cost: no sellable units
        (waste_based output: theoretical_output is 0)

    HTTP Status: 422 Unprocessable Entity
    """

    http_status_code = 422

    def __init__(self, mode: str, detail: str):
        self.mode = mode
        self.detail = detail
        super().__init__(
            f"Cannot calculate unit cost: no sellable units ({mode} output: {detail})",
            mode=mode,
            detail=detail,
        )


class PricingStrategyError(ServiceError):
    """Raised when a pricing strategy cannot price the given inputs.

    Args:
        strategy_name: Name of the strategy that rejected the inputs
        reason: Why the inputs were rejected

    HTTP Status: 400 Bad Request
    """

    http_status_code = 400

    def __init__(self, strategy_name: str, reason: str):
        self.strategy_name = strategy_name
        self.reason = reason
        super().__init__(
            f"{strategy_name} strategy error: {reason}",
            strategy_name=strategy_name,
            reason=reason,
        )
