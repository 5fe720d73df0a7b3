"""Services package - Pricing pipeline for the HPP Pricing Engine.

Architecture:
- Services: Pure functions organized by pipeline stage
- Engine: PricingEngine orchestrates the stages and owns the result cache
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Request validation before any cost aggregation

Service Modules:
- cost_aggregation: Recipe line valuation and batch cost aggregators
- output_units: Waste normalization and sellable unit resolution
- pricing_strategy: PricingStrategy protocol, built-in strategies, factory
- risk_pricing: Volatility, risk buffer, price band, warnings, confidence
- rounding_engine: Price rounding rules and currency increments
- result_cache: Thread-safe TTL cache of calculation results
- pricing_engine: PricingEngine facade

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- logging_utils: Structured service logging
"""

from . import (
    exceptions,
    logging_utils,
    rounding_engine,
    cost_aggregation,
    output_units,
    pricing_strategy,
    risk_pricing,
    result_cache,
    pricing_engine,
)

from .exceptions import (
    ServiceError,
    InvalidArgumentError,
    ValidationError,
    InvalidBatchRequestError,
    UnresolvableOutputError,
    PricingStrategyError,
)

from .pricing_engine import BatchOutcome, PricingEngine, run_sample_calculation
from .pricing_strategy import PricingStrategy, create_strategy

__all__ = [
    # Modules
    "exceptions",
    "logging_utils",
    "rounding_engine",
    "cost_aggregation",
    "output_units",
    "pricing_strategy",
    "risk_pricing",
    "result_cache",
    "pricing_engine",
    # Exceptions
    "ServiceError",
    "InvalidArgumentError",
    "ValidationError",
    "InvalidBatchRequestError",
    "UnresolvableOutputError",
    "PricingStrategyError",
    # Engine
    "BatchOutcome",
    "PricingEngine",
    "PricingStrategy",
    "create_strategy",
    "run_sample_calculation",
]
