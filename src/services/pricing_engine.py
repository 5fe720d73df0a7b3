"""Pricing engine - cost, unit cost (HPP) and price band for production batches.

The PricingEngine is the single entry point of the pricing pipeline:

1. Validate the request
2. Aggregate batch costs (ingredients, oil, energy, labor, overhead)
3. Resolve sellable units and the unit cost divisor
4. Add packaging, compute the unit cost and per-unit topping cost
5. Price with the active strategy
6. Enrich with risk buffer, price band, margins, warnings and confidence

Results are memoized in a ResultCache keyed by the full request and the
strategy. A calculation holds no lock; only the cache access is synchronized.

Usage:
    from src.services.pricing_engine import PricingEngine

    engine = PricingEngine()
    result = engine.calculate_batch_cost(request)
    print(result.summary())
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from src.models.batch_cost_result import BatchCostResult
from src.models.batch_request import BatchRequest, LaborRole, RecipeItem
from src.services import cost_aggregation
from src.services.exceptions import InvalidArgumentError, InvalidBatchRequestError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.output_units import normalize_waste_percent, resolve_output_units
from src.services.pricing_strategy import PricingStrategy, create_strategy
from src.services.result_cache import ResultCache, build_cache_key
from src.services.risk_pricing import PricingAnalysis, enrich_pricing
from src.utils.config import Config, get_config
from src.utils.constants import (
    BREAKDOWN_CONTRIBUTION_MARGIN,
    BREAKDOWN_COST_WITH_TOPPING,
    BREAKDOWN_ENERGY,
    BREAKDOWN_INGREDIENTS,
    BREAKDOWN_LABOR,
    BREAKDOWN_MINIMUM_SAFE_PRICE,
    BREAKDOWN_OIL_MAINTENANCE,
    BREAKDOWN_OIL_USAGE,
    BREAKDOWN_OVERHEAD,
    BREAKDOWN_PACKAGING,
    BREAKDOWN_RISK_BUFFER,
    BREAKDOWN_TOPPING_PER_UNIT,
)
from src.utils.datetime_utils import utc_now

logger = get_service_logger(__name__)


@dataclass(frozen=True)
class BatchOutcome:
    """Outcome of one request in an isolated batch run: a result or an error."""

    index: int
    result: Optional[BatchCostResult] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def build_breakdown(
    ingredient_cost: Decimal,
    oil_cost: Decimal,
    oil_amortization: Decimal,
    energy_cost: Decimal,
    labor_cost: Decimal,
    overhead_cost: Decimal,
    packaging_cost: Decimal,
    topping_cost_per_unit: Decimal,
    cost_per_unit_with_topping: Decimal,
    analysis: PricingAnalysis,
) -> Mapping[str, Decimal]:
    """Read-only display mapping of component name to value."""
    return MappingProxyType(
        {
            BREAKDOWN_INGREDIENTS: ingredient_cost,
            BREAKDOWN_OIL_USAGE: oil_cost,
            BREAKDOWN_OIL_MAINTENANCE: oil_amortization,
            BREAKDOWN_ENERGY: energy_cost,
            BREAKDOWN_LABOR: labor_cost,
            BREAKDOWN_OVERHEAD: overhead_cost,
            BREAKDOWN_PACKAGING: packaging_cost,
            BREAKDOWN_TOPPING_PER_UNIT: topping_cost_per_unit,
            BREAKDOWN_COST_WITH_TOPPING: cost_per_unit_with_topping,
            BREAKDOWN_RISK_BUFFER: analysis.risk_buffer_percent,
            BREAKDOWN_MINIMUM_SAFE_PRICE: analysis.minimum_safe_price,
            BREAKDOWN_CONTRIBUTION_MARGIN: analysis.contribution_margin_per_unit,
        }
    )


class PricingEngine:
    """
    Calculates batch costs and risk-aware prices.

    Args:
        cache: Result cache; defaults to one sized from configuration
        strategy: Pricing strategy used for every request; when None the
            request's pricing_strategy name, then the configured default, is used
        config: Configuration; defaults to the global config
    """

    def __init__(
        self,
        cache: Optional[ResultCache] = None,
        strategy: Optional[PricingStrategy] = None,
        config: Optional[Config] = None,
    ):
        self._config = config or get_config()
        if cache is None:
            ttl = self._config.cache_ttl_seconds if self._config.cache_enabled else 0
            cache = ResultCache(ttl_seconds=ttl)
        self._cache = cache
        self._strategy = strategy

        log_operation(
            logger,
            operation="initialize_engine",
            outcome="success",
            level=logging.DEBUG,
            strategy=self._strategy.name if self._strategy else None,
            cache_ttl_seconds=self._cache.ttl_seconds,
        )

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def strategy(self) -> Optional[PricingStrategy]:
        """The injected strategy, if any."""
        return self._strategy

    def resolve_strategy(self, request: BatchRequest) -> PricingStrategy:
        """Strategy for a request: injected, else named on the request, else configured default."""
        if self._strategy is not None:
            return self._strategy
        if request.pricing_strategy:
            return create_strategy(request.pricing_strategy)
        return create_strategy(self._config.default_strategy)

    def validate_request(self, request: BatchRequest, strategy: Optional[PricingStrategy] = None) -> None:
        """
        Raise if the request cannot be priced.

        Raises:
            InvalidArgumentError: If request is None
            InvalidBatchRequestError: If structural validation fails
        """
        if request is None:
            raise InvalidArgumentError("request")

        errors = request.validation_errors(strategy)
        if errors:
            log_operation(
                logger,
                operation="validate_request",
                outcome="invalid",
                level=logging.ERROR,
                errors=errors,
            )
            raise InvalidBatchRequestError(errors)

    def calculate_batch_cost(self, request: BatchRequest) -> BatchCostResult:
        """
        Calculate costs, unit cost and price band for one batch.

        Args:
            request: Batch request

        Returns:
            BatchCostResult (shared, immutable instance on a cache hit)

        Raises:
            InvalidArgumentError: If request is None
            InvalidBatchRequestError: If the request fails validation
            UnresolvableOutputError: If no sellable units can be derived
            PricingStrategyError: If the strategy rejects the inputs
        """
        if request is None:
            raise InvalidArgumentError("request")

        strategy = self.resolve_strategy(request)
        self.validate_request(request, strategy)

        key = build_cache_key(request, strategy)
        return self._cache.get_or_compute(
            key, lambda: self._perform_detailed_calculation(request, strategy)
        )

    async def calculate_batch_cost_async(
        self, request: BatchRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> BatchCostResult:
        """
        Run calculate_batch_cost in a worker thread.

        Cancellation is checked once, before dispatch; a calculation already
        running is not interrupted.

        Raises:
            asyncio.CancelledError: If cancel_event is already set
        """
        if cancel_event is not None and cancel_event.is_set():
            log_operation(
                logger,
                operation="calculate_batch_cost_async",
                outcome="cancelled",
                level=logging.INFO,
            )
            raise asyncio.CancelledError()
        return await asyncio.to_thread(self.calculate_batch_cost, request)

    def calculate_multiple_batches(self, requests: Iterable[BatchRequest]) -> List[BatchCostResult]:
        """
        Calculate several batches in order.

        The first failing request aborts the run; its error is logged and
        re-raised.
        """
        if requests is None:
            raise InvalidArgumentError("requests")

        results = []
        for index, request in enumerate(requests):
            try:
                results.append(self.calculate_batch_cost(request))
            except Exception as e:
                log_operation(
                    logger,
                    operation="calculate_multiple_batches",
                    outcome="error",
                    level=logging.ERROR,
                    index=index,
                    error=str(e),
                )
                raise
        return results

    def calculate_multiple_batches_isolated(
        self, requests: Iterable[BatchRequest]
    ) -> List[BatchOutcome]:
        """
        Calculate several batches, capturing each failure in its outcome.

        Every error is logged and returned; none is dropped.
        """
        if requests is None:
            raise InvalidArgumentError("requests")

        outcomes = []
        for index, request in enumerate(requests):
            try:
                outcomes.append(BatchOutcome(index=index, result=self.calculate_batch_cost(request)))
            except Exception as e:
                log_operation(
                    logger,
                    operation="calculate_multiple_batches_isolated",
                    outcome="error",
                    level=logging.ERROR,
                    index=index,
                    error=str(e),
                )
                outcomes.append(BatchOutcome(index=index, error=e))
        return outcomes

    def clear_cache(self) -> None:
        """Invalidate every cached result."""
        removed = self._cache.clear()
        log_operation(logger, operation="clear_cache", outcome="success", entries_removed=removed)

    def get_diagnostics(self) -> Dict[str, Any]:
        stats = self._cache.statistics()
        return {
            "cache_hits": stats.hits,
            "cache_misses": stats.misses,
            "total_calculations": stats.total_calculations,
            "hit_rate": stats.hit_rate,
            "cache_size": stats.size,
            "cache_ttl_seconds": stats.ttl_seconds,
            "strategy": self._strategy.name if self._strategy else self._config.default_strategy,
            "engine_version": self._config.engine_version,
        }

    def _perform_detailed_calculation(
        self, request: BatchRequest, strategy: PricingStrategy
    ) -> BatchCostResult:
        warnings: List[str] = []

        waste_percent, waste_warning = normalize_waste_percent(request.waste_percent)
        if waste_warning:
            warnings.append(waste_warning)

        ingredient_cost = cost_aggregation.calculate_ingredient_cost(request)
        oil_cost = cost_aggregation.calculate_oil_cost(request)
        oil_amortization = cost_aggregation.calculate_oil_amortization(request)
        energy_cost = cost_aggregation.calculate_energy_cost(request)
        labor_cost = cost_aggregation.calculate_labor_cost(request)
        overhead_cost = cost_aggregation.calculate_overhead_cost(request)
        dough_weight_total = cost_aggregation.calculate_dough_weight_total(request)

        output = resolve_output_units(request, dough_weight_total, waste_percent)

        packaging_cost = cost_aggregation.calculate_packaging_cost(request, output.sellable_units)
        total_batch_cost = cost_aggregation.sum_cost_components(
            ingredient_cost,
            oil_cost,
            oil_amortization,
            energy_cost,
            labor_cost,
            overhead_cost,
            packaging_cost,
        )
        unit_cost = total_batch_cost / output.divisor

        topping_cost_per_unit = cost_aggregation.calculate_topping_cost_per_unit(request)
        cost_per_unit_with_topping = unit_cost + topping_cost_per_unit
        base_cost = cost_per_unit_with_topping if cost_per_unit_with_topping > 0 else unit_cost

        nominal_price = strategy.calculate_price(base_cost, request)
        analysis = enrich_pricing(
            request,
            base_cost=base_cost,
            nominal_price=nominal_price,
            waste_percent=waste_percent,
            overhead_cost=overhead_cost,
            total_batch_cost=total_batch_cost,
            output_units=output.divisor,
        )
        warnings.extend(analysis.warnings)

        result = BatchCostResult(
            ingredient_cost=ingredient_cost,
            oil_cost=oil_cost,
            oil_amortization=oil_amortization,
            energy_cost=energy_cost,
            labor_cost=labor_cost,
            overhead_cost=overhead_cost,
            packaging_cost=packaging_cost,
            topping_cost_per_unit=topping_cost_per_unit,
            total_batch_cost=total_batch_cost,
            dough_weight_total=output.dough_weight_total,
            donut_count_by_weight=output.donut_count_by_weight,
            sellable_units=output.sellable_units,
            unit_cost=unit_cost,
            cost_per_unit_with_topping=cost_per_unit_with_topping,
            cost_volatility_score=analysis.cost_volatility_score,
            risk_buffer_percent=analysis.risk_buffer_percent,
            minimum_safe_price=analysis.minimum_safe_price,
            suggested_price_conservative=analysis.suggested_price_conservative,
            suggested_price_aggressive=analysis.suggested_price_aggressive,
            suggested_price=analysis.suggested_price,
            recommended_price_low=analysis.recommended_price_low,
            recommended_price_high=analysis.recommended_price_high,
            price_inc_vat=analysis.price_inc_vat,
            margin=analysis.margin,
            contribution_margin_per_unit=analysis.contribution_margin_per_unit,
            profit_per_unit_at_suggested_price=analysis.profit_per_unit_at_suggested_price,
            profit_per_batch_at_suggested_price=analysis.profit_per_batch_at_suggested_price,
            units_for_target_profit=analysis.units_for_target_profit,
            monthly_break_even_units=analysis.monthly_break_even_units,
            pricing_confidence_score=analysis.pricing_confidence_score,
            warnings=tuple(warnings),
            recommendation_note=analysis.recommendation_note,
            breakdown=build_breakdown(
                ingredient_cost,
                oil_cost,
                oil_amortization,
                energy_cost,
                labor_cost,
                overhead_cost,
                packaging_cost,
                topping_cost_per_unit,
                cost_per_unit_with_topping,
                analysis,
            ),
            calculated_at=utc_now(),
            strategy_name=strategy.name,
        )

        log_operation(
            logger,
            operation="calculate_batch_cost",
            outcome="success",
            total_batch_cost=str(total_batch_cost),
            sellable_units=output.sellable_units,
            unit_cost=str(unit_cost),
            suggested_price=str(result.suggested_price),
            warning_count=len(result.warnings),
        )
        return result


# ============================================================================
# Sample Batch
# ============================================================================


def build_sample_request() -> BatchRequest:
    """A typical donut batch: flour, sugar and frying oil with one baker."""
    return BatchRequest(
        items=(
            RecipeItem(ingredient_id=1, quantity="5", unit="kg", price_per_unit="3.00"),
            RecipeItem(ingredient_id=2, quantity="1", unit="kg", price_per_unit="8.00"),
            RecipeItem(ingredient_id=3, quantity="0.5", unit="liter", price_per_unit="12.00"),
        ),
        batch_multiplier="1",
        oil_used_liters="2",
        oil_price_per_liter="12.00",
        oil_change_cost="500",
        batches_per_oil_change=10,
        energy_kwh="5",
        energy_rate_per_kwh="2.50",
        labor=(LaborRole(name="Baker", hourly_rate="50", hours="2"),),
        overhead_allocated="100",
        theoretical_output=100,
        waste_percent="0.10",
        packaging_per_unit="0.50",
        markup="0.50",
        vat_percent="0.10",
        rounding_rule="0.05",
    )


def run_sample_calculation(engine: Optional[PricingEngine] = None) -> BatchCostResult:
    """Price the sample batch with a fresh (or the given) engine."""
    engine = engine or PricingEngine()
    return engine.calculate_batch_cost(build_sample_request())
