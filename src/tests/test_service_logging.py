"""Tests for service layer structured logging.

These tests verify that pricing operations emit structured log entries
with appropriate context information, and that logging never changes
calculation results.
"""

import dataclasses
import logging
from decimal import Decimal

import pytest

from src.models.batch_request import LaborRole
from src.services.exceptions import InvalidBatchRequestError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.pricing_engine import PricingEngine
from src.services.result_cache import ResultCache
from src.utils.config import Config


class TestLoggingUtilities:
    """Tests for logging utility functions."""

    def test_get_service_logger_returns_logger(self):
        """get_service_logger returns a configured Logger instance."""
        logger = get_service_logger("test_module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "hpp_pricing.services.test_module"

    def test_get_service_logger_extracts_module_name(self):
        """get_service_logger extracts module name from full path."""
        logger = get_service_logger("src.services.pricing_engine")
        assert logger.name == "hpp_pricing.services.pricing_engine"

    def test_log_operation_logs_at_info_level(self, caplog):
        """log_operation logs at INFO level by default."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="test_op", outcome="success", batch_id=123)

        assert "test_op: success" in caplog.text
        assert caplog.records[0].levelno == logging.INFO

    def test_log_operation_logs_at_custom_level(self, caplog):
        """log_operation respects custom log level."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.DEBUG):
            log_operation(logger, operation="debug_op", outcome="debug_outcome", level=logging.DEBUG)

        assert "debug_op: debug_outcome" in caplog.text

    def test_log_operation_includes_extra_context(self, caplog):
        """log_operation includes extra context in log records."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(
                logger,
                operation="context_test",
                outcome="success",
                sellable_units=90,
                unit_cost="4.0056",
            )

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.operation == "context_test"
        assert record.outcome == "success"
        assert record.sellable_units == 90
        assert record.unit_cost == "4.0056"


class TestPricingEngineLogging:
    """Tests for pricing engine logging."""

    def test_calculation_logs_success_at_info(self, engine, sample_request, caplog):
        with caplog.at_level(logging.INFO, logger="hpp_pricing.services"):
            engine.calculate_batch_cost(sample_request)

        records = [r for r in caplog.records if r.getMessage() == "calculate_batch_cost: success"]
        assert len(records) == 1
        assert records[0].sellable_units == 90
        assert Decimal(records[0].total_batch_cost) == Decimal("360.5")

    def test_stage_figures_logged_at_debug(self, engine, sample_request, caplog):
        with caplog.at_level(logging.DEBUG, logger="hpp_pricing.services"):
            engine.calculate_batch_cost(sample_request)

        assert "calculate_ingredient_cost: success" in caplog.text
        assert "resolve_output_units: success" in caplog.text

    def test_skipped_role_logged_as_warning(self, engine, sample_request, caplog):
        request = dataclasses.replace(
            sample_request,
            labor=sample_request.labor + (LaborRole(name="Cleaner", hourly_rate="20", hours="0"),),
        )
        with caplog.at_level(logging.WARNING, logger="hpp_pricing.services"):
            result = engine.calculate_batch_cost(request)

        assert result.labor_cost == Decimal("100")
        assert "calculate_labor_cost: role_skipped" in caplog.text

    def test_invalid_request_logged_as_error(self, engine, sample_request, caplog):
        request = dataclasses.replace(sample_request, batch_multiplier="0")
        with caplog.at_level(logging.ERROR, logger="hpp_pricing.services"):
            with pytest.raises(InvalidBatchRequestError):
                engine.calculate_batch_cost(request)

        assert "validate_request: invalid" in caplog.text

    def test_clear_cache_logged(self, engine, sample_request, caplog):
        engine.calculate_batch_cost(sample_request)
        with caplog.at_level(logging.INFO, logger="hpp_pricing.services"):
            engine.clear_cache()

        record = caplog.records[-1]
        assert record.getMessage() == "clear_cache: success"
        assert record.entries_removed == 1

    def test_logging_level_does_not_change_results(self, sample_request, caplog):
        quiet = PricingEngine(cache=ResultCache(), config=Config())
        with caplog.at_level(logging.CRITICAL):
            quiet_result = quiet.calculate_batch_cost(sample_request)

        verbose = PricingEngine(cache=ResultCache(), config=Config())
        with caplog.at_level(logging.DEBUG):
            verbose_result = verbose.calculate_batch_cost(sample_request)

        assert dataclasses.replace(quiet_result, calculated_at=verbose_result.calculated_at) == (
            verbose_result
        )
