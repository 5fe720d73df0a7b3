"""Pytest configuration and fixtures for pricing engine tests."""

import pytest

from src.models.batch_request import BatchRequest, LaborRole, RecipeItem
from src.services.pricing_engine import PricingEngine, build_sample_request
from src.services.result_cache import ResultCache
from src.utils.config import Config, reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Run every test against default configuration.

    Clears HPP_PRICING_* overrides from the environment and resets the
    config singleton before and after the test.
    """
    for name in (
        "HPP_PRICING_ENV",
        "HPP_PRICING_CACHE_TTL_MINUTES",
        "HPP_PRICING_CACHE_ENABLED",
        "HPP_PRICING_DEFAULT_STRATEGY",
        "HPP_PRICING_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_request():
    """The reference donut batch (flour, sugar, oil; one baker; 10% waste)."""
    return build_sample_request()


@pytest.fixture
def minimal_request():
    """Smallest request that prices: one line, 10 units, no waste."""
    return BatchRequest(
        items=(RecipeItem(ingredient_id=1, quantity="2", unit="kg", price_per_unit="5"),),
        theoretical_output=10,
    )


@pytest.fixture
def baker():
    return LaborRole(name="Baker", hourly_rate="50", hours="2")


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def engine():
    """Engine with default configuration and a fresh 60 minute cache."""
    return PricingEngine(cache=ResultCache(ttl_seconds=3600), config=Config())
