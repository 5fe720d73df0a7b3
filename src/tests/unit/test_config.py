"""Unit tests for Config class configuration properties.

Each property is tested for:
- Default values when no environment variables set
- Environment variable overrides
- Invalid value handling (fallback to defaults with warning)
"""

import logging

import pytest

from src.utils.config import Config, get_config, reset_config


class TestEnvironment:
    """Tests for the environment setting and singleton."""

    def test_default_is_production(self):
        config = Config()
        assert config.environment == "production"
        assert not config.is_development

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HPP_PRICING_ENV", "development")
        assert Config().is_development

    def test_invalid_environment_uses_production(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = Config("staging")
        assert config.environment == "production"
        assert "Invalid HPP_PRICING_ENV" in caplog.text

    def test_get_config_singleton(self):
        assert get_config() is get_config()

    def test_get_config_ignores_new_environment(self, caplog):
        config = get_config("production")
        with caplog.at_level(logging.WARNING):
            assert get_config("development") is config
        assert "Returning existing singleton" in caplog.text

    def test_reset_config(self):
        first = get_config()
        reset_config()
        assert get_config() is not first

    def test_metadata(self):
        config = Config()
        assert config.app_name == "HPP Pricing Engine"
        assert config.app_version == "1.0.0"
        assert config.engine_version == "1.0"
        assert "cache_ttl_minutes=60" in repr(config)


class TestCacheConfigProperties:
    """Tests for cache configuration properties."""

    def test_cache_ttl_default(self):
        config = Config()
        assert config.cache_ttl_minutes == 60
        assert config.cache_ttl_seconds == 3600

    def test_cache_ttl_env_override(self, monkeypatch):
        monkeypatch.setenv("HPP_PRICING_CACHE_TTL_MINUTES", "5")
        assert Config().cache_ttl_seconds == 300

    @pytest.mark.parametrize("raw", ["invalid", "0", "-10"])
    def test_cache_ttl_invalid_uses_default(self, monkeypatch, caplog, raw):
        monkeypatch.setenv("HPP_PRICING_CACHE_TTL_MINUTES", raw)
        with caplog.at_level(logging.WARNING):
            assert Config().cache_ttl_minutes == 60
        assert "Invalid HPP_PRICING_CACHE_TTL_MINUTES" in caplog.text

    def test_cache_enabled_default(self):
        assert Config().cache_enabled is True

    @pytest.mark.parametrize("raw, expected", [("false", False), ("0", False), ("YES", True)])
    def test_cache_enabled_env_override(self, monkeypatch, raw, expected):
        monkeypatch.setenv("HPP_PRICING_CACHE_ENABLED", raw)
        assert Config().cache_enabled is expected

    def test_cache_enabled_invalid_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("HPP_PRICING_CACHE_ENABLED", "maybe")
        with caplog.at_level(logging.WARNING):
            assert Config().cache_enabled is True
        assert "Invalid HPP_PRICING_CACHE_ENABLED" in caplog.text


class TestPricingConfigProperties:
    """Tests for strategy and log level settings."""

    def test_default_strategy(self):
        assert Config().default_strategy == "FixedMarkup"

    def test_default_strategy_env_override(self, monkeypatch):
        monkeypatch.setenv("HPP_PRICING_DEFAULT_STRATEGY", "TargetMargin")
        assert Config().default_strategy == "TargetMargin"

    def test_log_level_default(self):
        assert Config().log_level == "INFO"

    def test_log_level_env_override(self, monkeypatch):
        monkeypatch.setenv("HPP_PRICING_LOG_LEVEL", "debug")
        assert Config().log_level == "DEBUG"

    def test_log_level_invalid_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("HPP_PRICING_LOG_LEVEL", "LOUD")
        with caplog.at_level(logging.WARNING):
            assert Config().log_level == "INFO"
        assert "Invalid HPP_PRICING_LOG_LEVEL" in caplog.text

    def test_development_defaults_to_debug(self):
        assert Config("development").log_level == "DEBUG"

    def test_log_level_override_wins_in_development(self, monkeypatch):
        monkeypatch.setenv("HPP_PRICING_LOG_LEVEL", "warning")
        assert Config("development").log_level == "WARNING"
