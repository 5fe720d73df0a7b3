"""
Configuration management for the HPP Pricing Engine.

This module handles:
- Environment-specific configuration (development vs. production)
- Result cache settings
- Default pricing strategy selection
- Log level

Every setting can be overridden with an HPP_PRICING_* environment variable.
Invalid overrides fall back to the default and log a warning.
"""

import logging
import os
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_CACHE_TTL_MINUTES,
    DEFAULT_STRATEGY_NAME,
    ENGINE_VERSION,
)

logger = logging.getLogger(__name__)

ENV_ENVIRONMENT = "HPP_PRICING_ENV"
ENV_CACHE_TTL_MINUTES = "HPP_PRICING_CACHE_TTL_MINUTES"
ENV_CACHE_ENABLED = "HPP_PRICING_CACHE_ENABLED"
ENV_DEFAULT_STRATEGY = "HPP_PRICING_DEFAULT_STRATEGY"
ENV_LOG_LEVEL = "HPP_PRICING_LOG_LEVEL"

VALID_ENVIRONMENTS = ("production", "development")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class Config:
    """
    Application configuration manager.

    Resolves engine settings from environment variables with safe defaults.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'.
                If None, uses HPP_PRICING_ENV or defaults to production.
        """
        if environment is None:
            environment = os.environ.get(ENV_ENVIRONMENT, "production")
        if environment not in VALID_ENVIRONMENTS:
            logger.warning(
                f"Invalid {ENV_ENVIRONMENT} value '{environment}', using 'production'"
            )
            environment = "production"

        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._engine_version = ENGINE_VERSION

        self._cache_ttl_minutes = self._read_positive_int(
            ENV_CACHE_TTL_MINUTES, DEFAULT_CACHE_TTL_MINUTES
        )
        self._cache_enabled = self._read_bool(ENV_CACHE_ENABLED, True)
        self._default_strategy = (
            os.environ.get(ENV_DEFAULT_STRATEGY, "").strip() or DEFAULT_STRATEGY_NAME
        )
        self._log_level = self._read_log_level("DEBUG" if self.is_development else "INFO")

    @staticmethod
    def _read_positive_int(name: str, default: int) -> int:
        """Read a positive integer override, falling back to default."""
        raw = os.environ.get(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            logger.warning(f"Invalid {name} value '{raw}', using default {default}")
            return default
        if value <= 0:
            logger.warning(f"Invalid {name} value '{raw}', using default {default}")
            return default
        return value

    @staticmethod
    def _read_bool(name: str, default: bool) -> bool:
        """Read a boolean override, falling back to default."""
        raw = os.environ.get(name)
        if raw is None or raw.strip() == "":
            return default
        normalized = raw.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        logger.warning(f"Invalid {name} value '{raw}', using default {default}")
        return default

    @staticmethod
    def _read_log_level(default: str) -> str:
        raw = os.environ.get(ENV_LOG_LEVEL)
        if raw is None or raw.strip() == "":
            return default
        level = raw.strip().upper()
        if level not in VALID_LOG_LEVELS:
            logger.warning(f"Invalid {ENV_LOG_LEVEL} value '{raw}', using default {default}")
            return default
        return level

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def engine_version(self) -> str:
        """Pricing engine version reported in diagnostics."""
        return self._engine_version

    @property
    def cache_ttl_minutes(self) -> int:
        """Lifetime of a cached calculation result, in minutes."""
        return self._cache_ttl_minutes

    @property
    def cache_ttl_seconds(self) -> int:
        """Lifetime of a cached calculation result, in seconds."""
        return self._cache_ttl_minutes * 60

    @property
    def cache_enabled(self) -> bool:
        """Whether the engine memoizes calculation results."""
        return self._cache_enabled

    @property
    def default_strategy(self) -> str:
        """Pricing strategy name used when neither engine nor request names one."""
        return self._default_strategy

    @property
    def log_level(self) -> str:
        """Logging level name for the command line; DEBUG by default in development."""
        return self._log_level

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(environment='{self.environment}', "
            f"cache_ttl_minutes={self._cache_ttl_minutes}, "
            f"default_strategy='{self._default_strategy}')"
        )


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument.

    Args:
        environment: Optional environment for initial creation. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None
