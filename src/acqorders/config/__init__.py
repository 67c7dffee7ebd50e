"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .okapi import OkapiConfig, build_okapi_config, get_okapi_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "OkapiConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "build_okapi_config",
    "configure_logging",
    "get_okapi_config",
    "require_env_vars",
]
