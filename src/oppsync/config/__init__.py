"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env, optional_int_env
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .sources import (
    CsvSourceConfig,
    UsaSpendingConfig,
    get_csv_source_config,
    get_usaspending_config,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "CsvSourceConfig",
    "DatabaseConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "UsaSpendingConfig",
    "configure_logging",
    "get_csv_source_config",
    "get_database_config",
    "get_storage_config",
    "get_usaspending_config",
    "optional_env",
    "optional_int_env",
]
