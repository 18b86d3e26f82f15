"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .firestore import FirestoreCollections, FirestoreConfig, get_firestore_config
from .http_resilience import READ_METHODS, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconciliation import (
    DEFAULT_ORDER_NUMBER_PREFIX,
    Backend,
    ReconciliationConfig,
    get_reconciliation_config,
    parse_backend,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "READ_METHODS",
    "DEFAULT_ORDER_NUMBER_PREFIX",
    "Backend",
    "ConfigurationError",
    "DatabaseConfig",
    "FirestoreCollections",
    "FirestoreConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_database_config",
    "get_firestore_config",
    "get_reconciliation_config",
    "get_storage_config",
    "optional_env_var",
    "parse_backend",
    "require_env_var",
    "require_env_vars",
]
