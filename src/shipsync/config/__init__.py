"""Application configuration helpers."""

from __future__ import annotations

from .carrier import CarrierConfig, basic_auth_header, get_carrier_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, data_dir, get_database_config, get_database_uri
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CarrierConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "basic_auth_header",
    "configure_logging",
    "data_dir",
    "get_carrier_config",
    "get_database_config",
    "get_database_uri",
    "get_sync_config",
    "require_env_var",
    "require_env_vars",
]
