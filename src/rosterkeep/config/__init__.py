"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging, level_from_environment
from .onesignal import OneSignalConfig, get_onesignal_config
from .reconcile import ReconcileConfig, get_reconcile_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "MissingConfigurationError",
    "OneSignalConfig",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "get_onesignal_config",
    "get_reconcile_config",
    "get_storage_config",
    "level_from_environment",
    "require_env_vars",
]
