"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig
from .logging import configure_logging
from .marketing_cloud import (
    AuthConfig,
    IntegrationConfig,
    get_integration_config,
    soap_url_from_instance,
    soap_url_from_rest_base,
)

__all__ = [
    "AuthConfig",
    "ConfigurationError",
    "IntegrationConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "env_list",
    "get_integration_config",
    "optional_env_var",
    "require_env_vars",
    "soap_url_from_instance",
    "soap_url_from_rest_base",
]
