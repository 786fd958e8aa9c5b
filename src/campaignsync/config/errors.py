"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""

    code = "configuration_error"
    status_code = 500


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""
