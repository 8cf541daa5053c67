"""Configuration system for SAE-Diagnostics."""

from .manager import (
    ConfigurationManager,
    ConfigurationError,
    DEFAULT_CONFIG,
    get_config,
    reset_config
)

__all__ = [
    'ConfigurationManager',
    'ConfigurationError',
    'DEFAULT_CONFIG',
    'get_config',
    'reset_config'
]
