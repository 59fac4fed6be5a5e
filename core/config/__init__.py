"""
Runtime Configuration Module

Provides configuration loading and management for hashtree.
"""

from .runtime import (
    ENV_PREFIX,
    RuntimeConfig,
    get_config,
    get_default_config_template,
    load_config,
    set_config,
)

__all__ = [
    "ENV_PREFIX",
    "RuntimeConfig",
    "get_config",
    "get_default_config_template",
    "load_config",
    "set_config",
]
