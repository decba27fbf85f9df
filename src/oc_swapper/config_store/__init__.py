"""Configuration Store package for the swapper's config.ini.

This package provides:
- ConfigStore: Loads, bootstraps and saves the config file
- Configuration: Immutable view of the two variants and the target folder
"""

from .store import (
    ConfigStore,
    Configuration,
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    DLL_NAME,
)

__all__ = [
    "ConfigStore",
    "Configuration",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILE",
    "DLL_NAME",
]
