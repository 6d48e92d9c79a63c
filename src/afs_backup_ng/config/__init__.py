"""Configuration system for afs-backup-ng.

This module provides TOML-based configuration loading, validation,
and schema definitions for backup runs.
"""

from .loader import (
    ConfigError,
    find_config_file,
    find_defaults_file,
    load_config,
    state_dir_from_env,
)
from .schema import (
    MODE_GENERIC,
    MODE_TSM,
    MODE_VOSBACKUP,
    CommandsConfig,
    Config,
    GlobalConfig,
    InventoryConfig,
    ModeConfig,
    PolicyConfig,
)

__all__ = [
    "MODE_GENERIC",
    "MODE_TSM",
    "MODE_VOSBACKUP",
    "CommandsConfig",
    "Config",
    "GlobalConfig",
    "InventoryConfig",
    "ModeConfig",
    "PolicyConfig",
    "load_config",
    "find_config_file",
    "find_defaults_file",
    "state_dir_from_env",
    "ConfigError",
]
